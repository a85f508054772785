"""
URL configuration for storefront project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # incomplete-order capture (checkout / quick-buy form autosave)
    path("incomplete-orders/", include("incomplete_orders.urls", namespace="incomplete_orders")),
]
