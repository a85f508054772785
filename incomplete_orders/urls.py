# incomplete_orders/urls.py
from django.urls import path
from . import views

app_name = "incomplete_orders"

urlpatterns = [
    path("pending/", views.pending_lookup, name="pending"),
    path("create/", views.create_record, name="create"),
    path("<int:record_id>/update/", views.update_record, name="update"),
    path("beacon/", views.beacon_capture, name="beacon"),
    path("convert/", views.convert_session, name="convert"),
]
