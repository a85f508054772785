# incomplete_orders/admin.py
import csv
import json
from decimal import Decimal

from django.contrib import admin, messages
from django.http import HttpResponse
from django.utils import timezone
from django.utils.html import format_html, format_html_join

from .models import IncompleteOrder
from .services import hide_records, serialize_record

CSV_COLUMNS = (
    "id", "session_id", "full_name", "phone", "email", "address",
    "shipping_location", "payment_method", "notes", "items",
    "subtotal", "shipping_fee", "total", "source", "status",
    "converted_order_id", "created_at", "last_updated_at",
)


def _to_money(v):
    try:
        return f"৳{Decimal(str(v)):.2f}"
    except Exception:
        return f"৳{v}"


def _items_summary(items):
    parts = []
    for it in items or []:
        variant = " / ".join(x for x in (it.get("size"), it.get("color")) if x)
        name = it.get("product_name") or it.get("product_id") or "-"
        parts.append(f"{name}{f' ({variant})' if variant else ''} x{it.get('quantity') or 0}")
    return "; ".join(parts)


@admin.register(IncompleteOrder)
class IncompleteOrderAdmin(admin.ModelAdmin):
    list_display = (
        "full_name", "phone", "source", "status", "total", "created_at", "last_updated_at",
        "converted_order_id",
    )
    list_filter = ("status", "source", "created_at")
    search_fields = ("full_name", "phone", "email", "session_id", "converted_order_id")
    readonly_fields = (
        "session_id", "status", "converted_order_id", "created_at", "last_updated_at",
        "cart_items_pretty", "cart_items_raw",
    )
    exclude = ("cart_items",)

    fieldsets = (
        (None, {
            "fields": ("session_id", "source", "status", "converted_order_id")
        }),
        ("Customer", {
            "fields": ("full_name", "phone", "email", "address", "shipping_location", "payment_method", "notes")
        }),
        ("Cart", {
            "fields": ("cart_items_pretty", "cart_items_raw", "subtotal", "shipping_fee", "total")
        }),
        ("Timestamps", {
            "fields": ("created_at", "last_updated_at")
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        # converted / hidden rows are final
        if obj is not None and not obj.is_pending:
            return self.readonly_fields + (
                "full_name", "phone", "email", "address", "shipping_location",
                "payment_method", "notes", "subtotal", "shipping_fee", "total", "source",
            )
        return self.readonly_fields

    def has_add_permission(self, request):
        return False

    # --- Pretty parsed items (human readable) ---
    def cart_items_pretty(self, obj: IncompleteOrder):
        items = obj.cart_items or []
        if not items:
            return format_html("<em>No items captured.</em>")

        rows = []
        for it in items:
            pid = it.get("product_id") or "-"
            name = it.get("product_name") or f"Product {pid}"
            variant = " / ".join(x for x in (it.get("size"), it.get("color")) if x)
            qty = it.get("quantity") or 0
            price = it.get("price") or 0
            line_total = Decimal(str(price)) * Decimal(str(qty))

            rows.append((
                f"{name} ({variant})" if variant else name,
                pid,
                qty,
                _to_money(price),
                _to_money(line_total),
            ))

        list_html = format_html_join(
            "",
            "<div>• <strong>{}</strong> <span style='opacity:.7'>({})</span> — qty <strong>{}</strong> — price {} — line total {}</div>",
            rows
        )
        # captured totals, not recomputed: this is what the shopper saw
        footer = format_html(
            "<div style='margin-top:8px'>Subtotal {} · Shipping {} · <strong>Total {}</strong></div>",
            _to_money(obj.subtotal), _to_money(obj.shipping_fee), _to_money(obj.total),
        )
        return format_html("{}{}", list_html, footer)

    cart_items_pretty.short_description = "Cart items (parsed)"

    def cart_items_raw(self, obj: IncompleteOrder):
        pretty = json.dumps(obj.cart_items or [], indent=2, ensure_ascii=False)
        return format_html(
            "<details><summary>Show raw JSON</summary>"
            "<pre style='white-space:pre-wrap; font-size:12px; background:#f6f8fa; padding:8px; border-radius:6px;'>{}</pre>"
            "</details>",
            pretty
        )

    cart_items_raw.short_description = "Cart items (raw JSON)"

    # --- Bulk actions ---
    actions = ["hide_selected", "export_selected_csv"]

    @admin.action(description="Hide selected (pending only)")
    def hide_selected(self, request, queryset):
        hidden = hide_records(queryset)
        skipped = queryset.count() - hidden
        self.message_user(request, f"{hidden} incomplete order(s) hidden.", messages.SUCCESS)
        if skipped > 0:
            self.message_user(request, f"{skipped} already converted/hidden, left unchanged.", messages.WARNING)

    @admin.action(description="Export selected as CSV")
    def export_selected_csv(self, request, queryset):
        stamp = timezone.now().strftime("%Y%m%d-%H%M")
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="incomplete-orders-{stamp}.csv"'

        writer = csv.writer(response)
        writer.writerow(CSV_COLUMNS)
        for obj in queryset:
            row = serialize_record(obj)
            row["items"] = _items_summary(row["cart_items"])
            writer.writerow([row.get(col) or "" for col in CSV_COLUMNS])
        return response
