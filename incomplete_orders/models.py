# incomplete_orders/models.py
from django.db import models
from django.db.models import Q
from django.utils import timezone


class IncompleteOrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONVERTED = "converted", "Converted"
    HIDDEN = "hidden", "Hidden"


class IncompleteOrderSource(models.TextChoices):
    CHECKOUT = "checkout", "Checkout"
    QUICK_BUY = "quick_buy", "Quick buy"


TERMINAL_STATUSES = (IncompleteOrderStatus.CONVERTED, IncompleteOrderStatus.HIDDEN)


class IncompleteOrder(models.Model):
    session_id = models.CharField(max_length=64, db_index=True)

    # Contact / delivery (trimmed, null when blank)
    full_name = models.CharField(max_length=200, blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True, db_index=True)
    email = models.EmailField(max_length=254, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    shipping_location = models.CharField(max_length=120, blank=True, null=True)
    payment_method = models.CharField(max_length=64, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    # Denormalized cart lines, never a live product reference
    cart_items = models.JSONField(default=list, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    source = models.CharField(
        max_length=16,
        choices=IncompleteOrderSource.choices,
        default=IncompleteOrderSource.CHECKOUT,
    )
    status = models.CharField(
        max_length=16,
        choices=IncompleteOrderStatus.choices,
        default=IncompleteOrderStatus.PENDING,
        db_index=True,
    )
    converted_order_id = models.CharField(max_length=64, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    last_updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["session_id", "status"], name="incomplete_session_status_idx"),
            models.Index(fields=["phone", "status"], name="incomplete_phone_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["session_id"],
                condition=Q(status="pending"),
                name="incomplete_order_one_pending_per_session",
            ),
        ]
        verbose_name = "Incomplete order"
        verbose_name_plural = "Incomplete orders"

    def __str__(self):
        who = self.full_name or self.phone or self.session_id
        return f"{who} [{self.status}]"

    @property
    def is_pending(self) -> bool:
        return self.status == IncompleteOrderStatus.PENDING

    @property
    def item_count(self) -> int:
        return sum(int(it.get("quantity") or 0) for it in (self.cart_items or []))
