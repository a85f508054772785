# incomplete_orders/validators.py
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from .models import IncompleteOrder, IncompleteOrderSource

TEXT_FIELDS = (
    "full_name", "phone", "email", "address",
    "shipping_location", "payment_method", "notes",
)
MONEY_FIELDS = ("subtotal", "shipping_fee", "total")

# DecimalField(max_digits=12, decimal_places=2)
MONEY_STEP = Decimal("0.01")
MONEY_LIMIT = Decimal("1e10")


def clean_text(value):
    """Trim; blank -> None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def has_contact(full_name, phone) -> bool:
    """At least a name or a phone number, otherwise there is nobody to follow up with."""
    return bool(clean_text(full_name) or clean_text(phone))


def to_decimal(value, field="amount") -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation(value)
        rounded = amount.quantize(MONEY_STEP)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if abs(rounded) >= MONEY_LIMIT:
        raise ValidationError(f"{field} is out of range")
    return amount


def clip_text(value, limit):
    """clean_text, then cut to the column width."""
    value = clean_text(value)
    if value is None or not limit:
        return value
    return value[:limit]


def _max_length(name):
    return IncompleteOrder._meta.get_field(name).max_length


def clean_session_id(value):
    """Required, and never cut: a shortened id would point at somebody else's row."""
    session_id = clean_text(value)
    if not session_id:
        raise ValidationError("session_id is required")
    if len(session_id) > _max_length("session_id"):
        raise ValidationError("session_id is too long")
    return session_id


def clean_cart_items(items):
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("cart_items must be a list")

    cleaned = []
    for it in items:
        if not isinstance(it, dict) or not it.get("product_id"):
            raise ValidationError("each cart item needs a product_id")
        try:
            qty = int(it.get("quantity") or 0)
        except (TypeError, ValueError):
            raise ValidationError("cart item quantity must be an integer")
        cleaned.append({
            "product_id": str(it["product_id"]),
            "product_name": it.get("product_name") or "Unknown",
            "product_image": it.get("product_image") or None,
            "quantity": qty,
            "size": it.get("size") or None,
            "color": it.get("color") or None,
            # keep the number as sent, JSONField can't hold Decimal
            "price": str(to_decimal(it.get("price"), "price")),
        })
    return cleaned


def clean_record_payload(data: dict) -> dict:
    """
    Validate an incoming capture payload (create / update / beacon).
    Returns model field values; raises ValidationError.
    """
    if not isinstance(data, dict):
        raise ValidationError("payload must be a JSON object")

    fields = {name: clip_text(data.get(name), _max_length(name)) for name in TEXT_FIELDS}
    if not has_contact(fields["full_name"], fields["phone"]):
        raise ValidationError("full_name or phone is required")

    if fields["email"]:
        try:
            validate_email(fields["email"])
        except ValidationError:
            # a half-typed email is still worth keeping the rest of the row for
            fields["email"] = None

    fields["cart_items"] = clean_cart_items(data.get("cart_items"))
    for name in MONEY_FIELDS:
        fields[name] = to_decimal(data.get(name), name)

    source = data.get("source") or IncompleteOrderSource.CHECKOUT
    if source not in IncompleteOrderSource.values:
        raise ValidationError(f"unknown source {source!r}")
    fields["source"] = source
    return fields
