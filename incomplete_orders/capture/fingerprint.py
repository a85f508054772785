import hashlib
import json
from decimal import Decimal
from typing import Optional

from ..validators import clean_text
from .snapshot import CheckoutSnapshot

CONTACT_FIELDS = (
    "full_name", "phone", "email", "address",
    "shipping_location", "payment_method", "notes",
)


def _num(value) -> str:
    # 1050, 1050.0 and Decimal("1050.00") must hash the same
    return format(Decimal(str(value)).normalize(), "f")


def fingerprint(snapshot: CheckoutSnapshot) -> str:
    """
    Stable hash of what the shopper can see: contact fields, cart identities and
    totals. Denormalized product details and timestamps are left out.
    """
    state = {name: clean_text(getattr(snapshot, name)) for name in CONTACT_FIELDS}
    state["cart_items"] = [
        {
            "product_id": line.product_id,
            "quantity": line.quantity,
            "size": line.size,
            "color": line.color,
        }
        for line in snapshot.cart_items
    ]
    state["subtotal"] = _num(snapshot.subtotal)
    state["shipping_fee"] = _num(snapshot.shipping_fee)
    state["total"] = _num(snapshot.total)

    raw = json.dumps(state, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def has_changed(snapshot: CheckoutSnapshot, last_fingerprint: Optional[str]) -> bool:
    return fingerprint(snapshot) != last_fingerprint
