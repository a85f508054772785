"""
Form snapshots handed over by the checkout / quick-buy UI.

A snapshot is what the shopper currently sees: contact fields, cart lines and
the totals the UI computed. Cart lines are denormalized here (name, image,
price copied in) so a stored row does not depend on the product still existing.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..validators import clean_text, has_contact

CHECKOUT = "checkout"
QUICK_BUY = "quick_buy"
SCOPES = (CHECKOUT, QUICK_BUY)


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None
    product_name: Optional[str] = None
    product_image: Optional[str] = None
    price: Decimal = Decimal("0")

    @classmethod
    def from_cart_item(cls, item: Dict[str, Any]) -> "CartLine":
        """
        Accepts either a flat line or the storefront cart shape, where details
        live under ``product`` = {name, price, images[]}.
        """
        if not isinstance(item, dict):
            raise TypeError(f"cart item must be a mapping, got {type(item).__name__}")
        product = item.get("product") or {}
        if not isinstance(product, dict):
            raise TypeError(f"cart item product must be a mapping, got {type(product).__name__}")
        images = product.get("images") or []
        if isinstance(images, str):
            images = [images]
        return cls(
            product_id=str(item.get("product_id") or product.get("id") or ""),
            quantity=int(item.get("quantity") or 0),
            size=item.get("size") or None,
            color=item.get("color") or None,
            product_name=item.get("product_name") or product.get("name"),
            product_image=item.get("product_image") or (images[0] if images else None),
            price=_money(item.get("price", product.get("price"))),
        )

    def to_record_item(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name or "Unknown",
            "product_image": self.product_image,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
            "price": str(self.price),
        }


@dataclass(frozen=True)
class CheckoutSnapshot:
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    shipping_location: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    cart_items: Sequence[CartLine] = field(default_factory=tuple)
    subtotal: Decimal = Decimal("0")
    shipping_fee: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    source: str = CHECKOUT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckoutSnapshot":
        if not isinstance(data.get("cart_items") or [], (list, tuple)):
            raise TypeError("cart_items must be a list")
        lines = tuple(
            it if isinstance(it, CartLine) else CartLine.from_cart_item(it)
            for it in (data.get("cart_items") or [])
        )
        return cls(
            full_name=data.get("full_name"),
            phone=data.get("phone"),
            email=data.get("email"),
            address=data.get("address"),
            shipping_location=data.get("shipping_location"),
            payment_method=data.get("payment_method"),
            notes=data.get("notes"),
            cart_items=lines,
            subtotal=_money(data.get("subtotal")),
            shipping_fee=_money(data.get("shipping_fee")),
            total=_money(data.get("total")),
            source=data.get("source") or CHECKOUT,
        )

    @classmethod
    def coerce(cls, data, source: str) -> "CheckoutSnapshot":
        """The capturing scope always wins over whatever source the form sent."""
        if isinstance(data, cls):
            return dataclasses.replace(data, source=source)
        if not isinstance(data, dict):
            raise TypeError(f"form data must be a mapping, got {type(data).__name__}")
        return cls.from_dict({**data, "source": source})

    @property
    def qualifies(self) -> bool:
        return has_contact(self.full_name, self.phone)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe record fields (text trimmed, money as strings)."""
        items: List[Dict[str, Any]] = [line.to_record_item() for line in self.cart_items]
        return {
            "full_name": clean_text(self.full_name),
            "phone": clean_text(self.phone),
            "email": clean_text(self.email),
            "address": clean_text(self.address),
            "shipping_location": clean_text(self.shipping_location),
            "payment_method": clean_text(self.payment_method),
            "notes": clean_text(self.notes),
            "cart_items": items,
            "subtotal": str(self.subtotal),
            "shipping_fee": str(self.shipping_fee),
            "total": str(self.total),
            "source": self.source,
        }
