# incomplete_orders/services.py
import logging
from typing import Dict, Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from .models import IncompleteOrder, IncompleteOrderStatus, TERMINAL_STATUSES

logger = logging.getLogger(__name__)


def find_pending(session_id: str) -> IncompleteOrder | None:
    if not session_id:
        return None
    return (
        IncompleteOrder.objects
        .filter(session_id=session_id, status=IncompleteOrderStatus.PENDING)
        .first()
    )


def update_pending(record_id, fields: Dict[str, Any]) -> IncompleteOrder:
    """
    Write ``fields`` into a pending row. Converted/hidden rows are never touched:
    raises IncompleteOrder.DoesNotExist for them just like for a missing id.
    """
    fields = {**fields, "last_updated_at": timezone.now()}
    fields.pop("session_id", None)
    fields.pop("status", None)
    updated = IncompleteOrder.objects.filter(
        pk=record_id, status=IncompleteOrderStatus.PENDING
    ).update(**fields)
    if not updated:
        raise IncompleteOrder.DoesNotExist(f"no pending incomplete order #{record_id}")
    return IncompleteOrder.objects.get(pk=record_id)


def create_pending(*, session_id: str, fields: Dict[str, Any]) -> tuple[IncompleteOrder, bool]:
    """
    Insert the pending row for ``session_id``. If one already exists (second
    writer, beacon racing a debounced save) the existing row is updated instead.
    Returns (record, created).
    """
    existing = find_pending(session_id)
    if existing:
        try:
            return update_pending(existing.pk, fields), False
        except IncompleteOrder.DoesNotExist:
            # converted or hidden since the lookup; the session needs a new row
            pass

    data = {k: v for k, v in fields.items() if k not in ("status", "session_id")}
    try:
        with transaction.atomic():
            record = IncompleteOrder.objects.create(
                session_id=session_id,
                status=IncompleteOrderStatus.PENDING,
                last_updated_at=timezone.now(),
                **data,
            )
        return record, True
    except IntegrityError:
        # lost the race against another insert for the same session
        existing = find_pending(session_id)
        if existing is None:
            raise
        logger.info("incomplete order for session %s already pending, updating #%s", session_id, existing.pk)
        return update_pending(existing.pk, fields), False


def mark_converted_by_session(session_id: str, order_id: str = "") -> int:
    """
    Order success पर call karo. PENDING rows (same session) -> CONVERTED.
    Returns: count converted
    """
    if not session_id:
        return 0
    return IncompleteOrder.objects.filter(
        session_id=session_id, status=IncompleteOrderStatus.PENDING
    ).update(
        status=IncompleteOrderStatus.CONVERTED,
        converted_order_id=str(order_id or "")[:64],
        last_updated_at=timezone.now(),
    )


def hide_records(queryset) -> int:
    """Admin triage: pending -> hidden. Terminal rows stay as they are."""
    return queryset.filter(status=IncompleteOrderStatus.PENDING).update(
        status=IncompleteOrderStatus.HIDDEN,
        last_updated_at=timezone.now(),
    )


def purge_terminal(older_than) -> int:
    qs = IncompleteOrder.objects.filter(
        status__in=TERMINAL_STATUSES, last_updated_at__lt=older_than
    )
    return qs.delete()[0]


def serialize_record(record: IncompleteOrder) -> Dict[str, Any]:
    return {
        "id": record.pk,
        "session_id": record.session_id,
        "full_name": record.full_name,
        "phone": record.phone,
        "email": record.email,
        "address": record.address,
        "shipping_location": record.shipping_location,
        "payment_method": record.payment_method,
        "notes": record.notes,
        "cart_items": record.cart_items or [],
        "subtotal": str(record.subtotal),
        "shipping_fee": str(record.shipping_fee),
        "total": str(record.total),
        "source": record.source,
        "status": record.status,
        "converted_order_id": record.converted_order_id or None,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "last_updated_at": record.last_updated_at.isoformat() if record.last_updated_at else None,
    }
