"""Tests for incomplete_orders.services (ORM side)."""

from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from incomplete_orders.models import IncompleteOrder, IncompleteOrderStatus
from incomplete_orders.services import (
    create_pending,
    find_pending,
    hide_records,
    mark_converted_by_session,
    purge_terminal,
    serialize_record,
    update_pending,
)
from incomplete_orders.validators import clean_record_payload

pytestmark = pytest.mark.django_db


def test_create_pending_stores_snapshot_as_given(record_payload):
    record, created = create_pending(session_id="s-1", fields=clean_record_payload(record_payload))

    assert created is True
    record.refresh_from_db()
    assert record.status == IncompleteOrderStatus.PENDING
    assert record.full_name == "Jane Doe"
    assert record.notes is None
    assert record.subtotal == Decimal("1000")
    assert record.shipping_fee == Decimal("50")
    assert record.total == Decimal("1050")
    assert record.cart_items[0]["product_name"] == "Trail Helmet"
    assert record.cart_items[0]["price"] == "500"


def test_second_create_for_session_updates_the_pending_row(record_payload):
    first, _ = create_pending(session_id="s-1", fields=clean_record_payload(record_payload))
    second, created = create_pending(
        session_id="s-1", fields=clean_record_payload({**record_payload, "address": "Uttara"})
    )

    assert created is False
    assert second.pk == first.pk
    assert IncompleteOrder.objects.filter(session_id="s-1").count() == 1
    assert second.address == "Uttara"


def test_create_race_falls_back_to_update(record_payload):
    existing, _ = create_pending(session_id="s-1", fields=clean_record_payload(record_payload))

    # the other writer's insert landed between our lookup and our insert
    with mock.patch("incomplete_orders.services.find_pending", side_effect=[None, existing]):
        record, created = create_pending(
            session_id="s-1", fields=clean_record_payload({**record_payload, "phone": "01999999999"})
        )

    assert created is False
    assert record.pk == existing.pk
    assert record.phone == "01999999999"
    assert IncompleteOrder.objects.count() == 1


def test_create_after_row_left_pending_inserts_a_new_row(pending_record, record_payload):
    # converted between our lookup and our update
    IncompleteOrder.objects.filter(pk=pending_record.pk).update(status=IncompleteOrderStatus.CONVERTED)

    with mock.patch("incomplete_orders.services.find_pending", return_value=pending_record):
        record, created = create_pending(session_id="sess-1", fields=clean_record_payload(record_payload))

    assert created is True
    assert record.pk != pending_record.pk
    assert record.status == IncompleteOrderStatus.PENDING
    pending_record.refresh_from_db()
    assert pending_record.status == IncompleteOrderStatus.CONVERTED


def test_converted_order_id_is_cut_to_column_width(pending_record):
    mark_converted_by_session("sess-1", "O" * 80)

    pending_record.refresh_from_db()
    assert pending_record.converted_order_id == "O" * 64


def test_database_rejects_second_pending_row_for_session(pending_record):
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            IncompleteOrder.objects.create(session_id=pending_record.session_id, full_name="Dup")


def test_converted_rows_do_not_block_a_new_pending_row(pending_record, record_payload):
    mark_converted_by_session(pending_record.session_id, "ORD-1")

    record, created = create_pending(session_id=pending_record.session_id, fields=clean_record_payload(record_payload))

    assert created is True
    assert record.pk != pending_record.pk


def test_update_pending_refreshes_last_updated_at(pending_record, record_payload):
    before = pending_record.last_updated_at

    record = update_pending(pending_record.pk, clean_record_payload({**record_payload, "notes": " call after 6pm "}))

    assert record.notes == "call after 6pm"
    assert record.last_updated_at >= before


@pytest.mark.parametrize("status", [IncompleteOrderStatus.CONVERTED, IncompleteOrderStatus.HIDDEN])
def test_terminal_rows_are_never_updated(pending_record, record_payload, status):
    IncompleteOrder.objects.filter(pk=pending_record.pk).update(status=status)

    with pytest.raises(IncompleteOrder.DoesNotExist):
        update_pending(pending_record.pk, clean_record_payload({**record_payload, "full_name": "Changed"}))

    pending_record.refresh_from_db()
    assert pending_record.full_name == "Jane Doe"
    assert pending_record.status == status


def test_update_pending_ignores_status_in_fields(pending_record, record_payload):
    fields = {**clean_record_payload(record_payload), "status": "converted", "session_id": "other"}

    record = update_pending(pending_record.pk, fields)

    assert record.status == IncompleteOrderStatus.PENDING
    assert record.session_id == "sess-1"


def test_mark_converted_by_session(pending_record):
    count = mark_converted_by_session("sess-1", "ORD-1")

    pending_record.refresh_from_db()
    assert count == 1
    assert pending_record.status == IncompleteOrderStatus.CONVERTED
    assert pending_record.converted_order_id == "ORD-1"
    assert find_pending("sess-1") is None


def test_mark_converted_without_session_is_noop(pending_record):
    assert mark_converted_by_session("", "ORD-1") == 0
    assert mark_converted_by_session("unknown", "ORD-1") == 0


def test_converted_rows_are_not_reconverted(pending_record):
    mark_converted_by_session("sess-1", "ORD-1")

    assert mark_converted_by_session("sess-1", "ORD-2") == 0
    pending_record.refresh_from_db()
    assert pending_record.converted_order_id == "ORD-1"


def test_hide_records_only_touches_pending(pending_record, record_payload):
    converted, _ = create_pending(session_id="sess-2", fields=clean_record_payload(record_payload))
    mark_converted_by_session("sess-2", "ORD-9")

    hidden = hide_records(IncompleteOrder.objects.all())

    assert hidden == 1
    assert IncompleteOrder.objects.get(pk=pending_record.pk).status == IncompleteOrderStatus.HIDDEN
    assert IncompleteOrder.objects.get(pk=converted.pk).status == IncompleteOrderStatus.CONVERTED


def test_purge_terminal_keeps_pending_and_recent(pending_record, record_payload):
    old_converted, _ = create_pending(session_id="sess-2", fields=clean_record_payload(record_payload))
    mark_converted_by_session("sess-2", "ORD-2")
    recent_hidden, _ = create_pending(session_id="sess-3", fields=clean_record_payload(record_payload))
    hide_records(IncompleteOrder.objects.filter(pk=recent_hidden.pk))

    long_ago = timezone.now() - timedelta(days=200)
    IncompleteOrder.objects.filter(pk__in=[pending_record.pk, old_converted.pk]).update(last_updated_at=long_ago)

    deleted = purge_terminal(timezone.now() - timedelta(days=90))

    assert deleted == 1
    assert set(IncompleteOrder.objects.values_list("pk", flat=True)) == {pending_record.pk, recent_hidden.pk}


def test_serialize_record(pending_record):
    pending_record.refresh_from_db()
    data = serialize_record(pending_record)

    assert data["id"] == pending_record.pk
    assert data["status"] == "pending"
    assert data["total"] == "1050.00"
    assert data["converted_order_id"] is None
    assert data["cart_items"][0]["product_id"] == "P1"
