"""Shared pytest fixtures for incomplete_orders tests."""

import pytest

from incomplete_orders.capture import IncompleteOrderCapture, RecordNotFound


class FakeStore:
    """In-memory stand-in for OrmStore/HttpStore that records every call."""

    def __init__(self):
        self.records = {}
        self.calls = []
        self.fail_next = None
        self._next_id = 1

    def _maybe_fail(self):
        if self.fail_next is not None:
            err, self.fail_next = self.fail_next, None
            raise err

    async def find_pending(self, session_id):
        self.calls.append(("find_pending", session_id))
        self._maybe_fail()
        for rid, rec in self.records.items():
            if rec["session_id"] == session_id and rec["status"] == "pending":
                return rid
        return None

    async def create(self, session_id, payload):
        self.calls.append(("create", session_id))
        self._maybe_fail()
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = {
            **payload,
            "id": rid,
            "session_id": session_id,
            "status": "pending",
            "converted_order_id": None,
        }
        return rid

    async def update(self, record_id, payload):
        self.calls.append(("update", record_id))
        self._maybe_fail()
        rec = self.records.get(record_id)
        if rec is None or rec["status"] != "pending":
            raise RecordNotFound(f"no pending #{record_id}")
        rec.update(payload)

    async def convert_pending(self, session_id, order_id):
        self.calls.append(("convert_pending", session_id))
        self._maybe_fail()
        n = 0
        for rec in self.records.values():
            if rec["session_id"] == session_id and rec["status"] == "pending":
                rec["status"] = "converted"
                rec["converted_order_id"] = order_id
                n += 1
        return n

    def writes(self):
        return [c for c in self.calls if c[0] in ("create", "update")]

    def pending_for(self, session_id):
        return [r for r in self.records.values() if r["session_id"] == session_id and r["status"] == "pending"]


class CollectingReporter:
    def __init__(self):
        self.errors = []

    def report(self, operation, error, **context):
        self.errors.append((operation, error, context))


class RecordingBeacon:
    def __init__(self, result=True):
        self.sent = []
        self.result = result

    def send(self, url, body):
        self.sent.append((url, body))
        return self.result


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def reporter():
    return CollectingReporter()


@pytest.fixture
def beacon():
    return RecordingBeacon()


@pytest.fixture
def session_storage():
    """Plays the browser's sessionStorage."""
    return {}


@pytest.fixture
def make_capture(store, reporter, beacon, session_storage):
    """Build a capture controller wired to the fakes; short debounce for tests."""

    def _make(scope="checkout", delay=0.05, **kwargs):
        kwargs.setdefault("storage", session_storage)
        return IncompleteOrderCapture(
            scope,
            store=store,
            reporter=reporter,
            beacon=beacon,
            beacon_url="http://shop.test/incomplete-orders/beacon/",
            delay=delay,
            **kwargs,
        )

    return _make


@pytest.fixture
def jane_snapshot():
    """The checkout form with Jane's details and two units of P1."""
    return {
        "full_name": "Jane Doe",
        "phone": "",
        "cart_items": [
            {
                "product_id": "P1",
                "quantity": 2,
                "product": {"id": "P1", "name": "Trail Helmet", "price": 500, "images": ["/media/p1.jpg"]},
            }
        ],
        "subtotal": 1000,
        "shipping_fee": 50,
        "total": 1050,
        "source": "checkout",
    }


@pytest.fixture
def record_payload():
    """A valid JSON body for the create/update endpoints."""
    return {
        "session_id": "sess-1",
        "full_name": "  Jane Doe ",
        "phone": "01711000000",
        "email": "jane@example.com",
        "address": "House 4, Road 2, Dhanmondi",
        "shipping_location": "inside_dhaka",
        "payment_method": "cod",
        "notes": "",
        "cart_items": [
            {
                "product_id": "P1",
                "product_name": "Trail Helmet",
                "product_image": "/media/p1.jpg",
                "quantity": 2,
                "size": "M",
                "color": "Black",
                "price": "500",
            }
        ],
        "subtotal": "1000",
        "shipping_fee": "50",
        "total": "1050",
        "source": "checkout",
    }


@pytest.fixture
def pending_record(db, record_payload):
    from incomplete_orders.services import create_pending
    from incomplete_orders.validators import clean_record_payload

    record, _ = create_pending(session_id="sess-1", fields=clean_record_payload(record_payload))
    return record
