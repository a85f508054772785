# incomplete_orders/views.py
import json
import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse, HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .models import IncompleteOrder
from .services import (
    create_pending,
    find_pending,
    mark_converted_by_session,
    update_pending,
)
from .validators import clean_record_payload, clean_session_id, clean_text

logger = logging.getLogger(__name__)


def _json_body(request: HttpRequest) -> dict:
    # sendBeacon posts text/plain, fetch posts application/json; both carry raw JSON
    try:
        data = json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError("body must be JSON")
    if not isinstance(data, dict):
        raise ValidationError("body must be a JSON object")
    return data


def _bad_request(err: ValidationError):
    return JsonResponse({"ok": False, "message": "; ".join(err.messages)}, status=400)


@require_GET
def pending_lookup(request: HttpRequest):
    """GET ?session_id=… -> id of the session's pending row (or null)."""
    session_id = clean_text(request.GET.get("session_id"))
    if not session_id:
        return JsonResponse({"ok": False, "message": "session_id is required"}, status=400)
    record = find_pending(session_id)
    return JsonResponse({"ok": True, "id": record.pk if record else None})


@csrf_exempt
@require_POST
def create_record(request: HttpRequest):
    """
    Expects JSON:
      session_id: string
      full_name / phone / email / address / shipping_location / payment_method / notes
      cart_items: [{product_id, product_name, product_image, quantity, size, color, price}]
      subtotal, shipping_fee, total, source
    """
    try:
        data = _json_body(request)
        session_id = clean_session_id(data.get("session_id"))
        fields = clean_record_payload(data)
    except ValidationError as err:
        return _bad_request(err)

    record, created = create_pending(session_id=session_id, fields=fields)
    return JsonResponse(
        {"ok": True, "id": record.pk, "status": record.status, "created": created},
        status=201 if created else 200,
    )


@csrf_exempt
@require_POST
def update_record(request: HttpRequest, record_id: int):
    try:
        fields = clean_record_payload(_json_body(request))
    except ValidationError as err:
        return _bad_request(err)

    try:
        record = update_pending(record_id, fields)
    except IncompleteOrder.DoesNotExist:
        return JsonResponse({"ok": False, "message": "No pending incomplete order"}, status=404)
    return JsonResponse({"ok": True, "id": record.pk, "status": record.status})


@csrf_exempt
@require_POST
def beacon_capture(request: HttpRequest):
    """
    Page-unload save. The sender never reads the response, so any failure is
    only logged here.
    """
    try:
        data = _json_body(request)
        session_id = clean_session_id(data.get("session_id"))
        fields = clean_record_payload(data)
    except ValidationError as err:
        logger.info("beacon capture rejected: %s", "; ".join(err.messages))
        return HttpResponse(status=400)

    record, created = create_pending(session_id=session_id, fields=fields)
    logger.debug("beacon capture session=%s record=%s created=%s", session_id, record.pk, created)
    return HttpResponse(status=204)


@csrf_exempt
@require_POST
def convert_session(request: HttpRequest):
    try:
        data = _json_body(request)
    except ValidationError as err:
        return _bad_request(err)

    session_id = clean_text(data.get("session_id"))
    order_id = clean_text(data.get("order_id"))
    if not session_id or not order_id:
        return JsonResponse({"ok": False, "message": "session_id and order_id are required"}, status=400)

    count = mark_converted_by_session(session_id, order_id)
    return JsonResponse({"ok": True, "converted": count})
