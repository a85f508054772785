"""
Persistence adapters the capture client talks to.

``OrmStore`` writes through the app's services in the same process.
``HttpStore`` talks to the JSON endpoints in ``incomplete_orders.views``.
Both expose the same four coroutines and raise ``StoreError`` /
``RecordNotFound``.
"""

from typing import Any, Dict, Optional

import requests
from asgiref.sync import sync_to_async
from django.core.exceptions import ValidationError
from django.db import DatabaseError

from ..conf import get_api_url, get_setting


class StoreError(Exception):
    pass


class RecordNotFound(StoreError):
    """The id no longer points at a pending row (missing, converted or hidden)."""


class OrmStore:
    def _find_pending(self, session_id: str):
        from ..services import find_pending

        record = find_pending(session_id)
        return record.pk if record else None

    def _create(self, session_id: str, payload: Dict[str, Any]):
        from ..services import create_pending
        from ..validators import clean_record_payload

        try:
            record, _ = create_pending(session_id=session_id, fields=clean_record_payload(payload))
        except (ValidationError, DatabaseError) as err:
            raise StoreError(str(err)) from err
        return record.pk

    def _update(self, record_id, payload: Dict[str, Any]):
        from ..models import IncompleteOrder
        from ..services import update_pending
        from ..validators import clean_record_payload

        try:
            update_pending(record_id, clean_record_payload(payload))
        except IncompleteOrder.DoesNotExist as err:
            raise RecordNotFound(str(err)) from err
        except (ValidationError, DatabaseError) as err:
            raise StoreError(str(err)) from err

    def _convert_pending(self, session_id: str, order_id: str) -> int:
        from ..services import mark_converted_by_session

        try:
            return mark_converted_by_session(session_id, order_id)
        except DatabaseError as err:
            raise StoreError(str(err)) from err

    async def find_pending(self, session_id: str):
        return await sync_to_async(self._find_pending)(session_id)

    async def create(self, session_id: str, payload: Dict[str, Any]):
        return await sync_to_async(self._create)(session_id, payload)

    async def update(self, record_id, payload: Dict[str, Any]) -> None:
        await sync_to_async(self._update)(record_id, payload)

    async def convert_pending(self, session_id: str, order_id: str) -> int:
        return await sync_to_async(self._convert_pending)(session_id, order_id)


class HttpStore:
    def __init__(self, base_url: Optional[str] = None, timeout=None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or get_api_url()).rstrip("/") + "/"
        self.timeout = timeout if timeout is not None else get_setting("HTTP_TIMEOUT")
        self.http = session or requests.Session()

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = self.base_url + path
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as err:
            raise StoreError(f"{method} {url}: {err}") from err

        if resp.status_code == 404:
            raise RecordNotFound(f"{method} {url}: 404")
        if resp.status_code >= 400:
            raise StoreError(f"{method} {url}: HTTP {resp.status_code} {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as err:
            raise StoreError(f"{method} {url}: invalid JSON response") from err

    def _find_pending(self, session_id: str):
        return self._call("GET", "pending/", params={"session_id": session_id}).get("id")

    def _create(self, session_id: str, payload: Dict[str, Any]):
        data = self._call("POST", "create/", json={"session_id": session_id, **payload})
        if not data.get("id"):
            raise StoreError("create returned no id")
        return data["id"]

    def _update(self, record_id, payload: Dict[str, Any]):
        self._call("POST", f"{record_id}/update/", json=payload)

    def _convert_pending(self, session_id: str, order_id: str) -> int:
        data = self._call("POST", "convert/", json={"session_id": session_id, "order_id": order_id})
        return int(data.get("converted") or 0)

    # requests blocks, keep it off the event loop thread
    async def find_pending(self, session_id: str):
        return await sync_to_async(self._find_pending, thread_sensitive=False)(session_id)

    async def create(self, session_id: str, payload: Dict[str, Any]):
        return await sync_to_async(self._create, thread_sensitive=False)(session_id, payload)

    async def update(self, record_id, payload: Dict[str, Any]) -> None:
        await sync_to_async(self._update, thread_sensitive=False)(record_id, payload)

    async def convert_pending(self, session_id: str, order_id: str) -> int:
        return await sync_to_async(self._convert_pending, thread_sensitive=False)(session_id, order_id)
