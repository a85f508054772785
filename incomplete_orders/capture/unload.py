"""
Last-chance save on page teardown.

There is no time to await a lookup, so the pending snapshot goes straight to
the create (beacon) endpoint over a fire-and-forget transport. If a debounced
update is already on the wire, both may land; the server folds a second create
for the same session into its pending row, otherwise last write wins.
"""

import json
import logging
import threading

import requests

from .fingerprint import fingerprint
from .reporting import ErrorReporter
from .session import CaptureSession

logger = logging.getLogger(__name__)


class BeaconTransport:
    """Posts on a daemon thread and never reports back, like navigator.sendBeacon."""

    content_type = "text/plain;charset=UTF-8"

    def __init__(self, timeout: float = 5):
        self.timeout = timeout

    def _post(self, url: str, body: str):
        try:
            requests.post(url, data=body.encode("utf-8"), headers={"Content-Type": self.content_type}, timeout=self.timeout)
        except requests.RequestException as err:
            logger.debug("beacon to %s failed: %s", url, err)

    def send(self, url: str, body: str) -> bool:
        """True if the request was queued, same contract as sendBeacon."""
        try:
            threading.Thread(
                target=self._post, args=(url, body), name="incomplete-order-beacon", daemon=True
            ).start()
        except RuntimeError:
            return False
        return True


class UnloadFlush:
    def __init__(self, transport, url: str, reporter: ErrorReporter):
        self.transport = transport
        self.url = url
        self.reporter = reporter

    def flush(self, session: CaptureSession, snapshot) -> bool:
        if snapshot is None or not snapshot.qualifies:
            return False
        if fingerprint(snapshot) == session.last_persisted_fingerprint:
            return False

        body = json.dumps({"session_id": session.session_id, **snapshot.to_payload()})
        try:
            return bool(self.transport.send(self.url, body))
        except Exception as err:
            self.reporter.report("beacon", err, session_id=session.session_id)
            return False
