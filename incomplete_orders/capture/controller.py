import asyncio
import logging
from typing import Optional

from ..conf import get_beacon_url, get_setting
from .conversion import ConversionFinalizer
from .fingerprint import has_changed
from .identity import IdentityStore
from .reporting import LoggingReporter
from .resolver import UpsertResolver
from .scheduler import DebounceScheduler
from .session import CaptureSession
from .snapshot import SCOPES, CheckoutSnapshot
from .store import OrmStore
from .unload import BeaconTransport, UnloadFlush

logger = logging.getLogger(__name__)


class IncompleteOrderCapture:
    """
    What a checkout or quick-buy form holds on to.

    Form code calls ``capture_form_data`` on every change, ``mark_as_converted``
    once the order exists, and ``on_page_unload`` from its teardown hook.
    None of these raise.
    """

    def __init__(
        self,
        scope: str,
        *,
        storage=None,
        identity: Optional[IdentityStore] = None,
        store=None,
        reporter=None,
        beacon=None,
        beacon_url: Optional[str] = None,
        delay: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if scope not in SCOPES:
            raise ValueError(f"unknown capture scope {scope!r}")

        self.reporter = reporter or LoggingReporter()
        self.identity = identity or IdentityStore(storage, reporter=self.reporter)
        self.session = CaptureSession(
            session_id=self.identity.get_or_create_session_id(scope), scope=scope
        )
        self.store = store or OrmStore()

        self.resolver = UpsertResolver(self.store, self.reporter)
        if delay is None:
            delay = get_setting("DEBOUNCE_SECONDS")
        self.scheduler = DebounceScheduler(self._persist, delay, loop=loop)
        self.unload = UnloadFlush(beacon or BeaconTransport(), beacon_url or get_beacon_url(), self.reporter)
        self.finalizer = ConversionFinalizer(self.store, self.identity, self.reporter)
        # one save on the wire at a time, each sees what the previous one stored
        self._save_lock = asyncio.Lock()

    @property
    def session_id(self) -> str:
        return self.session.session_id

    async def _persist(self, snapshot: CheckoutSnapshot) -> bool:
        async with self._save_lock:
            return await self.resolver.persist(self.session, snapshot)

    def capture_form_data(self, data) -> None:
        try:
            snapshot = CheckoutSnapshot.coerce(data, source=self.session.scope)
        except (AttributeError, TypeError, ValueError, ArithmeticError) as err:
            self.reporter.report("snapshot", err, session_id=self.session_id)
            return

        if not self.scheduler.busy and not has_changed(snapshot, self.session.last_persisted_fingerprint):
            # back to what is already stored; whatever was queued is stale.
            # With a save in flight the stored state is about to move, so queue anyway.
            self.scheduler.cancel()
            return
        self.scheduler.schedule(snapshot)

    def save_immediately(self) -> Optional[asyncio.Task]:
        """Best effort save before a known navigation; returns the save task if any."""
        return self.scheduler.flush_now()

    def on_page_unload(self) -> bool:
        snapshot = self.scheduler.take_pending()
        return self.unload.flush(self.session, snapshot)

    def new_attempt(self) -> str:
        """
        Start another attempt in the same scope (quick-buy modal reopened).
        Quick-buy gets a new id, checkout keeps its stored one.
        """
        self.scheduler.cancel()
        self.session.reset()
        self.session.session_id = self.identity.get_or_create_session_id(self.session.scope)
        return self.session_id

    async def mark_as_converted(self, order_id: str) -> int:
        logger.debug("converting capture session %s -> order %s", self.session_id, order_id)
        return await self.finalizer.finalize(self.session, order_id, scheduler=self.scheduler)
