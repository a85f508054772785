from typing import Optional

from .identity import IdentityStore
from .reporting import ErrorReporter
from .scheduler import DebounceScheduler
from .session import CaptureSession


class ConversionFinalizer:
    """pending -> converted for the session, then start a fresh capture lineage."""

    def __init__(self, store, identity: IdentityStore, reporter: ErrorReporter):
        self.store = store
        self.identity = identity
        self.reporter = reporter

    async def finalize(
        self,
        session: CaptureSession,
        order_id: str,
        scheduler: Optional[DebounceScheduler] = None,
    ) -> int:
        if scheduler is not None:
            scheduler.cancel()
            # a save already on the wire must land before the status flip
            await scheduler.wait_inflight()

        converted = 0
        try:
            converted = await self.store.convert_pending(session.session_id, str(order_id))
        except Exception as err:
            # order is placed either way; only the bookkeeping is lost
            self.reporter.report("convert", err, session_id=session.session_id, order_id=order_id)

        session.reset()
        session.session_id = self.identity.rotate(session.scope)
        return converted
