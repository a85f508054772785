from .fingerprint import fingerprint
from .reporting import ErrorReporter
from .session import CaptureSession
from .snapshot import CheckoutSnapshot
from .store import RecordNotFound


class UpsertResolver:
    """
    Turns (session, snapshot) into a write on the session's one pending row:
    update by cached id, else update the pending row found by session id,
    else create it.

    Failures are reported and swallowed. Session state only moves forward on
    success, so the next form change retries from the same place.
    """

    def __init__(self, store, reporter: ErrorReporter):
        self.store = store
        self.reporter = reporter

    async def persist(self, session: CaptureSession, snapshot: CheckoutSnapshot) -> bool:
        if not snapshot.qualifies:
            return False

        digest = fingerprint(snapshot)
        if digest == session.last_persisted_fingerprint:
            return False

        session_id = session.session_id
        payload = snapshot.to_payload()
        record_id = session.known_record_id
        try:
            if record_id is None:
                record_id = await self.store.find_pending(session_id)
            if record_id is not None:
                await self.store.update(record_id, payload)
            else:
                record_id = await self.store.create(session_id, payload)
        except RecordNotFound as err:
            # converted or hidden behind our back; look it up again next time
            if session.session_id == session_id:
                session.known_record_id = None
            self.reporter.report("update", err, session_id=session_id, record_id=record_id)
            return False
        except Exception as err:
            self.reporter.report("save", err, session_id=session_id, record_id=record_id)
            return False

        # conversion may have rotated the identity while we were awaiting
        if session.session_id != session_id:
            return True
        session.known_record_id = record_id
        session.last_persisted_fingerprint = digest
        return True
