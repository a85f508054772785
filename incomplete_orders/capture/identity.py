"""Session ids for capture, kept in the browsing session's storage."""

import logging
import uuid
from typing import MutableMapping, Optional

from ..conf import get_setting
from .snapshot import CHECKOUT

logger = logging.getLogger(__name__)


def mint_session_id() -> str:
    return str(uuid.uuid4())


class IdentityStore:
    """
    ``checkout`` ids are stable: stored under one key and reused until rotated.
    ``quick_buy`` ids are minted per attempt and never stored.

    ``storage`` is any mutable mapping (a Django session works). If it is
    missing or starts failing, ids live in memory for this object's lifetime.
    The failure goes to ``reporter`` when one is given, otherwise to the log.
    """

    def __init__(self, storage: Optional[MutableMapping] = None, key: Optional[str] = None, reporter=None):
        self._storage = storage
        self.reporter = reporter
        self.key = key or get_setting("SESSION_KEY")
        self._memory: Optional[str] = None

    @property
    def persistent(self) -> bool:
        return self._storage is not None

    def _degrade(self, err: Exception):
        if self.reporter is not None:
            self.reporter.report("identity", err, key=self.key)
        else:
            logger.warning("session storage unavailable, keeping capture id in memory: %s", err)
        self._storage = None

    def _read(self) -> Optional[str]:
        if self._storage is None:
            return None
        try:
            return self._storage.get(self.key)
        except Exception as err:
            self._degrade(err)
            return None

    def _write(self, value: str):
        if self._storage is None:
            return
        try:
            self._storage[self.key] = value
        except Exception as err:
            self._degrade(err)

    def get_or_create_session_id(self, scope: str) -> str:
        if scope != CHECKOUT:
            return mint_session_id()

        sid = self._read() or self._memory
        if not sid:
            sid = mint_session_id()
            self._write(sid)
        self._memory = sid
        return sid

    def rotate(self, scope: str) -> str:
        sid = mint_session_id()
        if scope == CHECKOUT:
            self._memory = sid
            self._write(sid)
        return sid
