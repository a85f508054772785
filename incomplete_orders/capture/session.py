from dataclasses import dataclass
from typing import Optional, Union

from .snapshot import CHECKOUT


@dataclass
class CaptureSession:
    """Client-side state for one capture lineage (one tab, one session id)."""

    session_id: str
    scope: str = CHECKOUT
    # id of the pending row once we know it, saves the lookup on later writes
    known_record_id: Optional[Union[int, str]] = None
    last_persisted_fingerprint: Optional[str] = None

    def reset(self):
        self.known_record_id = None
        self.last_persisted_fingerprint = None
