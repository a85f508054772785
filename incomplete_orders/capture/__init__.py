from .controller import IncompleteOrderCapture
from .fingerprint import fingerprint, has_changed
from .identity import IdentityStore
from .reporting import ErrorReporter, LoggingReporter
from .session import CaptureSession
from .snapshot import CHECKOUT, QUICK_BUY, CartLine, CheckoutSnapshot
from .store import HttpStore, OrmStore, RecordNotFound, StoreError

__all__ = [
    "IncompleteOrderCapture",
    "CaptureSession",
    "CheckoutSnapshot",
    "CartLine",
    "CHECKOUT",
    "QUICK_BUY",
    "IdentityStore",
    "fingerprint",
    "has_changed",
    "ErrorReporter",
    "LoggingReporter",
    "OrmStore",
    "HttpStore",
    "StoreError",
    "RecordNotFound",
]
