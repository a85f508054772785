import logging
from typing import Protocol

logger = logging.getLogger("incomplete_orders.capture")


class ErrorReporter(Protocol):
    def report(self, operation: str, error: BaseException, **context) -> None:
        ...


class LoggingReporter:
    """Capture never fails the checkout; errors end up in the log and nowhere else."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def report(self, operation: str, error: BaseException, **context) -> None:
        self.log.warning(
            "incomplete order %s failed: %s",
            operation,
            error,
            exc_info=error,
            extra={"capture_operation": operation, "capture_context": context},
        )
