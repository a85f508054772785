import asyncio
import logging

from incomplete_orders.capture import IncompleteOrderCapture, LoggingReporter, StoreError


def test_logging_reporter_logs_warning_with_context(caplog):
    caplog.set_level(logging.WARNING, logger="incomplete_orders.capture")

    LoggingReporter().report("save", StoreError("backend down"), session_id="s-1")

    record = caplog.records[0]
    assert record.levelno == logging.WARNING
    assert "incomplete order save failed: backend down" in record.getMessage()
    assert record.capture_context == {"session_id": "s-1"}


def test_default_controller_reporter_logs(caplog, store, jane_snapshot):
    """Without an injected reporter a failing save ends up in the log, not in the caller."""
    store.fail_next = StoreError("503")

    async def scenario():
        capture = IncompleteOrderCapture("checkout", storage={}, store=store, delay=0.01)
        capture.capture_form_data(jane_snapshot)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert "incomplete order save failed: 503" in caplog.text
