import asyncio
from typing import Awaitable, Callable, Optional, Set


class DebounceScheduler:
    """
    Collapses a burst of form changes into one save.

    Each ``schedule()`` replaces the pending payload and re-arms the single
    timer, so only the last snapshot before a pause is ever handed to
    ``callback``. Runs on the asyncio loop; ``callback`` is a coroutine function.
    """

    def __init__(
        self,
        callback: Callable[[object], Awaitable[object]],
        delay: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._callback = callback
        self.delay = float(delay)
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending = None
        self._inflight: Set[asyncio.Task] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    @property
    def pending(self):
        return self._pending

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def busy(self) -> bool:
        """A save has been started and has not finished yet."""
        return bool(self._inflight)

    def _cancel_timer(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def schedule(self, snapshot):
        self._cancel_timer()
        self._pending = snapshot
        self._handle = self._get_loop().call_later(self.delay, self._fire)

    def _fire(self):
        self._handle = None
        self._run_pending()

    def _run_pending(self) -> Optional[asyncio.Task]:
        snapshot, self._pending = self._pending, None
        if snapshot is None:
            return None
        task = self._get_loop().create_task(self._callback(snapshot))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def flush_now(self) -> Optional[asyncio.Task]:
        """Skip the wait: start the save for the pending payload right away."""
        self._cancel_timer()
        return self._run_pending()

    def take_pending(self):
        """Disarm and hand back the pending payload without saving it."""
        self._cancel_timer()
        snapshot, self._pending = self._pending, None
        return snapshot

    def cancel(self):
        self._cancel_timer()
        self._pending = None

    async def wait_inflight(self):
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
