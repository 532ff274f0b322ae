"""Trailing-debounce scheduler for metadata snapshot flushes."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from simple_cache.consts import FLUSH_DEBOUNCE_SECONDS

logger = logging.getLogger(__name__)


class DebouncedFlusher:
    """Coalesces bursts of flush requests into one trailing flush.

    Every schedule() call cancels the pending timer and arms a new one, so N
    calls inside the debounce window produce a single flush. The flush
    callback reads current state when it runs, not state at schedule time.
    Flushes run under a lock and never overlap; a flush that has started
    is never cancelled.
    """

    def __init__(
        self,
        flush: Callable[[], Awaitable[None]],
        delay: float = FLUSH_DEBOUNCE_SECONDS,
        name: str = "snapshot",
    ):
        """Initialize DebouncedFlusher.

        Args:
            flush: Coroutine function that performs one flush.
            delay: Debounce window in seconds.
            name: Label used in log messages.
        """
        self._flush = flush
        self.delay = delay
        self.name = name
        self.flush_count = 0
        self._timer: asyncio.TimerHandle | None = None
        self._lock = asyncio.Lock()
        self._inflight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True if a flush is scheduled but has not fired yet."""
        return self._timer is not None

    def schedule(self) -> None:
        """(Re)arm the debounce timer. Must be called from the event loop."""
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop a pending flush without running it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._run())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self) -> None:
        async with self._lock:
            try:
                await self._flush()
                self.flush_count += 1
            except OSError as e:
                logger.warning(f"Failed to flush {self.name}, keeping in-memory state: {e}")

    async def flush_now(self) -> None:
        """Cancel any pending timer and flush immediately."""
        self.cancel()
        await self._run()

    async def drain(self) -> None:
        """Run a pending flush now and wait for in-flight flushes to finish."""
        if self._timer is not None:
            await self.flush_now()
        if self._inflight:
            await asyncio.gather(*list(self._inflight))
