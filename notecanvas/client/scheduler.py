"""Debounced, cancellable delayed tasks keyed by an id."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class DebouncedScheduler:
    """Coalesce repeated triggers per key into one call after a quiet period.

    Scheduling a key that is already pending cancels the pending call and
    restarts the window, so only the last callback for a burst runs.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._timers: dict[Hashable, asyncio.TimerHandle] = {}
        self._callbacks: dict[Hashable, Callback] = {}
        self._running: dict[Hashable, asyncio.Task] = {}

    def schedule(self, key: Hashable, callback: Callback) -> None:
        """(Re)start the quiet window for ``key``."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._callbacks[key] = callback
        self._timers[key] = loop.call_later(self.delay, self._fire, key)

    def cancel(self, key: Hashable) -> bool:
        """Drop the pending call for ``key``. Returns whether one was pending."""
        timer = self._timers.pop(key, None)
        self._callbacks.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def is_pending(self, key: Hashable) -> bool:
        return key in self._timers

    def pending_keys(self) -> list[Hashable]:
        return list(self._timers)

    async def flush(self, key: Hashable) -> None:
        """Run the pending call for ``key`` now and wait for it to finish."""
        callback = self._callbacks.get(key)
        if callback is None:
            await self._wait_running(key)
            return
        self.cancel(key)
        task = self._start(key, callback)
        await asyncio.wait([task])

    async def flush_all(self) -> None:
        for key in self.pending_keys():
            await self.flush(key)

    async def drain(self) -> None:
        """Wait for calls that already started."""
        for key in list(self._running):
            await self._wait_running(key)

    async def aclose(self) -> None:
        """Run everything still pending, then wait for in-flight calls."""
        await self.flush_all()
        await self.drain()

    def _fire(self, key: Hashable) -> None:
        self._timers.pop(key, None)
        callback = self._callbacks.pop(key, None)
        if callback is None:
            return
        self._start(key, callback)

    def _start(self, key: Hashable, callback: Callback) -> asyncio.Task:
        previous = self._running.get(key)
        task = asyncio.ensure_future(self._run_after(key, previous, callback))
        self._running[key] = task
        return task

    async def _run_after(self, key: Hashable, previous: asyncio.Task | None, callback: Callback) -> None:
        # Calls for one key never overlap, so writes land in scheduling order
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        try:
            await self._run(key, callback)
        finally:
            if self._running.get(key) is asyncio.current_task():
                del self._running[key]

    async def _wait_running(self, key: Hashable) -> None:
        task = self._running.get(key)
        if task is not None and not task.done():
            await asyncio.wait([task])

    async def _run(self, key: Hashable, callback: Callback) -> None:
        try:
            await callback()
        except Exception:
            logger.exception(f"Scheduled call for {key!r} failed")
