"""
Per-key debouncing of async callbacks
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Hashable

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class Debouncer:
    """Delays a callback until edits for the same key settle.

    Scheduling a key that already has a pending callback cancels the old
    one, so only the last edit in a burst is written.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._tasks: Dict[Hashable, asyncio.Task] = {}
        self._callbacks: Dict[Hashable, Callback] = {}

    def schedule(self, key: Hashable, callback: Callback) -> None:
        self.cancel(key)
        self._callbacks[key] = callback
        self._tasks[key] = asyncio.ensure_future(self._run_later(key, callback))

    def cancel(self, key: Hashable) -> None:
        task = self._tasks.pop(key, None)
        self._callbacks.pop(key, None)
        if task and not task.done():
            task.cancel()

    def pending(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def pending_keys(self):
        return [key for key in self._tasks if self.pending(key)]

    async def _run_later(self, key: Hashable, callback: Callback) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return
        # popped before running so a reschedule during the write is kept
        self._tasks.pop(key, None)
        self._callbacks.pop(key, None)
        try:
            await callback()
        except Exception as e:
            logger.error(f"Debounced callback for {key!r} failed: {e}")

    async def flush(self) -> None:
        """Run every pending callback now"""
        pending = [(key, self._callbacks[key]) for key in self.pending_keys()]
        for key, callback in pending:
            self.cancel(key)
            await callback()

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)
