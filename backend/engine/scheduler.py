"""
Deferred callbacks for the single-threaded engine.
AsyncioScheduler runs on the service's event loop; ManualScheduler is a virtual clock
for headless use and tests.
"""

import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Tuple


class AsyncioScheduler:
    """call_soon / call_later on the running asyncio loop. Returns asyncio handles (cancel())."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_soon(self, callback: Callable, *args: Any) -> asyncio.Handle:
        return self._get_loop().call_soon(callback, *args)

    def call_later(self, delay: float, callback: Callable, *args: Any) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback, *args)


class ScheduledCall:
    def __init__(self, when: float, callback: Callable, args: Tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Virtual clock. Nothing runs until advance()/run_pending() is called."""

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def call_soon(self, callback: Callable, *args: Any) -> ScheduledCall:
        return self.call_later(0.0, callback, *args)

    def call_later(self, delay: float, callback: Callable, *args: Any) -> ScheduledCall:
        call = ScheduledCall(self.now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (call.when, next(self._seq), call))
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, c in self._queue if not c.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due callbacks in order (including ones they schedule)."""
        target = self.now + max(0.0, seconds)
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, call = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if call.cancelled():
                continue
            call.callback(*call.args)
            ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run everything due now (one or more scheduling ticks at the current time)."""
        return self.advance(0.0)
