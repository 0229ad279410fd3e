"""
Timer schedulers used by the Scanner.

A scheduler exposes two operations:

- ``now()``: current time in milliseconds
- ``call_later(delay_ms, callback)``: run ``callback`` once after
  ``delay_ms`` milliseconds, returning a handle with ``cancel()``

Three implementations are provided:

- ThreadingScheduler: one ``threading.Timer`` per call (default)
- AsyncioScheduler: ``loop.call_later`` on an asyncio event loop
- ManualScheduler: virtual clock advanced explicitly, for replaying
  recorded keystrokes and for tests
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
import time
from typing import Callable, List, Optional, Tuple


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def now(self) -> float:
        return _monotonic_ms()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """
    Runs callbacks on an asyncio event loop.

    Without an explicit loop, the running loop at the time of
    ``call_later`` is used, so keystrokes must be fed from inside it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def now(self) -> float:
        return _monotonic_ms()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)


class ManualTimer:
    """Handle returned by ManualScheduler.call_later."""
    __slots__ = ['due', 'callback', 'cancelled']

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual clock. Nothing fires until ``advance`` or ``advance_to`` is
    called; timers then fire in due order with the clock set to their due
    time.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    def advance(self, delay_ms: float) -> int:
        """Move the clock forward by ``delay_ms``. Returns timers fired."""
        return self.advance_to(self._now + delay_ms)

    def advance_to(self, when: float) -> int:
        """Move the clock to ``when``, firing due timers. Returns timers fired."""
        if when < self._now:
            raise ValueError(f"Cannot move clock backwards ({when} < {self._now})")

        fired = 0
        while self._queue and self._queue[0][0] <= when:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.callback()
            fired += 1

        self._now = when
        return fired

    def run_all(self) -> int:
        """Fire every pending timer, including ones scheduled meanwhile."""
        fired = 0
        while self.pending:
            fired += self.advance_to(max(self._now, self._queue[0][0]))
        return fired

    @property
    def pending(self) -> int:
        """Number of timers not yet fired or cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)
