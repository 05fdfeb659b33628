"""
Single-shot, cancellable timers for auto-advance.

Both schedulers run callbacks on the caller's thread: AsyncioScheduler on the
event loop, VirtualClock inside advance(). Nothing here starts a thread.
"""

import asyncio
import heapq
import itertools

from .errors import InvalidSpeedError


def check_delay(delay_ms):
    if isinstance(delay_ms, bool) or not isinstance(delay_ms, int) or delay_ms <= 0:
        raise InvalidSpeedError(f"Delay must be a positive number of milliseconds, got {delay_ms!r}")
    return delay_ms


class AsyncioScheduler:
    def __init__(self, loop=None):
        self._loop = loop

    @property
    def loop(self):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms, callback):
        check_delay(delay_ms)
        # asyncio.TimerHandle.cancel() is already idempotent
        return self.loop.call_later(delay_ms / 1000.0, callback)


class _VirtualTimer:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class VirtualClock:
    """
    Deterministic clock for tests and host-driven loops.

        clock = VirtualClock()
        engine = DFSEngine(graph, speed=200, scheduler=clock)
        engine.start("A")
        clock.advance(1000)   # five auto-steps

    Callbacks fire in due-time order, ties in the order they were armed. A
    callback armed during advance() fires in the same call if it falls due
    before the end of the window.
    """

    def __init__(self):
        self.now = 0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay_ms, callback):
        check_delay(delay_ms)
        timer = _VirtualTimer(self.now + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending(self):
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, ms):
        """Move time forward by ms, firing everything that falls due. Returns the fire count."""
        if ms < 0:
            raise ValueError("Cannot move a clock backwards")
        deadline = self.now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = due
            timer.cancelled = True
            timer.callback()
            fired += 1
        self.now = deadline
        return fired
