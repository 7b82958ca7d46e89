"""
Timer sources for the connection simulator

The simulator never sleeps. It asks a clock to run callbacks later, either
once or periodically, and keeps the returned handle so it can cancel it.
VirtualClock is advanced by hand (tests, scripted demos); AsyncioClock runs
the same callbacks on the asyncio event loop used by the dashboard and CLI.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    """Cancellable handle for a scheduled callback"""

    def __init__(self, callback: Callable[[], None],
                 interval: Optional[float] = None):
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    @property
    def periodic(self) -> bool:
        return self.interval is not None

    def cancel(self):
        """Cancel the timer; cancelling twice is harmless"""
        self.cancelled = True


class Clock:
    """Time source interface"""

    def now(self) -> float:
        raise NotImplementedError

    def call_later(self, delay: float,
                   callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval: float,
                   callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError


class VirtualClock(Clock):
    """Manually advanced clock holding {fire_at, action} entries"""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float,
                   callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        self._push(self._now + delay, handle)
        return handle

    def call_every(self, interval: float,
                   callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(callback, interval)
        self._push(self._now + interval, handle)
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing due callbacks in scheduling order

        Returns:
            int: Number of callbacks fired
        """
        if seconds < 0:
            raise ValueError("cannot move time backwards")

        target = self._now + seconds
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            fire_at, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            self._now = fire_at
            if handle.periodic:
                # Fixed origin: next firing is computed, not re-based on now
                self._push(fire_at + handle.interval, handle)
            handle.callback()
            fired += 1

        self._now = target
        return fired

    def pending(self, periodic: Optional[bool] = None) -> int:
        """Count live timers, optionally only one-shot or periodic ones"""
        return sum(
            1 for _, _, handle in self._queue
            if not handle.cancelled and
            (periodic is None or handle.periodic == periodic)
        )

    def _push(self, fire_at: float, handle: TimerHandle):
        heapq.heappush(self._queue, (fire_at, next(self._counter), handle))


class _LoopTimer(TimerHandle):
    """TimerHandle backed by asyncio.TimerHandle objects"""

    def __init__(self, callback, interval=None):
        super().__init__(callback, interval)
        self.loop_handle: Optional[asyncio.TimerHandle] = None

    def cancel(self):
        super().cancel()
        if self.loop_handle is not None:
            self.loop_handle.cancel()


class AsyncioClock(Clock):
    """Clock running callbacks on an asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float,
                   callback: Callable[[], None]) -> TimerHandle:
        handle = _LoopTimer(callback)

        def _fire():
            if not handle.cancelled:
                handle.cancel()
                callback()

        handle.loop_handle = self.loop.call_later(delay, _fire)
        return handle

    def call_every(self, interval: float,
                   callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = _LoopTimer(callback, interval)
        self._schedule_periodic(handle, self.loop.time() + interval)
        return handle

    def _schedule_periodic(self, handle: _LoopTimer, fire_at: float):
        def _fire():
            if handle.cancelled:
                return
            self._schedule_periodic(handle, fire_at + handle.interval)
            try:
                handle.callback()
            except Exception as e:
                logger.error(f"Periodic timer error: {e}", exc_info=True)

        handle.loop_handle = self.loop.call_at(fire_at, _fire)
