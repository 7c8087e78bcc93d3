"""One-shot delayed calls for the timer's session-complete window.

The engine only needs ``call_later(delay, callback)`` returning a handle with
``cancel()``. A running asyncio event loop already provides exactly that, so
async hosts pass nothing; synchronous hosts and tests use ManualScheduler.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback once after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


@dataclass(order=True)
class ScheduledCall:
    """A pending callback on a ManualScheduler."""
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit virtual clock.

    Usage:
        scheduler = ManualScheduler()
        engine = TimerEngine(scheduler=scheduler)
        ...
        scheduler.advance(3)  # fires anything due within 3 seconds
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[ScheduledCall] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled calls that have neither fired nor been cancelled."""
        return sum(1 for call in self._queue if not call.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay < 0:
            delay = 0
        call = ScheduledCall(self._now + delay, next(self._counter), callback)
        heapq.heappush(self._queue, call)
        return call

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every call that falls due.

        Returns:
            Number of callbacks that ran
        """
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")

        target = self._now + seconds
        fired = 0

        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = call.due
            call.callback()
            fired += 1

        self._now = target
        if fired:
            logger.debug(f"Manual scheduler fired {fired} call(s) at t={self._now}")
        return fired
