"""Focus timer module with alternating focus and break phases."""

from live_better.focus.timer import TimerEngine, TimerPhase, TimerState

__all__ = [
    "TimerEngine",
    "TimerPhase",
    "TimerState",
]
