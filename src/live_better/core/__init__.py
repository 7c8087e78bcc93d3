"""Core components shared by the timer and hydration tracker."""

from live_better.core.config import Config, get_config
from live_better.core.errors import InvalidAmount, InvalidConfig, LiveBetterError
from live_better.core.scheduler import ManualScheduler, Scheduler

__all__ = [
    "Config",
    "get_config",
    "InvalidAmount",
    "InvalidConfig",
    "LiveBetterError",
    "ManualScheduler",
    "Scheduler",
]
