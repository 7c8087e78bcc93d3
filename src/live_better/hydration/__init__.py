"""Hydration tracking module with a pace-based reminder."""

from live_better.hydration.tracker import (
    HydrationState,
    HydrationTracker,
    ReminderPolicy,
    parse_custom_amount,
)

__all__ = [
    "HydrationState",
    "HydrationTracker",
    "ReminderPolicy",
    "parse_custom_amount",
]
