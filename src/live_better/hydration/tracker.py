"""Daily water intake tracking with a behind-pace reminder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

from live_better.core.errors import InvalidAmount, InvalidConfig, require_positive_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderPolicy:
    """Thresholds for the hydration pace heuristic."""

    # Drinking is expected to be spread evenly over this window
    day_start_hour: int = 6
    active_hours: int = 16

    # Fraction of the expected intake tolerated before reminding
    grace_ratio: float = 0.8

    # No reminders before this hour
    quiet_until_hour: int = 8

    def expected_intake(self, daily_goal_ml: int, hour: int) -> float:
        """Intake in ml that should have been reached by ``hour``.

        Not capped at the end of the active window: the projection keeps
        growing after it.
        """
        return (daily_goal_ml / self.active_hours) * max(hour - self.day_start_hour, 0)

    def is_behind(self, intake_ml: int, daily_goal_ml: int, hour: int) -> bool:
        expected = self.expected_intake(daily_goal_ml, hour)
        return intake_ml < expected * self.grace_ratio and hour >= self.quiet_until_hour


@dataclass
class HydrationState:
    """Current state of the hydration tracker."""
    daily_goal_ml: int = 2000
    current_intake_ml: int = 0
    reminder_active: bool = False

    @property
    def goal_met(self) -> bool:
        return self.current_intake_ml >= self.daily_goal_ml

    @property
    def remaining_ml(self) -> int:
        return max(self.daily_goal_ml - self.current_intake_ml, 0)

    @property
    def intake_percent(self) -> float:
        return min(self.current_intake_ml / self.daily_goal_ml * 100, 100.0)


def parse_custom_amount(text: str, maximum: int | None = None) -> int:
    """Parse a typed intake amount.

    Args:
        text: Raw user input, e.g. "330" or " 250ml"
        maximum: Optional upper bound enforced by the host

    Returns:
        The amount in ml

    Raises:
        InvalidAmount: If the text is empty, not a number, not positive,
            or above ``maximum``
    """
    cleaned = text.strip().lower().removesuffix("ml").strip()
    if not cleaned:
        raise InvalidAmount("amount is empty")

    try:
        amount = int(cleaned)
    except ValueError:
        raise InvalidAmount(f"not a whole number of ml: {text!r}") from None

    require_positive_int(amount, "amount", InvalidAmount)
    if maximum is not None and amount > maximum:
        raise InvalidAmount(f"amount must be at most {maximum}ml, got {amount}")
    return amount


class HydrationTracker:
    """Tracks water intake against a daily goal.

    ``reminder_active`` is always derived from intake, goal and the hour it
    was last evaluated at. Mutations re-evaluate against ``clock()``; hosts
    may also call ``evaluate_reminder`` periodically as the day moves on.

    Usage:
        tracker = HydrationTracker(daily_goal_ml=2000)
        tracker.add_intake(250)
        tracker.evaluate_reminder(datetime.now().hour)
        if tracker.reminder_active:
            ...
    """

    def __init__(
        self,
        daily_goal_ml: int = 2000,
        policy: ReminderPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
        quick_add_ml: tuple[int, ...] | list[int] = (200, 500),
    ):
        require_positive_int(daily_goal_ml, "daily_goal_ml", InvalidConfig)
        for amount in quick_add_ml:
            require_positive_int(amount, "quick_add_ml", InvalidConfig)

        self.policy = policy or ReminderPolicy()
        self._clock = clock or datetime.now
        self.quick_add_ml = tuple(quick_add_ml)
        self._state = HydrationState(daily_goal_ml=daily_goal_ml)

        # Callbacks
        self.on_reminder_changed: Callable[[bool], None] | None = None

        self.evaluate_reminder(self._current_hour())

    @property
    def state(self) -> HydrationState:
        """Get current tracker state (read-only copy)."""
        return replace(self._state)

    @property
    def daily_goal_ml(self) -> int:
        return self._state.daily_goal_ml

    @property
    def current_intake_ml(self) -> int:
        return self._state.current_intake_ml

    @property
    def reminder_active(self) -> bool:
        return self._state.reminder_active

    @property
    def goal_met(self) -> bool:
        return self._state.goal_met

    def set_daily_goal(self, ml: int) -> None:
        """Change the daily goal.

        Raises:
            InvalidConfig: If ``ml`` is not a positive integer
        """
        require_positive_int(ml, "daily_goal_ml", InvalidConfig)
        self._state.daily_goal_ml = ml
        logger.info(f"Daily hydration goal set to {ml}ml")
        self.evaluate_reminder(self._current_hour())

    def add_intake(self, ml: int) -> None:
        """Record water drunk.

        Raises:
            InvalidAmount: If ``ml`` is not a positive integer
        """
        require_positive_int(ml, "amount", InvalidAmount)
        self._state.current_intake_ml += ml
        logger.info(
            f"Intake +{ml}ml: {self._state.current_intake_ml}/{self._state.daily_goal_ml}ml"
        )
        self.evaluate_reminder(self._current_hour())

    def quick_add(self, ml: int) -> None:
        """Add one of the preset amounts."""
        if ml not in self.quick_add_ml:
            raise InvalidAmount(f"{ml}ml is not a quick-add preset {self.quick_add_ml}")
        self.add_intake(ml)

    def intake_percent(self) -> float:
        return self._state.intake_percent

    def remaining_ml(self) -> int:
        return self._state.remaining_ml

    def expected_intake(self, current_hour_of_day: int) -> float:
        return self.policy.expected_intake(self._state.daily_goal_ml, current_hour_of_day)

    def evaluate_reminder(self, current_hour_of_day: int) -> bool:
        """Recompute the reminder flag for the given hour (0-23).

        Returns:
            The new value of ``reminder_active``
        """
        active = self.policy.is_behind(
            self._state.current_intake_ml, self._state.daily_goal_ml, current_hour_of_day
        )
        changed = active != self._state.reminder_active
        self._state.reminder_active = active

        if changed:
            if active:
                logger.info(
                    f"Hydration reminder raised at {current_hour_of_day}:00 "
                    f"({self._state.current_intake_ml}ml of "
                    f"{self.expected_intake(current_hour_of_day):.0f}ml expected)"
                )
            else:
                logger.info("Hydration reminder cleared")

            if self.on_reminder_changed:
                try:
                    self.on_reminder_changed(active)
                except Exception as e:
                    logger.error(f"Error in on_reminder_changed callback: {e}")

        return active

    def status_message(self) -> str:
        if self._state.goal_met:
            return "Daily goal achieved!"
        return f"{self._state.remaining_ml}ml remaining today"

    def get_summary(self) -> dict:
        """Get a summary of today's intake."""
        return {
            "daily_goal_ml": self._state.daily_goal_ml,
            "current_intake_ml": self._state.current_intake_ml,
            "remaining_ml": self._state.remaining_ml,
            "intake_percent": round(self._state.intake_percent, 1),
            "goal_met": self._state.goal_met,
            "reminder_active": self._state.reminder_active,
        }

    def _current_hour(self) -> int:
        return self._clock().hour
