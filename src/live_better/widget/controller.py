"""Controller that drives the timer and hydration tracker for a display host."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from live_better.core.config import Config
from live_better.core.scheduler import Scheduler
from live_better.focus.timer import TimerEngine, TimerPhase
from live_better.hydration.tracker import HydrationTracker, parse_custom_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidgetState:
    """Everything a renderer needs for one frame."""
    # Timer state
    phase: str = "focus"
    phase_label: str = "Focus"
    time_remaining: str = "25:00"
    timer_running: bool = False
    timer_progress_percent: float = 0.0
    focused_minutes: int = 0
    session_just_completed: bool = False
    completion_headline: str = ""
    completion_hint: str = ""

    # Hydration state
    current_intake_ml: int = 0
    daily_goal_ml: int = 2000
    intake_percent: float = 0.0
    remaining_ml: int = 2000
    goal_met: bool = False
    reminder_active: bool = False
    hydration_message: str = ""


class WidgetController:
    """Owns one TimerEngine and one HydrationTracker and feeds them time.

    The two components never talk to each other; the controller is the host
    that ticks the timer once per second, re-checks the hydration reminder
    against the wall clock, and hands renderers a WidgetState.

    Usage:
        controller = WidgetController(config)
        controller.on_update = render

        task = asyncio.create_task(controller.run())
        controller.start_timer()
        controller.add_intake(250)
        ...
        await controller.stop()
    """

    def __init__(
        self,
        config: Config | None = None,
        clock: Callable[[], datetime] | None = None,
        scheduler: Scheduler | None = None,
        tick_interval: float | None = None,
    ):
        """Initialize the controller.

        Args:
            config: Application config; defaults are used when omitted
            clock: Wall clock for the hydration reminder
            scheduler: Scheduler for the session-complete clear; the running
                event loop is used when omitted
            tick_interval: Seconds between timer ticks; defaults to
                ``config.timer.tick_seconds``
        """
        self._config = config or Config()
        self._clock = clock or datetime.now
        self._tick_interval = (
            tick_interval if tick_interval is not None else self._config.timer.tick_seconds
        )

        timer_config = self._config.timer
        hydration_config = self._config.hydration

        self.timer = TimerEngine(
            focus_minutes=timer_config.focus_minutes,
            break_minutes=timer_config.break_minutes,
            scheduler=scheduler,
            completion_display_seconds=timer_config.completion_display_seconds,
        )
        self.hydration = HydrationTracker(
            daily_goal_ml=hydration_config.daily_goal_ml,
            clock=self._clock,
            quick_add_ml=hydration_config.quick_add_ml,
        )

        self.timer.on_phase_complete = self._on_phase_complete
        self.timer.on_completion_cleared = self._update
        self.hydration.on_reminder_changed = self._on_reminder_changed

        self._running = False
        self._tick_task: asyncio.Task | None = None
        self._reminder_task: asyncio.Task | None = None

        # Callbacks
        self.on_update: Callable[[WidgetState], None] | None = None
        self.on_session_complete: Callable[[TimerPhase], None] | None = None
        self.on_reminder_changed: Callable[[bool], None] | None = None

    @property
    def is_running(self) -> bool:
        """Whether the tick loop is active."""
        return self._running

    async def run(self) -> None:
        """Tick the timer and re-check the reminder until stop() is called."""
        if self._running:
            return

        self._running = True
        self._tick_task = asyncio.create_task(self._tick_loop())
        self._reminder_task = asyncio.create_task(self._reminder_loop())
        logger.info("Widget controller started")

        try:
            await asyncio.gather(self._tick_task, self._reminder_task)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop the tick and reminder loops."""
        self._running = False

        for task in (self._tick_task, self._reminder_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._tick_task = None
        self._reminder_task = None
        logger.info("Widget controller stopped")

    # Timer commands

    def start_timer(self) -> None:
        self.timer.start()
        self._update()

    def pause_timer(self) -> None:
        self.timer.pause()
        self._update()

    def toggle_timer(self) -> None:
        """Start when paused, pause when running."""
        if self.timer.running:
            self.pause_timer()
        else:
            self.start_timer()

    def reset_timer(self) -> None:
        self.timer.reset()
        self._update()

    def configure_timer(self, focus_minutes: int, break_minutes: int) -> None:
        self.timer.configure(focus_minutes, break_minutes)
        self._update()

    # Hydration commands

    def set_daily_goal(self, ml: int) -> None:
        self.hydration.set_daily_goal(ml)
        self._update()

    def add_intake(self, ml: int) -> None:
        self.hydration.add_intake(ml)
        self._update()

    def add_custom_intake(self, text: str) -> int:
        """Parse typed input and record it.

        Returns:
            The amount recorded in ml
        """
        amount = parse_custom_amount(text, maximum=self._config.hydration.max_custom_ml)
        self.add_intake(amount)
        return amount

    def refresh_reminder(self) -> bool:
        """Re-check the hydration reminder against the current hour."""
        active = self.hydration.evaluate_reminder(self._clock().hour)
        self._update()
        return active

    # Snapshot

    def snapshot(self) -> WidgetState:
        """Build the current display state."""
        ts = self.timer.state
        hs = self.hydration.state
        headline, hint = self.timer.completion_message() or ("", "")

        return WidgetState(
            phase=ts.phase.value,
            phase_label=ts.phase.label,
            time_remaining=ts.time_remaining_display,
            timer_running=ts.running,
            timer_progress_percent=ts.progress_percent,
            focused_minutes=self.timer.focused_minutes(),
            session_just_completed=ts.session_just_completed,
            completion_headline=headline,
            completion_hint=hint,
            current_intake_ml=hs.current_intake_ml,
            daily_goal_ml=hs.daily_goal_ml,
            intake_percent=hs.intake_percent,
            remaining_ml=hs.remaining_ml,
            goal_met=hs.goal_met,
            reminder_active=hs.reminder_active,
            hydration_message=self.hydration.status_message(),
        )

    def get_status(self) -> dict:
        """Get a status summary of both components."""
        return {
            "active": self._running,
            "timer": self.timer.get_summary(),
            "hydration": self.hydration.get_summary(),
        }

    # Loops and callbacks

    async def _tick_loop(self) -> None:
        """Main timer tick loop."""
        while self._running:
            await asyncio.sleep(self._tick_interval)

            if not self.timer.running:
                continue

            self.timer.tick()
            self._update()

    async def _reminder_loop(self) -> None:
        """Re-evaluate the hydration reminder as the day moves on."""
        interval = self._config.hydration.reevaluate_seconds
        while self._running:
            await asyncio.sleep(interval)
            self.refresh_reminder()

    def _on_phase_complete(self, phase: TimerPhase) -> None:
        logger.info(f"{phase.label} session complete")

        if self.on_session_complete:
            try:
                self.on_session_complete(phase)
            except Exception as e:
                logger.error(f"Error in on_session_complete callback: {e}")

    def _on_reminder_changed(self, active: bool) -> None:
        if self.on_reminder_changed:
            try:
                self.on_reminder_changed(active)
            except Exception as e:
                logger.error(f"Error in on_reminder_changed callback: {e}")

    def _update(self) -> None:
        """Push the current state to the renderer."""
        if not self.on_update:
            return

        try:
            self.on_update(self.snapshot())
        except Exception as e:
            logger.error(f"Error in on_update callback: {e}")
