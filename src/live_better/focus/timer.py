"""Focus/break timer state machine with a self-clearing completion flag."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from live_better.core.errors import InvalidConfig, require_positive_int
from live_better.core.scheduler import Cancellable, Scheduler

logger = logging.getLogger(__name__)

COMPLETION_DISPLAY_SECONDS = 3.0


class TimerPhase(Enum):
    """Current phase of the timer."""
    FOCUS = "focus"
    BREAK = "break"

    @property
    def label(self) -> str:
        return "Focus" if self is TimerPhase.FOCUS else "Break"

    def next(self) -> TimerPhase:
        return TimerPhase.BREAK if self is TimerPhase.FOCUS else TimerPhase.FOCUS


@dataclass
class TimerState:
    """Current state of the timer."""
    phase: TimerPhase = TimerPhase.FOCUS
    running: bool = False
    remaining_seconds: int = 25 * 60
    focus_duration_minutes: int = 25
    break_duration_minutes: int = 5
    session_just_completed: bool = False

    @property
    def phase_total_seconds(self) -> int:
        """Full length of the current phase in seconds."""
        if self.phase == TimerPhase.FOCUS:
            return self.focus_duration_minutes * 60
        return self.break_duration_minutes * 60

    @property
    def time_remaining_display(self) -> str:
        """Format time remaining as MM:SS."""
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def progress_percent(self) -> float:
        """Progress through current phase (0-100)."""
        total = self.phase_total_seconds
        elapsed = total - self.remaining_seconds
        return min(100.0, max(0.0, (elapsed / total) * 100))


class TimerEngine:
    """Focus/break countdown advanced by an external one-second tick.

    The engine never runs its own clock. The host calls ``tick()`` once per
    elapsed second; when a phase runs out the engine flips to the other
    phase, stops, and raises ``session_just_completed`` for a short display
    window. The clear is a cancellable call on ``scheduler``. Without one the
    engine binds to the event loop running when ``start()`` is called, so
    synchronous hosts must pass a scheduler.

    Usage:
        engine = TimerEngine(focus_minutes=25, break_minutes=5, scheduler=ManualScheduler())
        engine.on_phase_complete = lambda phase: print(f"{phase.label} complete!")

        engine.start()
        engine.tick()  # once per second
        engine.pause()
        engine.reset()
    """

    def __init__(
        self,
        focus_minutes: int = 25,
        break_minutes: int = 5,
        scheduler: Scheduler | None = None,
        completion_display_seconds: float = COMPLETION_DISPLAY_SECONDS,
    ):
        require_positive_int(focus_minutes, "focus_minutes", InvalidConfig)
        require_positive_int(break_minutes, "break_minutes", InvalidConfig)

        self._state = TimerState(
            remaining_seconds=focus_minutes * 60,
            focus_duration_minutes=focus_minutes,
            break_duration_minutes=break_minutes,
        )
        self._scheduler = scheduler
        # Scheduler the current run will use for the completion clear
        self._active_scheduler: Scheduler | None = scheduler
        self._display_seconds = completion_display_seconds
        self._pending_clear: Cancellable | None = None
        # Bumped on every completion and reset so a late clear can't touch a newer flag
        self._completion_generation = 0

        # Callbacks
        self.on_phase_complete: Callable[[TimerPhase], None] | None = None
        self.on_completion_cleared: Callable[[], None] | None = None

    @property
    def state(self) -> TimerState:
        """Get current timer state (read-only copy)."""
        return replace(self._state)

    @property
    def phase(self) -> TimerPhase:
        return self._state.phase

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def session_just_completed(self) -> bool:
        return self._state.session_just_completed

    @property
    def focus_duration_minutes(self) -> int:
        return self._state.focus_duration_minutes

    @property
    def break_duration_minutes(self) -> int:
        return self._state.break_duration_minutes

    @property
    def has_pending_clear(self) -> bool:
        """Whether a session-complete clear is still scheduled."""
        return self._pending_clear is not None

    def duration_for_current_phase(self) -> int:
        """Length of the current phase in minutes."""
        if self._state.phase == TimerPhase.FOCUS:
            return self._state.focus_duration_minutes
        return self._state.break_duration_minutes

    def configure(self, focus_minutes: int, break_minutes: int) -> None:
        """Set both durations.

        An idle timer in the focus phase picks up the new focus length right
        away. Any other change waits for the next reset or phase transition.

        Raises:
            InvalidConfig: If either duration is not a positive integer
        """
        require_positive_int(focus_minutes, "focus_minutes", InvalidConfig)
        require_positive_int(break_minutes, "break_minutes", InvalidConfig)

        self._state.focus_duration_minutes = focus_minutes
        self._state.break_duration_minutes = break_minutes

        if not self._state.running and self._state.phase == TimerPhase.FOCUS:
            self._state.remaining_seconds = focus_minutes * 60
        else:
            # Keep the countdown inside the bounds of the current phase
            self._state.remaining_seconds = min(
                self._state.remaining_seconds, self.duration_for_current_phase() * 60
            )

        logger.info(f"Timer configured: focus={focus_minutes}m break={break_minutes}m")

    def start(self) -> None:
        """Start or resume the timer."""
        if self._state.running:
            return

        self._active_scheduler = self._resolve_scheduler()
        self._cancel_pending_clear()
        self._state.running = True
        self._state.session_just_completed = False
        logger.info(f"Timer started: {self._state.phase.value}")

    def pause(self) -> None:
        """Pause the timer."""
        if not self._state.running:
            return

        self._state.running = False
        logger.info("Timer paused")

    def reset(self) -> None:
        """Stop the timer and return to the start of a focus phase."""
        self._cancel_pending_clear()
        self._completion_generation += 1

        self._state.running = False
        self._state.phase = TimerPhase.FOCUS
        self._state.remaining_seconds = self._state.focus_duration_minutes * 60
        self._state.session_just_completed = False

        logger.info("Timer reset")

    def tick(self) -> None:
        """Advance the countdown by one second.

        The tick that brings the countdown to zero completes the phase, so a
        one-minute phase flips after exactly 60 ticks.
        """
        if not self._state.running:
            return

        if self._state.remaining_seconds > 0:
            self._state.remaining_seconds -= 1
            logger.debug(f"Tick: {self._state.time_remaining_display} left")
            if self._state.remaining_seconds > 0:
                return

        self._complete_phase()

    def progress_percent(self) -> float:
        """Progress through current phase (0-100)."""
        return self._state.progress_percent

    def focused_minutes(self) -> int:
        """Whole minutes elapsed in the current focus phase, 0 during a break."""
        if self._state.phase != TimerPhase.FOCUS:
            return 0
        elapsed = self._state.focus_duration_minutes * 60 - self._state.remaining_seconds
        return max(0, elapsed // 60)

    def completion_message(self) -> tuple[str, str] | None:
        """Headline and hint for the session-complete banner, if it is showing."""
        if not self._state.session_just_completed:
            return None
        if self._state.phase == TimerPhase.BREAK:
            return "Focus session complete!", "Time for a break"
        return "Break complete!", "Ready for the next focus session?"

    def get_summary(self) -> dict:
        """Get a summary of the timer for display or logging."""
        return {
            "phase": self._state.phase.value,
            "running": self._state.running,
            "time_remaining": self._state.time_remaining_display,
            "remaining_seconds": self._state.remaining_seconds,
            "progress_percent": round(self.progress_percent(), 1),
            "session_just_completed": self._state.session_just_completed,
            "focus_minutes": self._state.focus_duration_minutes,
            "break_minutes": self._state.break_duration_minutes,
        }

    def _complete_phase(self) -> None:
        """Handle phase completion and transition."""
        completed_phase = self._state.phase
        # Bound by start(), which every run goes through
        scheduler = self._active_scheduler or self._resolve_scheduler()

        self._state.phase = completed_phase.next()
        self._state.remaining_seconds = self.duration_for_current_phase() * 60
        self._state.running = False
        self._state.session_just_completed = True

        self._schedule_clear(scheduler)

        logger.info(f"{completed_phase.label} phase complete, next: {self._state.phase.value}")

        if self.on_phase_complete:
            try:
                self.on_phase_complete(completed_phase)
            except Exception as e:
                logger.error(f"Error in on_phase_complete callback: {e}")

    def _schedule_clear(self, scheduler: Scheduler) -> None:
        self._cancel_pending_clear()
        self._completion_generation += 1
        generation = self._completion_generation

        self._pending_clear = scheduler.call_later(
            self._display_seconds, lambda: self._clear_completion(generation)
        )

    def _cancel_pending_clear(self) -> None:
        if self._pending_clear is not None:
            self._pending_clear.cancel()
            self._pending_clear = None

    def _clear_completion(self, generation: int) -> None:
        if generation != self._completion_generation:
            return

        self._pending_clear = None
        if not self._state.session_just_completed:
            return

        self._state.session_just_completed = False
        logger.debug("Session-complete flag cleared")

        if self.on_completion_cleared:
            try:
                self.on_completion_cleared()
            except Exception as e:
                logger.error(f"Error in on_completion_cleared callback: {e}")

    def _resolve_scheduler(self) -> Scheduler:
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "TimerEngine has no scheduler and no event loop is running; "
                "pass scheduler=ManualScheduler() when driving it synchronously"
            ) from None
