"""Tests for the focus/break timer engine."""

import asyncio

import pytest

from live_better.core.errors import InvalidConfig
from live_better.core.scheduler import ManualScheduler
from live_better.focus.timer import TimerEngine, TimerPhase


def run_seconds(engine, scheduler, seconds):
    """Let wall-clock seconds pass, ticking once per second."""
    for _ in range(seconds):
        scheduler.advance(1)
        engine.tick()


def test_initial_state(engine):
    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == 60
    assert engine.running is False
    assert engine.session_just_completed is False
    assert engine.progress_percent() == 0


@pytest.mark.parametrize("focus,break_", [(1, 1), (25, 5), (120, 60), (7, 3)])
def test_configure_then_reset_starts_fresh_focus(engine, focus, break_):
    engine.start()
    for _ in range(30):
        engine.tick()

    engine.configure(focus, break_)
    engine.reset()

    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == focus * 60
    assert engine.running is False


def test_tick_is_a_noop_when_paused(engine):
    for _ in range(500):
        engine.tick()
    assert engine.remaining_seconds == 60
    assert engine.phase == TimerPhase.FOCUS

    engine.start()
    engine.tick()
    engine.pause()
    for _ in range(500):
        engine.tick()
    assert engine.remaining_seconds == 59
    assert engine.phase == TimerPhase.FOCUS


def test_focus_completes_after_exactly_sixty_ticks(engine, scheduler):
    engine.start()
    for _ in range(59):
        engine.tick()
    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == 1

    engine.tick()

    assert engine.phase == TimerPhase.BREAK
    assert engine.remaining_seconds == 2 * 60
    assert engine.running is False
    assert engine.session_just_completed is True
    assert scheduler.pending == 1


def test_completion_flag_clears_after_three_seconds(engine, scheduler):
    engine.start()
    for _ in range(60):
        engine.tick()

    scheduler.advance(2)
    assert engine.session_just_completed is True

    scheduler.advance(1)
    assert engine.session_just_completed is False
    assert engine.has_pending_clear is False
    assert scheduler.pending == 0


def test_next_phase_waits_for_start(engine, scheduler):
    engine.start()
    run_seconds(engine, scheduler, 60)
    run_seconds(engine, scheduler, 30)

    assert engine.phase == TimerPhase.BREAK
    assert engine.remaining_seconds == 120


def test_break_completion_returns_to_focus(engine, scheduler):
    engine.start()
    run_seconds(engine, scheduler, 60)
    engine.start()
    run_seconds(engine, scheduler, 120)

    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == 60
    assert engine.session_just_completed is True


def test_start_clears_completion_flag(engine, scheduler):
    engine.start()
    for _ in range(60):
        engine.tick()

    engine.start()

    assert engine.running is True
    assert engine.session_just_completed is False
    assert scheduler.pending == 0


def test_start_and_pause_are_idempotent(engine):
    engine.start()
    engine.tick()
    engine.start()
    assert engine.running is True
    assert engine.remaining_seconds == 59

    engine.pause()
    engine.pause()
    assert engine.running is False
    assert engine.remaining_seconds == 59


def test_progress_is_monotonic_and_bounded(engine):
    engine.start()
    previous = engine.progress_percent()
    while engine.running:
        engine.tick()
        if not engine.running:
            break
        current = engine.progress_percent()
        assert 0 <= current <= 100
        assert current >= previous
        previous = current

    assert previous == pytest.approx(59 / 60 * 100)


def test_progress_percent_midway():
    engine = TimerEngine(focus_minutes=2, break_minutes=1, scheduler=ManualScheduler())
    engine.start()
    for _ in range(60):
        engine.tick()
    assert engine.progress_percent() == pytest.approx(50.0)


def test_reset_cancels_pending_clear(engine, scheduler):
    engine.start()
    for _ in range(60):
        engine.tick()

    engine.reset()

    assert engine.session_just_completed is False
    assert engine.has_pending_clear is False
    assert scheduler.pending == 0
    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == 60


def test_stale_clear_never_hits_a_newer_completion():
    scheduler = ManualScheduler()
    engine = TimerEngine(
        focus_minutes=1, break_minutes=1, scheduler=scheduler, completion_display_seconds=100
    )

    engine.start()
    run_seconds(engine, scheduler, 60)  # completes at t=60, clear due at t=160
    scheduler.advance(1)
    engine.reset()

    engine.start()
    run_seconds(engine, scheduler, 60)  # completes at t=121, clear due at t=221
    assert engine.session_just_completed is True

    scheduler.advance(165 - scheduler.now)
    assert engine.session_just_completed is True

    scheduler.advance(221 - scheduler.now)
    assert engine.session_just_completed is False


def test_back_to_back_completions_keep_a_single_pending_clear():
    scheduler = ManualScheduler()
    engine = TimerEngine(
        focus_minutes=1, break_minutes=1, scheduler=scheduler, completion_display_seconds=100
    )

    engine.start()
    run_seconds(engine, scheduler, 60)
    engine.start()
    run_seconds(engine, scheduler, 60)

    assert engine.phase == TimerPhase.FOCUS
    assert scheduler.pending == 1

    scheduler.advance(165 - scheduler.now)
    assert engine.session_just_completed is True

    scheduler.advance(220 - scheduler.now)
    assert engine.session_just_completed is False


def test_configure_idle_focus_reseeds_countdown(engine):
    engine.start()
    for _ in range(10):
        engine.tick()
    engine.pause()

    engine.configure(2, 2)

    assert engine.remaining_seconds == 120
    assert engine.focus_duration_minutes == 2


def test_configure_while_running_keeps_countdown(engine):
    engine.start()
    for _ in range(10):
        engine.tick()

    engine.configure(5, 2)

    assert engine.remaining_seconds == 50
    assert engine.running is True
    assert engine.focus_duration_minutes == 5


def test_configure_shorter_while_running_stays_within_phase():
    engine = TimerEngine(focus_minutes=10, break_minutes=5, scheduler=ManualScheduler())
    engine.start()
    for _ in range(5):
        engine.tick()

    engine.configure(1, 5)

    assert engine.remaining_seconds == 60


def test_configure_during_idle_break_waits_for_reset(engine, scheduler):
    engine.start()
    for _ in range(60):
        engine.tick()
    assert engine.phase == TimerPhase.BREAK

    engine.configure(3, 4)
    assert engine.remaining_seconds == 120

    engine.reset()
    assert engine.remaining_seconds == 180


@pytest.mark.parametrize(
    "focus,break_",
    [(0, 5), (5, 0), (-1, 5), (5, -3), (1.5, 5), (5, 2.0), ("5", 5), (True, 5)],
)
def test_configure_rejects_invalid_values(engine, focus, break_):
    with pytest.raises(InvalidConfig):
        engine.configure(focus, break_)

    assert engine.focus_duration_minutes == 1
    assert engine.break_duration_minutes == 2
    assert engine.remaining_seconds == 60


def test_constructor_rejects_invalid_durations():
    with pytest.raises(InvalidConfig):
        TimerEngine(focus_minutes=0)
    with pytest.raises(InvalidConfig):
        TimerEngine(break_minutes=-5)


def test_time_remaining_display(engine):
    assert engine.state.time_remaining_display == "01:00"
    engine.start()
    for _ in range(15):
        engine.tick()
    assert engine.state.time_remaining_display == "00:45"


def test_focused_minutes():
    engine = TimerEngine(focus_minutes=25, break_minutes=5, scheduler=ManualScheduler())
    engine.start()
    for _ in range(150):
        engine.tick()
    assert engine.focused_minutes() == 2


def test_focused_minutes_is_zero_during_break(engine):
    engine.start()
    for _ in range(60):
        engine.tick()
    assert engine.focused_minutes() == 0


def test_completion_message(engine, scheduler):
    assert engine.completion_message() is None

    engine.start()
    run_seconds(engine, scheduler, 60)
    assert engine.completion_message() == ("Focus session complete!", "Time for a break")

    engine.start()
    run_seconds(engine, scheduler, 120)
    assert engine.completion_message() == ("Break complete!", "Ready for the next focus session?")


def test_on_phase_complete_callback(engine):
    completed = []
    engine.on_phase_complete = completed.append

    engine.start()
    for _ in range(60):
        engine.tick()

    assert completed == [TimerPhase.FOCUS]


def test_callback_errors_do_not_break_transition(engine):
    def boom(phase):
        raise RuntimeError("renderer crashed")

    engine.on_phase_complete = boom
    engine.start()
    for _ in range(60):
        engine.tick()

    assert engine.phase == TimerPhase.BREAK
    assert engine.session_just_completed is True


def test_state_is_a_copy(engine):
    state = engine.state
    state.remaining_seconds = 5
    assert engine.remaining_seconds == 60


def test_get_summary(engine):
    summary = engine.get_summary()
    assert summary["phase"] == "focus"
    assert summary["time_remaining"] == "01:00"
    assert summary["running"] is False
    assert summary["focus_minutes"] == 1
    assert summary["break_minutes"] == 2


@pytest.mark.asyncio
async def test_uses_running_event_loop_without_scheduler():
    engine = TimerEngine(focus_minutes=1, break_minutes=1, completion_display_seconds=0.05)
    engine.start()
    for _ in range(60):
        engine.tick()

    assert engine.session_just_completed is True
    await asyncio.sleep(0.2)
    assert engine.session_just_completed is False


def test_start_without_scheduler_outside_event_loop_fails_cleanly():
    engine = TimerEngine(focus_minutes=1, break_minutes=1)

    with pytest.raises(RuntimeError, match="scheduler"):
        engine.start()

    assert engine.running is False
    assert engine.phase == TimerPhase.FOCUS
    assert engine.remaining_seconds == 60

    for _ in range(60):
        engine.tick()
    assert engine.phase == TimerPhase.FOCUS
    assert engine.session_just_completed is False


def test_synchronous_host_with_manual_scheduler_completes_and_clears():
    scheduler = ManualScheduler()
    engine = TimerEngine(focus_minutes=1, break_minutes=1, scheduler=scheduler)
    completed = []
    engine.on_phase_complete = completed.append

    engine.start()
    for _ in range(60):
        engine.tick()

    assert completed == [TimerPhase.FOCUS]
    assert engine.session_just_completed is True
    assert engine.has_pending_clear is True

    scheduler.advance(3)
    assert engine.session_just_completed is False
