"""CLI commands for Live Better using Typer."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from live_better import __version__
from live_better.core.config import get_config
from live_better.core.errors import LiveBetterError
from live_better.hydration.tracker import HydrationTracker

# Initialize Typer app
app = typer.Typer(
    name="live-better",
    help="Focus timer and hydration tracker.",
    add_completion=False,
)

console = Console()


def setup_logging(log_level: str, log_file: Path | None = None) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(log_file)]

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    # Reduce noise from external libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def render_widget(state) -> Panel:
    """Render a WidgetState as a Rich panel."""
    phase_style = "green" if state.phase == "focus" else "cyan"
    status = "running" if state.timer_running else "paused"

    timer_line = Text.assemble(
        (f"{state.phase_label} ", f"bold {phase_style}"),
        (state.time_remaining, "bold"),
        (f"  ({status})", "dim"),
    )

    rows: list = [
        timer_line,
        ProgressBar(total=100, completed=state.timer_progress_percent, width=40),
    ]

    if state.session_just_completed:
        rows.append(Text(f"{state.completion_headline} {state.completion_hint}", style="bold yellow"))

    rows.append(Text(""))
    rows.append(Text(f"Water {state.current_intake_ml}ml / {state.daily_goal_ml}ml goal"))
    rows.append(ProgressBar(total=100, completed=state.intake_percent, width=40))
    rows.append(Text(f"{state.intake_percent:.0f}%  {state.hydration_message}", style="dim"))

    if state.reminder_active:
        rows.append(Text("Reminder! You are behind on water today.", style="bold red"))

    return Panel(Group(*rows), title="Live Better", border_style=phase_style)


@app.command()
def run(
    focus: int = typer.Option(None, "--focus", "-f", min=1, max=120, help="Focus minutes"),
    break_: int = typer.Option(None, "--break", "-b", min=1, max=60, help="Break minutes"),
    goal: int = typer.Option(None, "--goal", "-g", min=500, max=5000, help="Daily water goal in ml"),
    intake: int = typer.Option(0, "--intake", "-i", help="Water already drunk today in ml"),
    sessions: int = typer.Option(
        1, "--sessions", "-s", min=1, help="Phases to run before exiting"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Run the timer in the foreground with a live display.

    Examples:
        live-better run -f 25 -b 5
        live-better run -f 50 -b 10 -s 4 -i 500
    """
    from live_better.widget.controller import WidgetController

    config = get_config()
    setup_logging(log_level, config.log_file)

    timer_config = config.timer.model_copy(
        update={
            "focus_minutes": focus if focus is not None else config.timer.focus_minutes,
            "break_minutes": break_ if break_ is not None else config.timer.break_minutes,
        }
    )
    hydration_config = config.hydration.model_copy(
        update={"daily_goal_ml": goal if goal is not None else config.hydration.daily_goal_ml}
    )
    run_config = config.model_copy(update={"timer": timer_config, "hydration": hydration_config})

    async def run_session() -> int:
        try:
            controller = WidgetController(run_config)
            if intake:
                controller.add_intake(intake)
        except LiveBetterError as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1

        completed = 0
        done = asyncio.Event()
        restart: asyncio.TimerHandle | None = None

        def on_session_complete(phase) -> None:
            nonlocal completed, restart
            completed += 1
            if completed >= sessions:
                done.set()
            else:
                restart = asyncio.get_running_loop().call_later(
                    run_config.timer.completion_display_seconds, controller.start_timer
                )

        controller.on_session_complete = on_session_complete

        with Live(render_widget(controller.snapshot()), console=console, refresh_per_second=4) as live:
            controller.on_update = lambda state: live.update(render_widget(state))

            loop_task = asyncio.create_task(controller.run())
            controller.start_timer()

            try:
                await done.wait()
                # Leave the completion banner up for its display window
                await asyncio.sleep(run_config.timer.completion_display_seconds)
            finally:
                if restart is not None:
                    restart.cancel()
                await controller.stop()
                await loop_task

        console.print(f"[green]Done:[/green] {completed} phase(s) completed")
        return 0

    try:
        exit_code = asyncio.run(run_session())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
        exit_code = 0

    if exit_code:
        raise typer.Exit(exit_code)


@app.command()
def reminder(
    goal: int = typer.Option(
        None, "--goal", "-g", min=500, max=5000, help="Daily water goal in ml"
    ),
    intake: int = typer.Option(0, "--intake", "-i", help="Water drunk so far in ml"),
    hour: int = typer.Option(
        None, "--hour", min=0, max=23, help="Hour of day to evaluate at (default: now)"
    ),
) -> None:
    """Check whether the hydration reminder would be showing."""
    config = get_config()
    goal = goal if goal is not None else config.hydration.daily_goal_ml
    hour = datetime.now().hour if hour is None else hour

    try:
        tracker = HydrationTracker(daily_goal_ml=goal, clock=lambda: datetime.now().replace(hour=hour))
        if intake:
            tracker.add_intake(intake)
    except LiveBetterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    active = tracker.evaluate_reminder(hour)
    expected = tracker.expected_intake(hour)

    table = Table(title="Hydration Pace", show_header=True, header_style="bold cyan")
    table.add_column("Metric")
    table.add_column("Value")

    table.add_row("Hour", f"{hour:02d}:00")
    table.add_row("Intake", f"{tracker.current_intake_ml}ml / {tracker.daily_goal_ml}ml")
    table.add_row("Expected by now", f"{expected:.0f}ml")
    table.add_row("Reminder threshold", f"{expected * tracker.policy.grace_ratio:.0f}ml")
    table.add_row("Progress", f"{tracker.intake_percent():.0f}% - {tracker.status_message()}")
    table.add_row("Reminder", "[bold red]ON[/bold red]" if active else "[green]off[/green]")

    console.print(table)


@app.command()
def config_show() -> None:
    """Show current configuration."""
    config = get_config()

    table = Table(title="Live Better Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")

    # Paths
    table.add_row("[bold]Paths[/bold]", "")
    table.add_row("  Log Directory", str(config.log_dir))
    table.add_row("  Config File", str(config.config_file))
    table.add_row("  Log Level", config.log_level)

    # Timer
    table.add_row("[bold]Timer[/bold]", "")
    table.add_row("  Focus", f"{config.timer.focus_minutes} min")
    table.add_row("  Break", f"{config.timer.break_minutes} min")
    table.add_row("  Completion Banner", f"{config.timer.completion_display_seconds:g}s")

    # Hydration
    table.add_row("[bold]Hydration[/bold]", "")
    table.add_row("  Daily Goal", f"{config.hydration.daily_goal_ml}ml")
    table.add_row("  Quick Add", ", ".join(f"{ml}ml" for ml in config.hydration.quick_add_ml))
    table.add_row("  Custom Max", f"{config.hydration.max_custom_ml}ml")
    table.add_row("  Reminder Re-check", f"{config.hydration.reevaluate_seconds}s")

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Live Better v{__version__}")


@app.callback()
def main_callback() -> None:
    """Live Better - focus timer and hydration tracker."""
    pass


if __name__ == "__main__":
    app()
