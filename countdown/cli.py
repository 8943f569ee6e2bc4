"""Countdown CLI -- run a looping, pausable countdown in the terminal."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from countdown import config as cfg
from countdown import display
from countdown.display import to_clock_string, to_date_string
from countdown.models import TimerConfig
from countdown.ticker import ThreadTicker, Ticker
from countdown.timer import Timer


app = typer.Typer(
    name="countdown",
    help="A stateful countdown timer with loops and pauses.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """A stateful countdown timer with loops and pauses."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=display.console, show_path=False)],
        )


def _make_ticker(interval: float) -> Ticker:
    return ThreadTicker(interval=interval)


def _wait(finished: threading.Event, ticker: Ticker) -> None:
    """Block until the timer finishes. Ctrl-C raises KeyboardInterrupt here."""
    while not finished.wait(0.1):
        pass


# ---------------------------------------------------------------------------
# Running a timer
# ---------------------------------------------------------------------------


@app.command()
def run(
    seconds: Optional[float] = typer.Argument(None, help="Countdown length in seconds"),
    loop: bool = typer.Option(False, "--loop", "-l", help="Restart after each completion"),
    times: Optional[int] = typer.Option(
        None, "--times", "-n", help="Number of restarts when looping (unlimited if omitted)"
    ),
    label: str = typer.Option("Timer", "--label", help="Name shown next to the progress bar"),
    pause_at: Optional[int] = typer.Option(
        None, "--pause-at", help="Pause when this many seconds remain"
    ),
    pause_for: float = typer.Option(5.0, "--pause-for", help="Length of the --pause-at pause"),
) -> None:
    """Run a countdown with a progress bar. Ctrl-C stops it early."""
    settings = cfg.load_config()
    duration = seconds if seconds is not None else settings.default_seconds

    try:
        timer_config = TimerConfig(
            duration=duration, loop=loop, loop_limit=times if loop else None, label=label
        )
    except ValidationError as exc:
        display.print_warning(f"Invalid timer: {exc.errors()[0]['msg']}")
        raise typer.Exit(1)

    ticker = _make_ticker(settings.tick_interval)
    timer = Timer.from_config(timer_config, ticker=ticker)
    finished = threading.Event()
    interrupted = False

    progress = display.create_timer_progress()
    with progress:
        task = progress.add_task(label, total=duration, clock=to_clock_string(duration))

        def _on_tick(remaining: float) -> None:
            progress.update(
                task, completed=timer.duration - remaining, clock=to_clock_string(remaining)
            )
            if pause_at is not None and remaining == pause_at:
                timer.pause_for(pause_for)

        def _on_loop(count: int) -> None:
            progress.console.print(f"[cyan]Loop {count + 1} done, restarting.[/cyan]")
            progress.update(task, completed=0, clock=to_clock_string(timer.remaining))

        timer.tick.connect(_on_tick)
        timer.did_loop.connect(_on_loop)
        timer.paused.connect(lambda: progress.console.print("[yellow]Paused.[/yellow]"))
        timer.resumed.connect(lambda: progress.console.print("[yellow]Resumed.[/yellow]"))
        timer.completed.connect(finished.set)
        timer.stopped.connect(finished.set)

        timer.start()
        try:
            _wait(finished, ticker)
        except KeyboardInterrupt:
            interrupted = True
            timer.stop()

    if isinstance(ticker, ThreadTicker):
        ticker.close()

    if interrupted:
        display.print_warning(f"Timer stopped early with {to_date_string(timer.remaining)} left.")
        display.print_snapshot(timer.snapshot())
        raise typer.Exit(1)

    if settings.bell:
        display.console.print("\a", end="")
    n = timer.loops_completed
    loops = f" after {n} loop{'s' if n != 1 else ''}" if n else ""
    display.print_banner(f"{label} finished{loops}.")


@app.command(name="format")
def format_seconds(
    seconds: str = typer.Argument(..., help="Number of seconds to format"),
) -> None:
    """Show a number of seconds as hours, minutes and seconds."""
    display.console.print(to_date_string(seconds))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def config(
    seconds: Optional[int] = typer.Option(None, "--seconds", help="Default countdown length"),
    interval: Optional[float] = typer.Option(
        None, "--interval", help="Tick interval in seconds (0 < interval <= 1)"
    ),
    bell: Optional[bool] = typer.Option(None, "--bell/--no-bell", help="Ring the terminal bell"),
    reset: bool = typer.Option(False, "--reset", help="Restore default settings"),
    show: bool = typer.Option(False, "--show", help="Show current settings"),
) -> None:
    """View or change the default settings."""
    changes = {
        key: value
        for key, value in (("default_seconds", seconds), ("tick_interval", interval), ("bell", bell))
        if value is not None
    }

    if reset:
        cfg.reset_config()
        display.print_success("Reset to default settings.")
    elif changes:
        try:
            updated = cfg.update_config(**changes)
        except ValidationError as exc:
            display.print_warning(f"Invalid setting: {exc.errors()[0]['msg']}")
            raise typer.Exit(1)
        display.print_success(
            f"Saved: {updated.default_seconds}s default, "
            f"{updated.tick_interval}s interval, bell {'on' if updated.bell else 'off'}."
        )
    elif show:
        current = cfg.load_config()
        display.print_info(f"Default length: {to_date_string(current.default_seconds)}")
        display.print_info(f"Tick interval: {current.tick_interval}s")
        display.print_info(f"Bell: {'on' if current.bell else 'off'}")
    else:
        display.print_info("Use --seconds, --interval, --bell/--no-bell, --reset, or --show.")
