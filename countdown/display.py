"""Duration formatting and Rich terminal helpers."""

from __future__ import annotations

import math
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table
from rich.text import Text

from countdown.models import TimerSnapshot, TimerState

console = Console()

_STATE_STYLE: dict[TimerState, str] = {
    TimerState.RUNNING: "bold green",
    TimerState.PAUSED: "yellow",
    TimerState.IDLE: "dim",
}


def _coerce_seconds(value: Any) -> Optional[int]:
    """Whole, non-negative seconds from anything number-like; 0 otherwise, None for infinity."""
    if isinstance(value, bool):
        return 0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(n) or n < 0:
        return 0
    if math.isinf(n):
        return None
    return int(n)


def to_date_string(seconds: Any = 0) -> str:
    """Format seconds largest-unit-first: ``"1h 2m 5s"``, ``"1m 5s"``, ``"9s"``, ``"0s"``."""
    n = _coerce_seconds(seconds)
    if n is None:
        return "inf"
    hours, rest = divmod(n, 3600)
    minutes, secs = divmod(rest, 60)

    if hours >= 1:
        return f"{hours}h {minutes}m {secs}s"
    if minutes >= 1:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def to_clock_string(seconds: Any = 0) -> str:
    """Format seconds as ``MM:SS``, or ``H:MM:SS`` past the hour."""
    n = _coerce_seconds(seconds)
    if n is None:
        return "--:--"
    hours, rest = divmod(n, 3600)
    mins, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def print_snapshot(snapshot: TimerSnapshot) -> None:
    """Print a timer's state in a panel."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("field", style="bold")
    table.add_column("value")

    table.add_row("State", Text(snapshot.state.value, style=_STATE_STYLE[snapshot.state]))
    table.add_row("Remaining", to_date_string(snapshot.remaining))
    table.add_row("Duration", to_date_string(snapshot.duration))
    if snapshot.loop:
        limit = "unlimited" if snapshot.is_unbounded else str(int(snapshot.loop_limit))
        table.add_row("Loops", f"{snapshot.loops_completed} of {limit}")

    console.print(Panel(table, title=snapshot.label, border_style="blue"))


def print_banner(message: str) -> None:
    """Print a message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="magenta", padding=(1, 4)))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")


def create_timer_progress() -> Progress:
    """Create a Rich progress bar for the timer."""
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("{task.fields[clock]}"),
        console=console,
    )
