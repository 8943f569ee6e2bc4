"""Tests for formatting and display helpers."""

from __future__ import annotations

import math

import pytest

from countdown import display
from countdown.models import TimerSnapshot, TimerState


class TestToDateString:
    def test_hours(self) -> None:
        assert display.to_date_string(3725) == "1h 2m 5s"

    def test_exact_hour(self) -> None:
        assert display.to_date_string(3600) == "1h 0m 0s"

    def test_minutes(self) -> None:
        assert display.to_date_string(65) == "1m 5s"

    def test_seconds(self) -> None:
        assert display.to_date_string(9) == "9s"

    def test_zero(self) -> None:
        assert display.to_date_string(0) == "0s"

    def test_below_one(self) -> None:
        assert display.to_date_string(0.4) == "0s"

    def test_fraction_truncated(self) -> None:
        assert display.to_date_string(65.9) == "1m 5s"

    def test_numeric_string(self) -> None:
        assert display.to_date_string("90") == "1m 30s"

    @pytest.mark.parametrize("value", [None, "soon", True, -5, math.nan])
    def test_non_numeric_is_zero(self, value) -> None:
        assert display.to_date_string(value) == "0s"

    def test_default(self) -> None:
        assert display.to_date_string() == "0s"


class TestToClockString:
    def test_minutes(self) -> None:
        assert display.to_clock_string(65) == "01:05"

    def test_hours(self) -> None:
        assert display.to_clock_string(3725) == "1:02:05"


class TestPrintSnapshot:
    def test_renders_loops(self, capsys) -> None:
        snap = TimerSnapshot(
            label="Tea",
            duration=180,
            remaining=65,
            state=TimerState.PAUSED,
            loop=True,
            loop_limit=math.inf,
            loops_completed=2,
        )
        display.print_snapshot(snap)
        out = capsys.readouterr().out
        assert "Tea" in out
        assert "Paused" in out
        assert "1m 5s" in out
        assert "2 of unlimited" in out
