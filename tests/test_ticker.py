"""Tests for tick sources."""

from __future__ import annotations

import threading

import pytest

from countdown.ticker import Deferred, ManualTicker, ThreadTicker


class TestDeferred:
    def test_runs_once(self) -> None:
        calls: list[int] = []
        d = Deferred(lambda: calls.append(1))
        d.run()
        d.run()
        assert calls == [1]
        assert d.done
        assert not d.pending

    def test_cancel_prevents_run(self) -> None:
        calls: list[int] = []
        d = Deferred(lambda: calls.append(1))
        d.cancel()
        d.run()
        assert calls == []
        assert d.cancelled

    def test_cancel_after_run_is_noop(self) -> None:
        cancelled: list[int] = []
        d = Deferred(lambda: None, canceller=lambda: cancelled.append(1))
        d.run()
        d.cancel()
        assert cancelled == []
        assert not d.cancelled


class TestManualTicker:
    def test_advance_passes_delta(self) -> None:
        ticker = ManualTicker()
        seen: list[float] = []
        ticker.connect(seen.append)
        ticker.advance(0.25)
        ticker.step(2)
        assert seen == [0.25, 1.0, 1.0]
        assert ticker.now == 2.25

    def test_negative_delta_rejected(self) -> None:
        with pytest.raises(ValueError):
            ManualTicker().advance(-1)

    def test_call_later_order(self) -> None:
        ticker = ManualTicker()
        calls: list[str] = []
        ticker.call_later(2, lambda: calls.append("b"))
        ticker.call_later(1, lambda: calls.append("a"))
        ticker.call_later(2, lambda: calls.append("c"))
        ticker.advance(1)
        assert calls == ["a"]
        ticker.advance(5)
        assert calls == ["a", "b", "c"]

    def test_ticks_run_before_deferred(self) -> None:
        ticker = ManualTicker()
        calls: list[str] = []
        ticker.connect(lambda dt: calls.append("tick"))
        ticker.call_later(1, lambda: calls.append("later"))
        ticker.advance(1)
        assert calls == ["tick", "later"]

    def test_disconnect(self) -> None:
        ticker = ManualTicker()
        seen: list[float] = []
        conn = ticker.connect(seen.append)
        conn.disconnect()
        ticker.advance()
        assert seen == []
        assert ticker.listener_count == 0


class TestThreadTicker:
    def test_invalid_interval(self) -> None:
        with pytest.raises(ValueError):
            ThreadTicker(interval=0)

    def test_ticks_until_disconnected(self) -> None:
        ticker = ThreadTicker(interval=0.01)
        got_tick = threading.Event()
        conn = ticker.connect(lambda dt: got_tick.set())
        try:
            assert ticker.running
            assert got_tick.wait(timeout=2)
        finally:
            conn.disconnect()
            ticker.close()
        assert not ticker.running

    def test_listener_error_does_not_kill_thread(self) -> None:
        ticker = ThreadTicker(interval=0.01)
        count = {"n": 0}
        second = threading.Event()

        def _flaky(dt: float) -> None:
            count["n"] += 1
            if count["n"] == 1:
                raise RuntimeError("first tick fails")
            second.set()

        ticker.connect(_flaky)
        try:
            assert second.wait(timeout=2)
        finally:
            ticker.close()

    def test_failing_listener_does_not_starve_others(self) -> None:
        ticker = ThreadTicker(interval=0.01)
        ticks: list[float] = []
        got_ticks = threading.Event()

        def _broken(dt: float) -> None:
            raise RuntimeError("always fails")

        def _record(dt: float) -> None:
            ticks.append(dt)
            if len(ticks) >= 3:
                got_ticks.set()

        ticker.connect(_broken)
        ticker.connect(_record)
        try:
            assert got_ticks.wait(timeout=2)
        finally:
            ticker.close()
        assert all(dt > 0 for dt in ticks)

    def test_call_later_fires(self) -> None:
        ticker = ThreadTicker(interval=0.01)
        fired = threading.Event()
        handle = ticker.call_later(0.01, fired.set)
        try:
            assert fired.wait(timeout=2)
            assert handle.done
        finally:
            ticker.close()

    def test_call_later_cancel(self) -> None:
        ticker = ThreadTicker(interval=0.01)
        fired = threading.Event()
        handle = ticker.call_later(0.2, fired.set)
        handle.cancel()
        assert not fired.wait(timeout=0.4)
        assert handle.cancelled
        ticker.close()
