"""Recurring tick sources and one-shot deferred calls.

A timer only needs two things from its host loop: "call me back
periodically with the elapsed time" and "call this once after a delay".
:class:`ManualTicker` provides both in virtual time (tests, hosts that
own their own frame loop); :class:`ThreadTicker` provides them in real
time from a background thread.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Optional, Protocol

from countdown.signals import Connection, Signal

log = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class Deferred:
    """Handle for a one-shot call scheduled with ``call_later``."""

    def __init__(self, fn: Callable[[], None], canceller: Optional[Callable[[], None]] = None) -> None:
        self._fn = fn
        self._canceller = canceller
        self._cancelled = False
        self._done = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """True once cancelled before running."""
        return self._cancelled

    @property
    def done(self) -> bool:
        """True once the call has run."""
        return self._done

    @property
    def pending(self) -> bool:
        """True while the call may still run."""
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        """Prevent the call from running. Safe to call more than once."""
        with self._lock:
            if not self.pending:
                return
            self._cancelled = True
        if self._canceller is not None:
            self._canceller()

    def run(self) -> None:
        """Run the call unless it already ran or was cancelled."""
        with self._lock:
            if not self.pending:
                return
            self._done = True
        self._fn()


class Ticker(Protocol):
    """Recurring tick source with one-shot deferred calls."""

    def connect(self, callback: TickCallback) -> Connection: ...

    def call_later(self, delay: float, fn: Callable[[], None]) -> Deferred: ...


class ManualTicker:
    """Virtual-time ticker advanced explicitly by the caller."""

    def __init__(self) -> None:
        self._heartbeat = Signal("heartbeat")
        self._now = 0.0
        self._pending: list[tuple[float, int, Deferred]] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        """Virtual seconds elapsed since construction."""
        return self._now

    @property
    def listener_count(self) -> int:
        """Number of connected tick callbacks."""
        return self._heartbeat.listener_count

    def connect(self, callback: TickCallback) -> Connection:
        """Call ``callback(dt)`` on every advance."""
        return self._heartbeat.connect(callback)

    def call_later(self, delay: float, fn: Callable[[], None]) -> Deferred:
        """Run ``fn`` once the virtual clock has moved ``delay`` seconds on."""
        deferred = Deferred(fn)
        heapq.heappush(self._pending, (self._now + delay, next(self._seq), deferred))
        return deferred

    def advance(self, dt: float = 1.0) -> None:
        """Move the clock forward by ``dt``.

        Tick listeners run first, then every deferred call that has come
        due, in due-time order.
        """
        if dt < 0:
            raise ValueError("dt must not be negative")
        self._now += dt
        self._heartbeat.fire(dt)
        while self._pending and self._pending[0][0] <= self._now:
            _, _, deferred = heapq.heappop(self._pending)
            deferred.run()

    def step(self, n: int = 1, dt: float = 1.0) -> None:
        """Advance ``n`` times by ``dt``."""
        for _ in range(n):
            self.advance(dt)


class ThreadTicker:
    """Real-time ticker driven by a single daemon thread.

    The worker starts on the first ``connect`` and exits once nothing is
    connected, so an idle timer costs no thread.
    """

    def __init__(self, interval: float = 0.1) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._heartbeat = Signal("heartbeat")
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._timers: set[threading.Timer] = set()

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return self._interval

    @property
    def running(self) -> bool:
        """True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def connect(self, callback: TickCallback) -> Connection:
        """Call ``callback(dt)`` every interval, starting the worker if needed."""
        conn = self._heartbeat.connect(callback)
        with self._lock:
            if self._thread is None:
                self._stop.clear()
                self._thread = threading.Thread(
                    target=self._run, name="countdown-ticker", daemon=True
                )
                self._thread.start()
                log.debug("Ticker thread started (interval=%.3fs)", self._interval)
        return conn

    def call_later(self, delay: float, fn: Callable[[], None]) -> Deferred:
        """Run ``fn`` once after ``delay`` seconds on a timer thread."""
        holder: dict[str, threading.Timer] = {}

        def _cancel() -> None:
            t = holder["timer"]
            t.cancel()
            self._timers.discard(t)

        deferred = Deferred(fn, canceller=_cancel)

        def _fire() -> None:
            self._timers.discard(holder["timer"])
            try:
                deferred.run()
            except Exception:
                log.exception("Deferred call failed")

        t = threading.Timer(delay, _fire)
        t.daemon = True
        holder["timer"] = t
        self._timers.add(t)
        t.start()
        return deferred

    def close(self) -> None:
        """Stop the worker thread and cancel outstanding deferred calls."""
        self._stop.set()
        for t in list(self._timers):
            t.cancel()
        self._timers.clear()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval * 5)
        with self._lock:
            if self._thread is thread:
                self._thread = None

    def _run(self) -> None:
        last = time.monotonic()
        while not self._stop.wait(self._interval):
            with self._lock:
                if self._heartbeat.listener_count == 0:
                    self._thread = None
                    log.debug("Ticker thread idle, exiting")
                    return
            now = time.monotonic()
            dt = now - last
            last = now
            for listener in self._heartbeat.listeners:
                try:
                    listener(dt)
                except Exception:
                    log.exception("Tick listener %r failed", listener)
        with self._lock:
            if self._thread is threading.current_thread():
                self._thread = None
