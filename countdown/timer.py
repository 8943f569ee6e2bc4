"""Countdown timer with looping, pausing and direct time manipulation."""

from __future__ import annotations

import logging
import math
import numbers
import threading
from typing import Any, Callable, Optional

from countdown.display import to_date_string
from countdown.models import TimerConfig, TimerSnapshot, TimerState
from countdown.signals import Connection, TimerSignals
from countdown.ticker import Deferred, ThreadTicker, Ticker

log = logging.getLogger(__name__)

UNIT = 1.0  # one countdown step, in seconds

_default_ticker: Optional[ThreadTicker] = None
_default_ticker_lock = threading.Lock()


def default_ticker() -> ThreadTicker:
    """Shared real-time ticker used when a timer is built without one."""
    global _default_ticker
    with _default_ticker_lock:
        if _default_ticker is None:
            _default_ticker = ThreadTicker()
        return _default_ticker


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


class Timer:
    """A stateful countdown.

    The timer counts ``remaining`` down by one unit per elapsed second
    while running. When it reaches zero the callback fires; a looping
    timer then restarts from ``duration`` until ``loop_limit`` restarts
    have happened, otherwise it completes and goes idle.

    Signals (connect listeners with ``timer.tick.connect(fn)``):
    ``started``, ``stopped``, ``paused``, ``resumed``, ``completed``,
    ``tick(remaining)`` and ``did_loop(loops_completed_so_far)``.
    """

    def __init__(
        self,
        duration: float,
        loop: bool = False,
        loop_limit: Optional[float] = None,
        callback: Optional[Callable[[], None]] = None,
        *,
        ticker: Optional[Ticker] = None,
        label: str = "Timer",
    ) -> None:
        if not loop or not _is_number(loop_limit) or math.isinf(loop_limit):
            loop_limit = None
        elif loop_limit < 0:
            loop_limit = 0
        config = TimerConfig(duration=duration, loop=loop, loop_limit=loop_limit, label=label)

        self.label = config.label
        self._original = config.duration
        self._remaining = config.duration
        self._loop = config.effective_loop
        self._loop_limit = config.effective_limit
        self._loops_completed = 0
        self._running = False
        self._paused = False
        self._accumulated = 0.0
        self.callback = callback

        self._ticker: Ticker = ticker if ticker is not None else default_ticker()
        self._connection: Optional[Connection] = None
        self._pending_resume: Optional[Deferred] = None
        self._lock = threading.RLock()

        self.signals = TimerSignals()
        self.started = self.signals.started
        self.stopped = self.signals.stopped
        self.paused = self.signals.paused
        self.resumed = self.signals.resumed
        self.completed = self.signals.completed
        self.tick = self.signals.tick
        self.did_loop = self.signals.did_loop

    @classmethod
    def from_config(
        cls,
        config: TimerConfig,
        callback: Optional[Callable[[], None]] = None,
        ticker: Optional[Ticker] = None,
    ) -> Timer:
        return cls(
            config.duration,
            loop=config.loop,
            loop_limit=config.loop_limit,
            callback=callback,
            ticker=ticker,
            label=config.label,
        )

    def __repr__(self) -> str:
        return (
            f"Timer({self.label!r}, remaining={self._remaining!r}, "
            f"state={self.get_state().value})"
        )

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def duration(self) -> float:
        """The value restored on each loop and on ``reset()``."""
        return self._original

    @duration.setter
    def duration(self, value: float) -> None:
        if not _is_number(value) or value < 0:
            raise ValueError(f"duration must be a non-negative number, got {value!r}")
        with self._lock:
            self._original = value

    @property
    def remaining(self) -> float:
        """Current countdown value."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        """True while actively counting down."""
        return self._running

    @property
    def is_paused(self) -> bool:
        """True while deliberately suspended."""
        return self._paused

    @property
    def loop(self) -> bool:
        """Whether completion restarts the countdown."""
        return self._loop

    @property
    def loop_limit(self) -> float:
        """Maximum number of restarts; ``math.inf`` when unbounded, 0 when not looping."""
        return self._loop_limit

    @property
    def loops_completed(self) -> int:
        """Restarts performed since the last start or reset."""
        return self._loops_completed

    @property
    def state(self) -> TimerState:
        return self.get_state()

    def get_state(self) -> TimerState:
        """Running, Paused or Idle, derived from the flags."""
        if self._running:
            return TimerState.RUNNING
        if self._paused:
            return TimerState.PAUSED
        return TimerState.IDLE

    def snapshot(self) -> TimerSnapshot:
        """Return the current read surface as a model."""
        with self._lock:
            return TimerSnapshot(
                label=self.label,
                duration=self._original,
                remaining=self._remaining,
                state=self.get_state(),
                loop=self._loop,
                loop_limit=self._loop_limit,
                loops_completed=self._loops_completed,
            )

    to_date_string = staticmethod(to_date_string)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start counting down. Does nothing if already started."""
        with self._lock:
            if self._connection is not None:
                log.debug("%s: start() ignored, already started", self.label)
                return
            self._running = True
            self._paused = False
            self._accumulated = 0.0
            self._loops_completed = 0
            self._connection = self._ticker.connect(self._on_tick)
            log.debug("%s: started with %s remaining", self.label, self._remaining)
            self.started.fire()

    def stop(self) -> None:
        """Stop early. The callback still fires."""
        with self._lock:
            if self._connection is None:
                log.debug("%s: stop() ignored, not started", self.label)
                return
            self._go_idle()
            log.debug("%s: stopped with %s remaining", self.label, self._remaining)
            self._run_callback()
            self.stopped.fire()

    def reset(self) -> None:
        """Restore the original duration and stop counting. No callback, no signal."""
        with self._lock:
            self._go_idle()
            self._remaining = self._original
            self._loops_completed = 0
            log.debug("%s: reset to %s", self.label, self._original)

    def pause(self) -> None:
        """Suspend the countdown at its current value."""
        with self._lock:
            if self._paused or self._connection is None:
                return
            self._running = False
            self._paused = True
            log.debug("%s: paused at %s", self.label, self._remaining)
            self.paused.fire()

    def resume(self) -> None:
        """Continue a paused countdown from where it stopped."""
        with self._lock:
            if not self._paused:
                return
            # A manual resume supersedes any timed one from pause_for().
            self._cancel_pending_resume()
            self._running = True
            self._paused = False
            log.debug("%s: resumed at %s", self.label, self._remaining)
            self.resumed.fire()

    def pause_for(self, seconds: float) -> Optional[Deferred]:
        """Pause now and resume automatically after ``seconds``.

        Returns the handle of the scheduled resume, or None when the
        call was ignored (bad argument or timer not running).
        """
        if not _is_number(seconds) or math.isinf(seconds) or seconds <= 0:
            log.debug("%s: pause_for(%r) ignored", self.label, seconds)
            return None
        with self._lock:
            if not self._running:
                return None
            self._running = False
            self._paused = True
            handle: Optional[Deferred] = None

            def _resume() -> None:
                self._timed_resume(handle)

            handle = self._ticker.call_later(seconds, _resume)
            self._pending_resume = handle
            log.debug("%s: paused for %ss", self.label, seconds)
            self.paused.fire()
            return self._pending_resume

    # ------------------------------------------------------------------
    # Direct manipulation
    # ------------------------------------------------------------------

    def set(self, value: float) -> None:
        """Overwrite the remaining time. Non-numbers are ignored."""
        if not _is_number(value):
            log.debug("%s: set(%r) ignored", self.label, value)
            return
        with self._lock:
            self._remaining = value

    def add(self, value: float) -> None:
        """Add to the remaining time. Non-numbers are ignored."""
        if not _is_number(value):
            log.debug("%s: add(%r) ignored", self.label, value)
            return
        with self._lock:
            self._remaining += value

    def sub(self, value: float) -> None:
        """Subtract from the remaining time, never going below zero."""
        if not _is_number(value):
            log.debug("%s: sub(%r) ignored", self.label, value)
            return
        with self._lock:
            self._remaining = max(0, self._remaining - value)

    # ------------------------------------------------------------------
    # Tick handling
    # ------------------------------------------------------------------

    def _on_tick(self, dt: float) -> None:
        """Advance by ``dt`` seconds: loop or complete at zero, else count down."""
        with self._lock:
            if self._connection is None:
                return

            if self._remaining <= 0:
                if self._loop and self._loops_completed < self._loop_limit:
                    self._restart_loop()
                else:
                    self._complete()
                    return

            if not self._running:
                return

            self._accumulated += dt
            while self._running and self._accumulated >= UNIT and self._remaining > 0:
                self._accumulated -= UNIT
                self._remaining = max(0, self._remaining - UNIT)
                self.tick.fire(self._remaining)
            if self._remaining <= 0:
                self._accumulated = 0.0

    def _restart_loop(self) -> None:
        count = self._loops_completed
        # Counted before the callback so a raising callback cannot earn an extra loop.
        self._loops_completed += 1
        self._remaining = self._original
        self._accumulated = 0.0
        log.debug("%s: loop %d", self.label, count)
        self._run_callback()
        self.did_loop.fire(count)

    def _complete(self) -> None:
        self._remaining = 0
        self._go_idle()
        log.debug("%s: completed", self.label)
        self._run_callback()
        self.completed.fire()

    def _timed_resume(self, handle: Optional[Deferred]) -> None:
        with self._lock:
            # Stale: superseded by resume(), stop() or a later pause_for().
            if self._pending_resume is not handle:
                return
            self._pending_resume = None
            if not self._paused:
                return
            self._running = True
            self._paused = False
            log.debug("%s: timed pause over", self.label)
            self.resumed.fire()

    def _go_idle(self) -> None:
        """Release the ticker binding and clear the running/paused flags."""
        self._running = False
        self._paused = False
        self._accumulated = 0.0
        self._cancel_pending_resume()
        if self._connection is not None:
            self._connection.disconnect()
            self._connection = None

    def _cancel_pending_resume(self) -> None:
        if self._pending_resume is not None:
            self._pending_resume.cancel()
            self._pending_resume = None

    def _run_callback(self) -> None:
        if self.callback is not None:
            self.callback()
