"""Named event channels with ordered listeners."""

from __future__ import annotations

from typing import Any, Callable

Listener = Callable[..., None]


class Connection:
    """Handle returned by :meth:`Signal.connect`."""

    def __init__(self, signal: Signal, listener: Listener) -> None:
        self._signal = signal
        self._listener = listener
        self._connected = True

    @property
    def connected(self) -> bool:
        """False once disconnected."""
        return self._connected

    def disconnect(self) -> None:
        """Remove the listener. Safe to call more than once."""
        if not self._connected:
            return
        self._connected = False
        self._signal.disconnect(self._listener)


class Signal:
    """A single channel. Listeners fire in the order they were connected."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self._listeners)})"

    @property
    def listener_count(self) -> int:
        """Number of connected listeners."""
        return len(self._listeners)

    @property
    def listeners(self) -> list[Listener]:
        """Snapshot of the connected listeners, in firing order."""
        return list(self._listeners)

    def connect(self, listener: Listener) -> Connection:
        """Add a listener; it fires after those already connected."""
        self._listeners.append(listener)
        return Connection(self, listener)

    def once(self, listener: Listener) -> Connection:
        """Connect a listener that disconnects itself after the first fire."""
        conn: Connection

        def _wrapper(*args: Any) -> None:
            conn.disconnect()
            listener(*args)

        conn = self.connect(_wrapper)
        return conn

    def disconnect(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def disconnect_all(self) -> None:
        self._listeners.clear()

    def fire(self, *args: Any) -> None:
        """Call every listener with ``args``. Listener errors propagate."""
        # Snapshot so listeners connected mid-fire wait for the next one.
        for listener in self.listeners:
            listener(*args)


class TimerSignals:
    """The channels a timer publishes on."""

    NAMES = ("started", "stopped", "paused", "resumed", "completed", "tick", "did_loop")

    def __init__(self) -> None:
        self.started = Signal("started")
        self.stopped = Signal("stopped")
        self.paused = Signal("paused")
        self.resumed = Signal("resumed")
        self.completed = Signal("completed")
        self.tick = Signal("tick")  # payload: remaining
        self.did_loop = Signal("did_loop")  # payload: loops completed so far

    def __getitem__(self, name: str) -> Signal:
        if name not in self.NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def disconnect_all(self) -> None:
        for name in self.NAMES:
            self[name].disconnect_all()
