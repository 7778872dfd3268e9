"""
Structured observability hooks for the auction engine.

The engine reports what happened (session opened, action rejected, rival
dropped, auction ended, rival turn completed) through emit_event. A single
structured logger can be registered to receive those events, optionally
restricted to event-name prefixes such as ("auction.",); with none
registered, emitting is a no-op. Game logic never reads anything back from
here: effects returned by transitions remain the only channel to drivers.

Event names:
    auction.opened, auction.rejected, auction.ended, auction.override
    rival.dropped, rival_turn.completed
    player.withdrawn, player_turn.started
"""
from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Any, Iterable, Mapping, Protocol


class StructuredLogger(Protocol):
    """Consumer interface for structured observability events."""

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        ...


class EventRecorder:
    """In-memory logger keeping every event, handy for drivers and debugging.

    Attributes:
        events: (event, payload) pairs in emission order
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        self.events.append((event, dict(payload)))

    def named(self, event: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == event]

    def clear(self) -> None:
        self.events.clear()


class _HookRegistry:
    """Thread-safe registry for a single structured logger and its event filter."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._logger: StructuredLogger | None = None
        self._prefixes: tuple[str, ...] = ()

    def set_logger(self, logger: StructuredLogger | None, prefixes: Iterable[str] = ()) -> None:
        with self._lock:
            self._logger = logger
            self._prefixes = tuple(prefixes)

    def get_logger(self) -> StructuredLogger | None:
        with self._lock:
            return self._logger

    def get_prefixes(self) -> tuple[str, ...]:
        with self._lock:
            return self._prefixes

    def emit(self, event: str, payload: Mapping[str, Any]) -> None:
        with self._lock:
            logger, prefixes = self._logger, self._prefixes
        if logger is None:
            return
        if prefixes and not event.startswith(prefixes):
            return
        try:
            logger.record(event, payload)
        except Exception:
            # Observability must never break an auction in progress.
            # Downstream loggers are responsible for their own error handling.
            pass


_REGISTRY = _HookRegistry()


def set_global_logger(logger: StructuredLogger | None, prefixes: Iterable[str] = ()) -> None:
    """Register a structured logger (or clear it with None).

    Args:
        logger: Receiver of every emitted event
        prefixes: Only forward events whose name starts with one of these (all if empty)
    """
    _REGISTRY.set_logger(logger, prefixes)


def get_global_logger() -> StructuredLogger | None:
    """Return the currently registered logger, if any."""
    return _REGISTRY.get_logger()


def emit_event(event: str, payload: Mapping[str, Any]) -> None:
    """Emit a structured event if a logger is registered and accepts it."""
    _REGISTRY.emit(event, payload)


@contextmanager
def use_logger(logger: StructuredLogger | None, prefixes: Iterable[str] = ()):
    """Context manager that temporarily sets the logger (and its filter)."""
    previous, previous_prefixes = get_global_logger(), _REGISTRY.get_prefixes()
    set_global_logger(logger, prefixes)
    try:
        yield logger
    finally:
        set_global_logger(previous, previous_prefixes)
