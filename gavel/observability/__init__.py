"""Observability utilities for the gavel auction engine."""

from .hooks import (
    EventRecorder,
    emit_event,
    get_global_logger,
    set_global_logger,
    use_logger,
)

__all__ = [
    "EventRecorder",
    "emit_event",
    "get_global_logger",
    "set_global_logger",
    "use_logger",
]
