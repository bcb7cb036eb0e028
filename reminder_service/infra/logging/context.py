"""Context propagation for structured logging.

Values set with :func:`set_log_context` travel with the current asyncio task,
so every record emitted while the scheduler processes a reminder carries the
``reminder_id`` and ``owner`` without threading them through each call.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(request_id="abc-123", owner="user-1")
        logger.info("Reminder created")  # includes request_id and owner
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current logging context."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove ``keys`` from the current logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


class ContextInjectingFilter(logging.Filter):
    """Copy the contextvars log context onto each ``LogRecord``.

    Installed on the root logger by :func:`configure_logging`, so formatters
    (notably ``JSONFormatter``) see the fields as record attributes.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            # Explicit extra= values win over ambient context
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
