"""CLI utilities for running async operations and formatting output."""

from reminder_service.cli.utils.async_runner import coro
from reminder_service.cli.utils.formatters import counters, error, header, info, success, warning

__all__ = [
    "coro",
    "counters",
    "error",
    "header",
    "info",
    "success",
    "warning",
]
