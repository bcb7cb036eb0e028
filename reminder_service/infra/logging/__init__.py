"""Logging infrastructure.

Standard library logging with:
- JSONL formatting (``JSONFormatter``)
- contextvars-based context injection (``set_log_context``)
- lazy DEBUG evaluation (``get_lazy_logger``)
- non-blocking QueueHandler/QueueListener output (``setup_logging``)
"""

from __future__ import annotations

from reminder_service.infra.logging.config import configure_logging, setup_logging, shutdown
from reminder_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from reminder_service.infra.logging.formatters import JSONFormatter
from reminder_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger, lazy

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "clear_log_context",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "lazy",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
