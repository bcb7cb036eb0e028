"""Async retry helpers."""

from __future__ import annotations

from reminder_service.utils.retry.decorator import retry
from reminder_service.utils.retry.exceptions import RetryError, RetryStatistics
from reminder_service.utils.retry.strategies import RetryStrategy

__all__ = ["RetryError", "RetryStatistics", "RetryStrategy", "retry"]
