"""Helper functions for tracking operational metrics."""

from __future__ import annotations

import logging

from reminder_service.infra.metrics import prometheus

logger = logging.getLogger(__name__)


# ============================================================================
# Error Tracking
# ============================================================================


def track_error(error_type: str, endpoint: str, status_code: int) -> None:
    """Track an error rendered as a problem response.

    Example:
        track_error("storage-error", "/api/v1/reminders", 503)
    """
    prometheus.errors_total.labels(
        error_type=error_type,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()


def track_validation_error(endpoint: str, field: str) -> None:
    """Track a request validation error for a specific field."""
    prometheus.validation_errors_total.labels(endpoint=endpoint, field=field).inc()


def track_unhandled_exception(exception_type: str, endpoint: str) -> None:
    """Track an exception that reached the catch-all handler."""
    prometheus.unhandled_exceptions_total.labels(
        exception_type=exception_type,
        endpoint=endpoint,
    ).inc()


# ============================================================================
# Retry Tracking
# ============================================================================


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt for ``operation``."""
    prometheus.retry_attempts_total.labels(
        operation=operation,
        attempt_number=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    """Track an operation that ran out of retry attempts."""
    prometheus.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    """Track an operation that succeeded after retrying."""
    prometheus.retry_success_after_failure_total.labels(operation=operation).inc()
    logger.debug(
        "Operation succeeded after retry",
        extra={"operation": operation, "attempts": attempts_needed},
    )


# ============================================================================
# Reminder Delivery Tracking
# ============================================================================


def track_scheduler_run(status: str, duration: float, checked: int) -> None:
    """Record one push delivery scheduler invocation.

    Args:
        status: ``success`` or ``error``.
        duration: Wall-clock seconds spent in the invocation.
        checked: Number of due reminders examined.
    """
    prometheus.reminder_scheduler_runs_total.labels(status=status).inc()
    prometheus.reminder_scheduler_duration_seconds.observe(duration)
    if checked:
        prometheus.reminders_due_checked_total.inc(checked)


def track_push_result(result: str, duration: float | None = None) -> None:
    """Record a Web Push transmission outcome (``delivered``, ``gone``, ``transient``)."""
    prometheus.push_notifications_total.labels(result=result).inc()
    if duration is not None:
        prometheus.push_send_duration_seconds.observe(duration)


def track_subscription_removed(reason: str) -> None:
    """Record a deleted push subscription (``gone`` or ``unsubscribed``)."""
    prometheus.push_subscriptions_removed_total.labels(reason=reason).inc()


def track_reminder_marked_sent(source: str) -> None:
    """Record a reminder transitioning to sent (``scheduler``, ``client``, ``api``)."""
    prometheus.reminders_marked_sent_total.labels(source=source).inc()


def track_mark_sent_failure() -> None:
    """Record a reminder whose sent flag could not be persisted."""
    prometheus.reminder_mark_sent_failures_total.inc()
