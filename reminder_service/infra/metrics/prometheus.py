"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry so tests and multiple app instances do not collide with the default one
REGISTRY = CollectorRegistry()

# Response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# Scheduler invocations fan out to the network; 50ms to 2min
SCHEDULER_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0)

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
    registry=REGISTRY,
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors rendered as problem responses",
    ["error_type", "endpoint", "status_code"],
    registry=REGISTRY,
)

validation_errors_total = Counter(
    "validation_errors_total",
    "Total request validation errors by field",
    ["endpoint", "field"],
    registry=REGISTRY,
)

unhandled_exceptions_total = Counter(
    "unhandled_exceptions_total",
    "Total unhandled exceptions",
    ["exception_type", "endpoint"],
    registry=REGISTRY,
)

# Retry metrics
retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total retry attempts by operation",
    ["operation", "attempt_number"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total operations that exhausted all retry attempts",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "retry_success_after_failure_total",
    "Total operations that succeeded after at least one retry",
    ["operation"],
    registry=REGISTRY,
)

# Reminder and push delivery metrics
reminder_scheduler_runs_total = Counter(
    "reminder_scheduler_runs_total",
    "Push delivery scheduler invocations by outcome",
    ["status"],
    registry=REGISTRY,
)

reminder_scheduler_duration_seconds = Histogram(
    "reminder_scheduler_duration_seconds",
    "Duration of one push delivery scheduler invocation",
    buckets=SCHEDULER_LATENCY_BUCKETS,
    registry=REGISTRY,
)

reminders_due_checked_total = Counter(
    "reminders_due_checked_total",
    "Due reminders examined by the push delivery scheduler",
    registry=REGISTRY,
)

reminders_marked_sent_total = Counter(
    "reminders_marked_sent_total",
    "Reminders transitioned to sent, by the component that marked them",
    ["source"],
    registry=REGISTRY,
)

reminder_mark_sent_failures_total = Counter(
    "reminder_mark_sent_failures_total",
    "Reminders whose sent flag could not be persisted after retries",
    registry=REGISTRY,
)

push_notifications_total = Counter(
    "push_notifications_total",
    "Web Push transmissions by result",
    ["result"],
    registry=REGISTRY,
)

push_send_duration_seconds = Histogram(
    "push_send_duration_seconds",
    "Duration of a single Web Push transmission",
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

push_subscriptions_removed_total = Counter(
    "push_subscriptions_removed_total",
    "Push subscriptions deleted, by reason",
    ["reason"],
    registry=REGISTRY,
)

app_info = Gauge(
    "app_info",
    "Application information",
    ["service", "version", "environment"],
    registry=REGISTRY,
)
