"""In-process scheduled jobs."""

from __future__ import annotations

from .scheduler import (
    CHECK_REMINDERS_JOB_ID,
    check_due_reminders,
    get_job_status,
    scheduler,
    setup_scheduled_jobs,
    start_scheduler,
    stop_scheduler,
)

__all__ = [
    "CHECK_REMINDERS_JOB_ID",
    "check_due_reminders",
    "get_job_status",
    "scheduler",
    "setup_scheduled_jobs",
    "start_scheduler",
    "stop_scheduler",
]
