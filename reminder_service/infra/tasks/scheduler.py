"""APScheduler integration for the reminder sweep.

Single-node deployments can run the push delivery sweep inside the API
process instead of pointing an external cron at ``POST /push/check-reminders``.
Both paths call ``PushDeliveryScheduler.run_once``; overlapping runs are safe
because marking a reminder sent is conditional.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from reminder_service.core.exceptions import StorageError
from reminder_service.core.settings import get_scheduler_settings

if TYPE_CHECKING:
    from reminder_service.core.settings.scheduler import SchedulerSettings
    from reminder_service.features.push.scheduler import SchedulerRunSummary

logger = logging.getLogger(__name__)

CHECK_REMINDERS_JOB_ID = "check_reminders"

scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={
        "coalesce": True,
        "max_instances": 1,
    },
)


async def check_due_reminders() -> SchedulerRunSummary | None:
    """Run one push delivery sweep.

    Storage failures are logged and swallowed so the job stays scheduled;
    the next tick retries the same window.
    """
    from reminder_service.features.push.scheduler import PushDeliveryScheduler

    try:
        return await PushDeliveryScheduler().run_once()
    except StorageError:
        logger.warning("Scheduled reminder sweep failed, retrying on next tick")
        return None


def setup_scheduled_jobs(settings: SchedulerSettings | None = None) -> None:
    """Register the reminder sweep job."""
    settings = settings or get_scheduler_settings()

    scheduler.add_job(
        func=check_due_reminders,
        trigger=IntervalTrigger(seconds=settings.interval_seconds),
        id=CHECK_REMINDERS_JOB_ID,
        name="Deliver due reminders over Web Push",
        misfire_grace_time=settings.misfire_grace_time,
        replace_existing=True,
    )
    logger.info(
        "Scheduled reminder sweep",
        extra={"interval_seconds": settings.interval_seconds},
    )


async def start_scheduler() -> None:
    """Start the APScheduler; call after ``setup_scheduled_jobs``."""
    if not scheduler.running:
        scheduler.start()
        logger.info("APScheduler started", extra={"jobs": len(scheduler.get_jobs())})
    else:
        logger.warning("APScheduler is already running")


async def stop_scheduler() -> None:
    if scheduler.running:
        logger.info("Stopping APScheduler")
        scheduler.shutdown(wait=False)
        logger.info("APScheduler stopped")
    else:
        logger.debug("APScheduler is not running")


def get_job_status() -> list[dict[str, Any]]:
    """Describe every registered job."""
    return [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": next_run.isoformat() if (next_run := getattr(job, "next_run_time", None)) else None,
            "trigger": str(job.trigger),
        }
        for job in scheduler.get_jobs()
    ]
