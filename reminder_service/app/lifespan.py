"""Application lifespan management.

Startup order:
1. Logging and the application info metric
2. Database connectivity (tables are created directly for SQLite)
3. In-process reminder sweep, when enabled and push is configured

Shutdown runs in reverse.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from reminder_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_push_settings,
    get_scheduler_settings,
)
from reminder_service.infra.logging import setup_logging, shutdown as shutdown_logging
from reminder_service.infra.metrics.prometheus import app_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_scheduler_started = False


def get_scheduler_started() -> bool:
    """Check if the in-process reminder sweep is running."""
    return _scheduler_started


async def _startup_core() -> None:
    app = get_app_settings()

    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )
    app_info.labels(
        service=app.service_name,
        version=app.version,
        environment=app.environment,
    ).set(1)


async def _startup_database() -> None:
    from reminder_service.infra.database import create_tables, init_database

    db = get_db_settings()
    try:
        await init_database()
    except Exception as e:
        if db.startup_require_db:
            logger.exception("Database required but unavailable, failing startup")
            raise
        logger.warning(
            "Database unavailable, continuing in degraded mode",
            extra={"error": str(e)},
        )
        return

    if db.is_sqlite:
        await create_tables()
        logger.info("SQLite schema ensured")


async def _startup_scheduler() -> None:
    global _scheduler_started

    if not get_scheduler_settings().enabled:
        return
    if not get_push_settings().is_configured:
        logger.warning("In-process reminder sweep enabled but push is not configured, not starting it")
        return

    from reminder_service.infra.tasks import setup_scheduled_jobs, start_scheduler

    setup_scheduled_jobs()
    await start_scheduler()
    _scheduler_started = True


async def _shutdown_scheduler() -> None:
    global _scheduler_started

    if not _scheduler_started:
        return
    from reminder_service.infra.tasks import stop_scheduler

    await stop_scheduler()
    _scheduler_started = False


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop application services around the serving period."""
    from reminder_service.infra.database import close_database

    await _startup_core()
    await _startup_database()
    await _startup_scheduler()
    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Application shutting down")
        await _shutdown_scheduler()
        await close_database()
        logger.info("Application shutdown complete")
        shutdown_logging()
