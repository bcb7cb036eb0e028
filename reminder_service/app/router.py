"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from reminder_service.core.settings import get_app_settings
from reminder_service.features.health.router import router as health_router
from reminder_service.features.metrics.router import router as metrics_router
from reminder_service.features.push.router import router as push_router
from reminder_service.features.reminders.router import router as reminders_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from reminder_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application."""
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # /metrics stays unprefixed for scrapers
    app.include_router(metrics_router, tags=["observability"])

    app.include_router(health_router, prefix=api_prefix)
    app.include_router(reminders_router, prefix=api_prefix)
    app.include_router(push_router, prefix=api_prefix)

    logger.info("Routers registered", extra={"api_prefix": api_prefix})
