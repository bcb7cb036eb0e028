"""Unified settings composition for convenient access.

Usage:
    from reminder_service.core.settings import get_settings

    settings = get_settings()
    print(settings.app.api_prefix)
    print(settings.push.max_concurrency)

Each nested model still reads its own env prefix; the composition simply
reuses the cached per-domain loaders.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .app import AppSettings
from .client import ClientSettings
from .loader import (
    get_app_settings,
    get_client_settings,
    get_db_settings,
    get_logging_settings,
    get_push_settings,
    get_scheduler_settings,
)
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .push import PushSettings
from .scheduler import SchedulerSettings


@dataclass(slots=True, frozen=True)
class Settings:
    """All settings domains in one object."""

    app: AppSettings
    db: PostgresSettings
    logging: LoggingSettings
    push: PushSettings
    scheduler: SchedulerSettings
    client: ClientSettings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    return Settings(
        app=get_app_settings(),
        db=get_db_settings(),
        logging=get_logging_settings(),
        push=get_push_settings(),
        scheduler=get_scheduler_settings(),
        client=get_client_settings(),
    )
