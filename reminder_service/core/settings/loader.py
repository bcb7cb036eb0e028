"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from reminder_service.core.settings import get_push_settings

    settings = get_push_settings()  # First call: loads and validates
    settings = get_push_settings()  # Subsequent calls: cached instance

Testing:
    Clear the caches to force reload after changing the environment:
    clear_all_caches()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .client import ClientSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .push import PushSettings
from .scheduler import SchedulerSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> PostgresSettings:
    """Get cached database settings."""
    return PostgresSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_push_settings() -> PushSettings:
    """Get cached Web Push settings."""
    return PushSettings()


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """Get cached in-process scheduler settings."""
    return SchedulerSettings()


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    """Get cached client-side notification settings."""
    return ClientSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing. In production, prefer process restarts over cache clearing.
    """
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_push_settings.cache_clear()
    get_scheduler_settings.cache_clear()
    get_client_settings.cache_clear()

    from .unified import get_settings

    get_settings.cache_clear()
