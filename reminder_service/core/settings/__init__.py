"""Modular Pydantic Settings v2 configuration.

One frozen settings model per domain, each bound to an environment prefix:

- APP_       application / HTTP surface
- DB_        database connection
- LOG_       logging
- PUSH_      Web Push delivery and VAPID keys
- SCHEDULER_ in-process reminder sweep
- CLIENT_    client-side poller and dedup ledger

Import settings via the cached loaders:
    from reminder_service.core.settings import get_push_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .loader import (
    clear_all_caches,
    get_app_settings,
    get_client_settings,
    get_db_settings,
    get_logging_settings,
    get_push_settings,
    get_scheduler_settings,
)
from .unified import Settings, get_settings

__all__ = [
    "Settings",
    "clear_all_caches",
    "get_app_settings",
    "get_client_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_push_settings",
    "get_scheduler_settings",
    "get_settings",
]
