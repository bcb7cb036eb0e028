"""FastAPI dependencies for route handlers.

Usage:
    from reminder_service.core.dependencies import CurrentOwnerDep, SessionDep
"""

from __future__ import annotations

from .auth import CronTokenDep, CurrentOwnerDep, get_current_owner, verify_cron_token
from .database import SessionDep, get_db_session

__all__ = [
    "CronTokenDep",
    "CurrentOwnerDep",
    "SessionDep",
    "get_current_owner",
    "get_db_session",
    "verify_cron_token",
]
