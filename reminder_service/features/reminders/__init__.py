"""Reminders feature package."""

from .repository import ReminderRepository, get_reminder_repository
from .router import router
from .service import ReminderStore

__all__ = [
    "ReminderRepository",
    "ReminderStore",
    "get_reminder_repository",
    "router",
]
