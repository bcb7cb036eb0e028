"""User-level enablement of reminder notifications.

The flag is explicit configuration persisted in device storage, separate
from the platform permission: a user may turn reminders off without
revoking the browser permission, and the flag survives restarts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from reminder_service.features.notifications.platform import KeyValueStorage

logger = logging.getLogger(__name__)

ENABLED_KEY = "reminders.notifications.enabled"


class NotificationPreferences:
    """Persisted on/off switch with change listeners.

    Listeners run synchronously on every effective change, which lets the
    poller stop its timer the moment notifications are disabled.
    """

    def __init__(self, storage: KeyValueStorage, key: str = ENABLED_KEY) -> None:
        self._storage = storage
        self._key = key
        self._enabled: bool | None = None
        self._listeners: list[Callable[[bool], None]] = []

    def load(self) -> bool:
        """Re-read the flag from storage; missing or unrecognized values mean off."""
        raw = self._storage.get(self._key)
        self._enabled = (raw or "").strip().lower() in ("true", "1", "granted")
        return self._enabled

    @property
    def enabled(self) -> bool:
        if self._enabled is None:
            return self.load()
        return self._enabled

    def set_enabled(self, value: bool) -> None:
        previous = self.enabled
        self._storage.set(self._key, "true" if value else "false")
        self._enabled = value
        if previous != value:
            logger.info("Reminder notifications %s", "enabled" if value else "disabled")
            for listener in list(self._listeners):
                listener(value)

    def enable(self) -> None:
        self.set_enabled(True)

    def disable(self) -> None:
        self.set_enabled(False)

    def toggle(self) -> bool:
        self.set_enabled(not self.enabled)
        return self.enabled

    def add_listener(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def close(self) -> None:
        """Drop every listener."""
        self._listeners.clear()
