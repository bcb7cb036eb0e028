"""Client-side notification errors."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for client notification failures."""


class PermissionDenied(NotificationError):
    """The platform declined notification permission."""

    def __init__(self, permission: str = "denied") -> None:
        self.permission = permission
        super().__init__(f"Notification permission not granted ({permission})")


class UnsupportedEnvironment(NotificationError):
    """The runtime lacks the notification, service worker or push APIs."""

    def __init__(self, missing: str, *, needs_install: bool = False) -> None:
        self.missing = missing
        self.needs_install = needs_install
        hint = " Install the app to the home screen to enable it." if needs_install else ""
        super().__init__(f"{missing} is not available in this environment.{hint}")
