"""Notification capability detection.

The runtime's quirks (no notification API, install-only platforms, a
denied prompt) are folded into one tagged status the UI consumes as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from reminder_service.features.notifications.exceptions import PermissionDenied, UnsupportedEnvironment
from reminder_service.features.notifications.platform import NotificationPermission

if TYPE_CHECKING:
    from reminder_service.features.notifications.platform import Environment
    from reminder_service.features.notifications.preferences import NotificationPreferences

logger = logging.getLogger(__name__)


class CapabilityStatus(str, Enum):
    SUPPORTED = "supported"
    BLOCKED = "blocked"
    NEEDS_INSTALL = "needs-install"
    GRANTED = "granted"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class Capability:
    """Detected status plus what it means for the UI."""

    status: CapabilityStatus
    push_supported: bool = False
    reason: str | None = None

    @property
    def can_notify(self) -> bool:
        return self.status is CapabilityStatus.GRANTED

    @property
    def can_request(self) -> bool:
        return self.status in (CapabilityStatus.DEFAULT, CapabilityStatus.SUPPORTED)


def detect_capability(env: Environment) -> Capability:
    """Classify the runtime.

    - no notification API: ``needs-install`` where installing the app would
      expose it, ``blocked`` otherwise;
    - permission denied: ``blocked``;
    - permission granted / not yet asked: ``granted`` / ``default``;
    - APIs present but the permission cannot be queried: ``supported``.
    """
    if not env.has_notifications:
        if env.install_required and not env.standalone:
            return Capability(
                CapabilityStatus.NEEDS_INSTALL,
                reason="Add the app to the home screen to enable notifications",
            )
        return Capability(CapabilityStatus.BLOCKED, reason="Notifications are not supported on this device")

    push = env.push_supported
    match env.permission:
        case None:
            return Capability(CapabilityStatus.SUPPORTED, push_supported=push)
        case NotificationPermission.DENIED:
            return Capability(
                CapabilityStatus.BLOCKED,
                push_supported=push,
                reason="Notifications were blocked; re-enable them in the browser settings",
            )
        case NotificationPermission.GRANTED:
            return Capability(CapabilityStatus.GRANTED, push_supported=push)
        case _:
            return Capability(CapabilityStatus.DEFAULT, push_supported=push)


class PermissionPrompt(Protocol):
    async def request_permission(self) -> NotificationPermission: ...


async def request_notification_permission(
    env: Environment,
    prompt: PermissionPrompt,
    preferences: NotificationPreferences,
) -> Capability:
    """Ask for permission where needed and record the platform's answer.

    The answer is kept on ``env.permission``. A denial leaves the in-app
    enablement flag untouched: the poller keeps running and alerts are
    routed to in-app cues while system notifications are not permitted.
    Granting permission turns the flag on.

    Raises:
        UnsupportedEnvironment: If the runtime has no notification API.
        PermissionDenied: If the user or platform declines.
    """
    capability = detect_capability(env)
    if not env.has_notifications:
        raise UnsupportedEnvironment(
            "Notifications",
            needs_install=capability.status is CapabilityStatus.NEEDS_INSTALL,
        )
    if capability.status is CapabilityStatus.BLOCKED:
        raise PermissionDenied(NotificationPermission.DENIED.value)

    if capability.status is not CapabilityStatus.GRANTED:
        result = NotificationPermission(await prompt.request_permission())
        env.permission = result
        if result is not NotificationPermission.GRANTED:
            logger.info("Notification permission not granted", extra={"permission": result.value})
            raise PermissionDenied(result.value)
        capability = detect_capability(env)

    preferences.enable()
    return capability
