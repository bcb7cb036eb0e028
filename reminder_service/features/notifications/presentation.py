"""Turning push payloads and local triggers into system notifications.

Payload parsing never drops a message: plain text becomes the body of a
generic reminder, while truncated or broken JSON and an empty payload show
the fallback text.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import urlsplit

from reminder_service.features.notifications.dedup import occurrence_key
from reminder_service.features.notifications.platform import NotificationOptions
from reminder_service.utils.timeutils import ensure_utc

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from reminder_service.features.notifications.dedup import DeliveryLedger
    from reminder_service.features.notifications.platform import (
        DisplayedNotification,
        InAppNotifier,
        NotificationDisplay,
        WindowClient,
        WindowClients,
    )

logger = logging.getLogger(__name__)

BELL = "\N{BELL}"
FALLBACK_TITLE = f"{BELL} Reminder"
FALLBACK_BODY = "You have a reminder"


@dataclass(frozen=True, slots=True)
class NotificationContent:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def reminder_id(self) -> str | None:
        value = self.data.get("reminderId")
        return str(value) if value not in (None, "") else None

    @property
    def delivery_key(self) -> str | None:
        """Ledger entry for the occurrence this notification announces."""
        reminder_id = self.reminder_id
        if reminder_id is None:
            return None
        fire_time = self.data.get("fireTime")
        return occurrence_key(reminder_id, fire_time if isinstance(fire_time, str) else None)


class DueReminder(Protocol):
    """Fields the presenter reads from a reminder."""

    id: Any
    message: str | None
    target_item: str
    fire_time: datetime


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_push_payload(raw: bytes | str | None) -> NotificationContent:
    """Parse an inbound push payload, falling back on anything unreadable.

    Example:
        >>> parse_push_payload(b"not json").body
        'not json'
        >>> parse_push_payload(None).body
        'You have a reminder'
    """
    if raw is None:
        return NotificationContent(FALLBACK_TITLE, FALLBACK_BODY)
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    text = text.strip()
    if not text:
        return NotificationContent(FALLBACK_TITLE, FALLBACK_BODY)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        if text[0] in "{[":
            logger.warning("Unparseable push payload, showing fallback notification")
            return NotificationContent(FALLBACK_TITLE, FALLBACK_BODY)
        return NotificationContent(FALLBACK_TITLE, text)

    if isinstance(parsed, str):
        return NotificationContent(FALLBACK_TITLE, _text(parsed) or FALLBACK_BODY)
    if not isinstance(parsed, dict):
        return NotificationContent(FALLBACK_TITLE, FALLBACK_BODY)

    data = dict(parsed["data"]) if isinstance(parsed.get("data"), dict) else {}
    if "reminderId" not in data and parsed.get("reminderId") is not None:
        data["reminderId"] = parsed["reminderId"]
    return NotificationContent(
        title=_text(parsed.get("title")) or FALLBACK_TITLE,
        body=_text(parsed.get("body")) or FALLBACK_BODY,
        data=data,
    )


def reminder_content(reminder: DueReminder, now: datetime) -> NotificationContent:
    """Local notification text for a reminder relative to ``now``.

    Within a minute either side of the fire time the reminder is "due now";
    later ones count down in whole minutes, earlier ones are overdue.
    """
    message = _text(reminder.message) or "Reminder"
    seconds = (ensure_utc(reminder.fire_time) - ensure_utc(now)).total_seconds()
    data = {
        "reminderId": str(reminder.id),
        "fireTime": ensure_utc(reminder.fire_time).isoformat(),
        "itemId": reminder.target_item,
        "url": "/",
    }

    if seconds < -60:
        minutes = math.ceil(-seconds / 60)
        return NotificationContent(
            f"{BELL} Overdue: {message}",
            f'"{message}" was due {minutes} minutes ago',
            data,
        )
    if seconds <= 60:
        return NotificationContent(f"{BELL} {message}", "Due now", data)
    return NotificationContent(f"{BELL} {message}", f"Due in {math.ceil(seconds / 60)} minutes", data)


def same_origin(url: str, origin: str) -> bool:
    a, b = urlsplit(url), urlsplit(origin)
    return (a.scheme, a.netloc) == (b.scheme, b.netloc)


class NotificationPresenter:
    """Show notifications and route clicks back into the app.

    Args:
        display: System notification display.
        ledger: Shared dedup ledger; push-delivered reminders claim it here.
        windows: Open app windows, for click routing.
        app_origin: Origin of the app (``APP_APP_ORIGIN``).
        in_app: Fallback used when system notifications are not permitted.
        can_notify: Whether system notifications are currently allowed.
    """

    def __init__(
        self,
        display: NotificationDisplay,
        ledger: DeliveryLedger,
        windows: WindowClients | None = None,
        *,
        app_origin: str = "http://localhost:8000",
        in_app: InAppNotifier | None = None,
        can_notify: Callable[[], bool] = lambda: True,
    ) -> None:
        self._display = display
        self._ledger = ledger
        self._windows = windows
        self._origin = app_origin
        self._in_app = in_app
        self._can_notify = can_notify

    async def present(self, content: NotificationContent) -> bool:
        """Display ``content``; returns False if nothing could show it."""
        if self._can_notify():
            options = NotificationOptions(body=content.body, data=dict(content.data))
            await self._display.show(content.title, options)
            return True
        if self._in_app is not None:
            await self._in_app.notify(content.title, content.body, dict(content.data))
            return True
        logger.debug("No channel available for notification", extra={"reminder_id": content.reminder_id})
        return False

    async def handle_push(self, raw: bytes | str | None) -> bool:
        """Display an inbound push unless this device already alerted that occurrence."""
        content = parse_push_payload(raw)
        key = content.delivery_key
        if key is not None and not self._ledger.claim(key):
            logger.debug("Suppressed duplicate reminder notification", extra={"reminder_id": content.reminder_id})
            return False
        try:
            await self._display.show(content.title, NotificationOptions(body=content.body, data=dict(content.data)))
        except Exception:
            if key is not None:
                self._ledger.forget(key)
            raise
        return True

    async def show_reminder(self, reminder: DueReminder, now: datetime) -> bool:
        return await self.present(reminder_content(reminder, now))

    async def handle_click(self, notification: DisplayedNotification) -> WindowClient | None:
        """Close ``notification`` and focus an app window, opening one if needed."""
        notification.close()
        if self._windows is None:
            return None

        for client in await self._windows.match_all(include_uncontrolled=True):
            if same_origin(client.url, self._origin):
                await client.focus()
                return client
        return await self._windows.open_window("/")
