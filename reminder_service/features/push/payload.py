"""Notification payloads sent through Web Push.

The JSON shape is shared with the client presentation handler::

    {"title": "...", "body": "...", "data": {"reminderId": "...", "fireTime": "...", "itemId": "...", "url": "/"}}

``fireTime`` is the UTC ISO 8601 fire time of the occurrence being
announced; together with ``reminderId`` it identifies one occurrence.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reminder_service.utils.timeutils import ensure_utc

if TYPE_CHECKING:
    from reminder_service.features.reminders.models import Reminder

REMINDER_ICON = "\N{BELL}"
DEFAULT_TITLE = f"{REMINDER_ICON} Reminder"
DEFAULT_BODY = "You have a reminder"


@dataclass(frozen=True, slots=True)
class NotificationPayload:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def reminder_id(self) -> str | None:
        value = self.data.get("reminderId")
        return str(value) if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "body": self.body, "data": dict(self.data)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))


def reminder_payload(reminder: Reminder, url: str = "/") -> NotificationPayload:
    """Payload announcing that ``reminder`` is due now."""
    message = (reminder.message or "").strip()
    if message:
        title = f"{REMINDER_ICON} {message}"
        body = f'Reminder: "{message}" is due now!'
    else:
        title = DEFAULT_TITLE
        body = DEFAULT_BODY
    return NotificationPayload(
        title=title,
        body=body,
        data={
            "reminderId": str(reminder.id),
            "fireTime": ensure_utc(reminder.fire_time).isoformat(),
            "itemId": reminder.target_item,
            "url": url,
        },
    )


__all__ = ["DEFAULT_BODY", "DEFAULT_TITLE", "NotificationPayload", "reminder_payload"]
