"""In-memory test doubles for the push transport and device platform."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from reminder_service.features.notifications.platform import (
    NotificationOptions,
    NotificationPermission,
    SubscriptionKeys,
)
from reminder_service.features.push.exceptions import GoneError, TransientTransportError
from reminder_service.features.push.payload import NotificationPayload
from reminder_service.features.push.transport import SubscriptionTarget


class FakeTransport:
    """Records sends; ``outcomes`` maps endpoint to "gone" / "transient"."""

    def __init__(self, outcomes: dict[str, str] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.sent: list[tuple[SubscriptionTarget, NotificationPayload]] = []

    async def send(self, target: SubscriptionTarget, payload: NotificationPayload) -> None:
        self.sent.append((target, payload))
        outcome = self.outcomes.get(target.endpoint)
        if outcome == "gone":
            raise GoneError(target.endpoint, 410, "gone")
        if outcome == "transient":
            raise TransientTransportError(target.endpoint, 503, "unavailable")

    @property
    def endpoints(self) -> list[str]:
        return [target.endpoint for target, _ in self.sent]


class FakeDisplay:
    def __init__(self) -> None:
        self.shown: list[tuple[str, NotificationOptions]] = []

    async def show(self, title: str, options: NotificationOptions) -> None:
        self.shown.append((title, options))


class FakeInApp:
    def __init__(self) -> None:
        self.notices: list[tuple[str, str, dict[str, Any]]] = []

    async def notify(self, title: str, body: str, data: dict[str, Any]) -> None:
        self.notices.append((title, body, data))


@dataclass
class FakeWindow:
    url: str
    focused: bool = False

    async def focus(self) -> None:
        self.focused = True


@dataclass
class FakeWindows:
    windows: list[FakeWindow] = field(default_factory=list)
    opened: list[str] = field(default_factory=list)
    include_uncontrolled_seen: list[bool] = field(default_factory=list)

    async def match_all(self, *, include_uncontrolled: bool = True) -> list[FakeWindow]:
        self.include_uncontrolled_seen.append(include_uncontrolled)
        return list(self.windows)

    async def open_window(self, url: str) -> FakeWindow:
        self.opened.append(url)
        window = FakeWindow(url)
        self.windows.append(window)
        return window


@dataclass
class FakeNotification:
    data: dict[str, Any] = field(default_factory=dict)
    closed: bool = False

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeDueReminder:
    id: Any
    message: str | None
    target_item: str
    fire_time: Any


class FakeReminderSource:
    """Due-reminder source with call recording and an optional gate."""

    def __init__(self, reminders: list[FakeDueReminder] | None = None) -> None:
        self.reminders = list(reminders or [])
        self.list_calls = 0
        self.marked: list[Any] = []
        self.gate: asyncio.Event | None = None
        self.fail_list = False

    async def list_due(self, *, lookback_seconds: int, lookahead_seconds: int) -> list[FakeDueReminder]:
        self.list_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_list:
            msg = "network down"
            raise ConnectionError(msg)
        return [r for r in self.reminders if r.id not in self.marked]

    async def mark_sent(self, reminder_id: Any) -> None:
        self.marked.append(reminder_id)


@dataclass
class FakePlatformSubscription:
    endpoint: str
    keys: SubscriptionKeys
    unsubscribed: bool = False

    async def unsubscribe(self) -> bool:
        self.unsubscribed = True
        return True


class FakePushManager:
    def __init__(self, existing: FakePlatformSubscription | None = None) -> None:
        self.subscription = existing
        self.subscribe_keys: list[str] = []

    async def get_subscription(self) -> FakePlatformSubscription | None:
        if self.subscription is not None and self.subscription.unsubscribed:
            return None
        return self.subscription

    async def subscribe(self, application_server_key: str) -> FakePlatformSubscription:
        self.subscribe_keys.append(application_server_key)
        self.subscription = FakePlatformSubscription(
            "https://push.example.com/send/new",
            SubscriptionKeys(p256dh="BNEWKEY", auth="new-auth"),
        )
        return self.subscription


class FakeSubscriptionBackend:
    def __init__(self, public_key: str = "BPUBLIC") -> None:
        self.public_key = public_key
        self.saved: list[tuple[str, str, str, str | None]] = []
        self.deleted: list[str] = []
        self.calls: list[str] = []

    async def get_public_key(self) -> str:
        self.calls.append("get_public_key")
        return self.public_key

    async def save_subscription(
        self,
        endpoint: str,
        p256dh: str,
        auth: str,
        *,
        user_agent: str | None = None,
    ) -> None:
        self.calls.append("save")
        self.saved.append((endpoint, p256dh, auth, user_agent))

    async def delete_subscription(self, endpoint: str) -> bool:
        self.calls.append("delete")
        self.deleted.append(endpoint)
        return True


class FakePrompt:
    def __init__(self, answer: NotificationPermission) -> None:
        self.answer = answer
        self.calls = 0

    async def request_permission(self) -> NotificationPermission:
        self.calls += 1
        return self.answer
