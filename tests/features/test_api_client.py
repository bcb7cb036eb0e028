"""End-to-end tests of the device-side client against the API."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import httpx
import pytest

from reminder_service.core.settings.push import PushSettings
from reminder_service.features.notifications.client import ReminderApiClient
from reminder_service.features.notifications.dedup import DeliveryLedger, occurrence_key
from reminder_service.features.notifications.platform import Environment, MemoryStorage, NotificationPermission
from reminder_service.features.notifications.poller import ReminderPoller
from reminder_service.features.notifications.preferences import NotificationPreferences
from reminder_service.features.notifications.presentation import NotificationPresenter
from reminder_service.features.notifications.subscription import PushSubscriptionManager
from reminder_service.features.push.router import get_delivery_scheduler
from reminder_service.features.push.scheduler import PushDeliveryScheduler
from reminder_service.features.reminders.recurrence import Recurrence, RecurrenceUnit
from tests.fakes import FakeDisplay, FakePushManager, FakeTransport

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from reminder_service.features.push.vapid import VapidKeyPair


@pytest.fixture
async def api(app: FastAPI) -> AsyncGenerator[ReminderApiClient]:
    async with ReminderApiClient(
        "user-1",
        base_url="http://test/api/v1",
        transport=httpx.ASGITransport(app=app),
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_reminder_lifecycle(api: ReminderApiClient) -> None:
    fire_time = datetime.now(UTC) - timedelta(seconds=20)
    created = await api.create_reminder("item-1", fire_time, message="Stretch")

    due = await api.list_due()
    first = await api.mark_sent(created.id)
    second = await api.mark_sent(created.id)

    assert [r.id for r in due] == [created.id]
    assert first.changed is True
    assert second.changed is False
    assert await api.list_due() == []

    found = await api.find_by_item("item-1")
    assert found is not None
    assert found.sent is True
    assert await api.find_by_item("unknown") is None

    await api.delete_reminder(created.id)
    with pytest.raises(httpx.HTTPStatusError):
        await api.mark_sent(created.id)


@pytest.mark.asyncio
async def test_reschedule_and_advance(api: ReminderApiClient) -> None:
    base = (datetime.now(UTC) - timedelta(days=1, minutes=1)).replace(microsecond=0)
    created = await api.create_reminder("item-2", base, Recurrence(RecurrenceUnit.DAILY))

    advanced = await api.advance(created.id)
    moved = await api.reschedule(created.id, base + timedelta(days=5), message="Later")

    assert advanced.fire_time == base + timedelta(days=2)
    assert moved.fire_time == base + timedelta(days=5)
    assert moved.recurrence is None
    assert moved.message == "Later"


@pytest.mark.asyncio
async def test_subscription_round_trip(api: ReminderApiClient, push_env: VapidKeyPair) -> None:
    push_manager = FakePushManager()
    manager = PushSubscriptionManager(
        Environment(permission=NotificationPermission.GRANTED),
        push_manager,
        api,
    )

    subscription = await manager.subscribe()

    assert push_manager.subscribe_keys == [push_env.public_key]
    assert await manager.unsubscribe() is True
    assert await api.delete_subscription(subscription.endpoint) is False


@pytest.mark.asyncio
async def test_poller_alerts_through_api(api: ReminderApiClient) -> None:
    created = await api.create_reminder("item-3", datetime.now(UTC), message="Drink water")
    storage = MemoryStorage()
    ledger = DeliveryLedger(storage)
    preferences = NotificationPreferences(storage)
    preferences.enable()
    display = FakeDisplay()
    poller = ReminderPoller(api, NotificationPresenter(display, ledger), ledger, preferences)

    assert await poller.check_once() == 1
    assert await poller.check_once() == 0

    assert display.shown[0][0] == "\N{BELL} Drink water"
    assert (await api.find_by_item("item-3")).sent is True  # type: ignore[union-attr]
    assert occurrence_key(created.id, created.fire_time) in ledger


@pytest.mark.asyncio
async def test_unsubscribed_owner_falls_back_to_polling(
    api: ReminderApiClient,
    app: FastAPI,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    transport = FakeTransport()
    app.dependency_overrides[get_delivery_scheduler] = lambda: PushDeliveryScheduler(
        session_factory=session_factory,
        transport=transport,
        settings=PushSettings(mark_sent_attempts=1),
    )
    created = await api.create_reminder("item-4", datetime.now(UTC) - timedelta(seconds=5), message="Walk")

    summary = await api.check_reminders()

    assert summary.checked == 1
    assert summary.skipped == 1
    assert summary.sent == 0
    assert summary.errors == []
    assert transport.endpoints == []
    assert (await api.find_by_item("item-4")).sent is False  # type: ignore[union-attr]

    storage = MemoryStorage()
    ledger = DeliveryLedger(storage)
    preferences = NotificationPreferences(storage)
    preferences.enable()
    display = FakeDisplay()
    poller = ReminderPoller(api, NotificationPresenter(display, ledger), ledger, preferences)

    assert await poller.check_once() == 1
    assert display.shown[0][0] == "\N{BELL} Walk"
    assert occurrence_key(created.id, created.fire_time) in ledger
