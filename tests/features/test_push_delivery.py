"""Tests for the server-side push delivery sweep."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reminder_service.core.exceptions import StorageError
from reminder_service.core.settings.push import PushSettings
from reminder_service.features.push.models import PushSubscription
from reminder_service.features.push.payload import NotificationPayload
from reminder_service.features.push.scheduler import PushDeliveryScheduler
from reminder_service.features.push.service import PushSubscriptionService
from reminder_service.features.push.transport import SubscriptionTarget
from reminder_service.features.reminders.models import Reminder
from reminder_service.features.reminders.service import ReminderStore
from tests.fakes import FakeTransport

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
ENDPOINT = "https://push.example.com/send/device-1"


def _settings(**overrides: object) -> PushSettings:
    values: dict[str, object] = {
        "lookback_seconds": 60,
        "lookahead_seconds": 60,
        "mark_sent_attempts": 1,
        "max_concurrency": 4,
    }
    values.update(overrides)
    return PushSettings(**values)  # type: ignore[arg-type]


def _scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    transport: FakeTransport,
    **overrides: object,
) -> PushDeliveryScheduler:
    return PushDeliveryScheduler(
        session_factory=session_factory,
        transport=transport,
        settings=_settings(**overrides),
        clock=lambda: NOW,
    )


async def _seed_reminder(
    session_factory: async_sessionmaker[AsyncSession],
    owner: str = "user-1",
    fire_time: datetime = NOW - timedelta(seconds=30),
    message: str | None = "Call the dentist",
) -> Reminder:
    async with session_factory() as session:
        return await ReminderStore(session, clock=lambda: NOW).create(owner, "item-1", fire_time, message=message)


async def _seed_subscription(
    session_factory: async_sessionmaker[AsyncSession],
    owner: str = "user-1",
    endpoint: str = ENDPOINT,
) -> PushSubscription:
    async with session_factory() as session:
        return await PushSubscriptionService(session).subscribe(owner, endpoint, "BKEY", "auth")


async def _reload(session_factory: async_sessionmaker[AsyncSession], reminder: Reminder) -> Reminder:
    async with session_factory() as session:
        result = await session.execute(select(Reminder).where(Reminder.id == reminder.id))
        return result.scalar_one()


async def _endpoints(session_factory: async_sessionmaker[AsyncSession]) -> list[str]:
    async with session_factory() as session:
        result = await session.execute(select(PushSubscription.endpoint))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_due_reminder_is_sent_once(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """One due reminder, one subscription; a second run does not resend."""
    reminder = await _seed_reminder(session_factory)
    await _seed_subscription(session_factory)
    transport = FakeTransport()
    scheduler = _scheduler(session_factory, transport)

    first = await scheduler.run_once()
    second = await scheduler.run_once()

    assert transport.endpoints == [ENDPOINT]
    assert first.checked == 1
    assert first.sent == 1
    assert first.marked == 1
    assert second.checked == 0
    stored = await _reload(session_factory, reminder)
    assert stored.sent is True
    assert stored.sent_at == NOW


@pytest.mark.asyncio
async def test_payload_carries_reminder_id(session_factory: async_sessionmaker[AsyncSession]) -> None:
    reminder = await _seed_reminder(session_factory, message="Call the dentist")
    await _seed_subscription(session_factory)
    transport = FakeTransport()

    await _scheduler(session_factory, transport).run_once()

    _, payload = transport.sent[0]
    assert payload.title == "\N{BELL} Call the dentist"
    assert payload.body == 'Reminder: "Call the dentist" is due now!'
    assert payload.data["reminderId"] == str(reminder.id)
    assert payload.data["fireTime"] == (NOW - timedelta(seconds=30)).isoformat()


class CountingTransport(FakeTransport):
    """Tracks how many sends are in flight at once."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.peak = 0

    async def send(self, target: SubscriptionTarget, payload: NotificationPayload) -> None:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            await super().send(target, payload)
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("max_concurrency", "expected_peak"), [(1, 1), (2, 2)])
async def test_max_concurrency_bounds_transmissions(
    session_factory: async_sessionmaker[AsyncSession],
    max_concurrency: int,
    expected_peak: int,
) -> None:
    await _seed_reminder(session_factory)
    await _seed_reminder(session_factory, owner="user-2")
    for index in range(3):
        await _seed_subscription(session_factory, endpoint=f"https://push.example.com/u1-{index}")
        await _seed_subscription(session_factory, owner="user-2", endpoint=f"https://push.example.com/u2-{index}")
    transport = CountingTransport()

    summary = await _scheduler(session_factory, transport, max_concurrency=max_concurrency).run_once()

    assert summary.sent == 6
    assert transport.peak == expected_peak


@pytest.mark.asyncio
async def test_every_subscription_is_attempted(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _seed_reminder(session_factory)
    await _seed_subscription(session_factory, endpoint="https://push.example.com/a")
    await _seed_subscription(session_factory, endpoint="https://push.example.com/b")
    transport = FakeTransport()

    summary = await _scheduler(session_factory, transport).run_once()

    assert sorted(transport.endpoints) == ["https://push.example.com/a", "https://push.example.com/b"]
    assert summary.sent == 2
    assert summary.marked == 1


@pytest.mark.asyncio
async def test_reminders_outside_window_are_ignored(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _seed_reminder(session_factory, fire_time=NOW - timedelta(minutes=5))
    await _seed_reminder(session_factory, fire_time=NOW + timedelta(minutes=5))
    await _seed_subscription(session_factory)
    transport = FakeTransport()

    summary = await _scheduler(session_factory, transport).run_once()

    assert summary.checked == 0
    assert transport.sent == []


@pytest.mark.asyncio
async def test_owner_without_subscription_is_skipped(session_factory: async_sessionmaker[AsyncSession]) -> None:
    reminder = await _seed_reminder(session_factory, owner="no-devices")
    transport = FakeTransport()

    summary = await _scheduler(session_factory, transport).run_once()

    assert summary.skipped == 1
    assert summary.marked == 0
    assert transport.sent == []
    assert (await _reload(session_factory, reminder)).sent is False


@pytest.mark.asyncio
async def test_gone_subscription_is_removed(session_factory: async_sessionmaker[AsyncSession]) -> None:
    reminder = await _seed_reminder(session_factory)
    await _seed_subscription(session_factory, endpoint="https://push.example.com/stale")
    await _seed_subscription(session_factory, endpoint="https://push.example.com/live")
    transport = FakeTransport({"https://push.example.com/stale": "gone"})

    summary = await _scheduler(session_factory, transport).run_once()

    assert summary.gone == 1
    assert summary.sent == 1
    assert await _endpoints(session_factory) == ["https://push.example.com/live"]
    assert (await _reload(session_factory, reminder)).sent is True


@pytest.mark.asyncio
async def test_transient_failure_keeps_subscription_and_marks_sent(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    reminder = await _seed_reminder(session_factory)
    await _seed_subscription(session_factory)
    transport = FakeTransport({ENDPOINT: "transient"})

    summary = await _scheduler(session_factory, transport).run_once()

    assert summary.failed == 1
    assert summary.sent == 0
    assert summary.marked == 1
    assert await _endpoints(session_factory) == [ENDPOINT]
    assert (await _reload(session_factory, reminder)).sent is True


@pytest.mark.asyncio
async def test_transient_failure_does_not_abort_siblings(session_factory: async_sessionmaker[AsyncSession]) -> None:
    first = await _seed_reminder(session_factory, owner="user-1")
    second = await _seed_reminder(session_factory, owner="user-2")
    await _seed_subscription(session_factory, owner="user-1", endpoint="https://push.example.com/broken")
    await _seed_subscription(session_factory, owner="user-2", endpoint="https://push.example.com/fine")
    transport = FakeTransport({"https://push.example.com/broken": "transient"})

    summary = await _scheduler(session_factory, transport).run_once()

    assert summary.checked == 2
    assert summary.marked == 2
    assert (await _reload(session_factory, first)).sent is True
    assert (await _reload(session_factory, second)).sent is True


@pytest.mark.asyncio
async def test_load_failure_aborts_run(
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def broken(self: ReminderStore, **kwargs: object) -> list[Reminder]:
        raise StorageError("list_due_all")

    monkeypatch.setattr(ReminderStore, "list_due_all", broken)
    transport = FakeTransport()

    with pytest.raises(StorageError):
        await _scheduler(session_factory, transport).run_once()

    assert transport.sent == []


@pytest.mark.asyncio
async def test_mark_sent_failure_is_reported(
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    await _seed_reminder(session_factory)
    await _seed_subscription(session_factory)
    failures: list[bool] = []

    async def broken_mark_sent(self: ReminderStore, reminder_id: object, **kwargs: object) -> bool:
        raise StorageError("mark_sent")

    monkeypatch.setattr(ReminderStore, "mark_sent", broken_mark_sent)
    monkeypatch.setattr(
        "reminder_service.features.push.scheduler.track_mark_sent_failure",
        lambda: failures.append(True),
    )

    summary = await _scheduler(session_factory, FakeTransport()).run_once()

    assert summary.sent == 1
    assert summary.marked == 0
    assert failures == [True]
    assert len(summary.errors) == 1
    assert "could not be marked sent" in summary.errors[0]


@pytest.fixture
async def file_session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """File-backed SQLite so concurrent runs get their own connections."""
    from reminder_service.core.database.base import Base

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'reminders.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_overlapping_runs_mark_once(file_session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Two runs fire together; exactly one performs the transition."""
    reminder = await _seed_reminder(file_session_factory)
    await _seed_subscription(file_session_factory)
    transport = FakeTransport()

    first, second = await asyncio.gather(
        _scheduler(file_session_factory, transport).run_once(),
        _scheduler(file_session_factory, transport).run_once(),
    )

    assert first.marked + second.marked == 1
    assert 1 <= len(transport.sent) <= 2
    stored = await _reload(file_session_factory, reminder)
    assert stored.sent is True
    assert stored.sent_at == NOW
