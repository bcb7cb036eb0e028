"""Server-side push delivery sweep.

One invocation (``run_once``) finds every unsent reminder firing within
``[now - lookback, now + lookahead]``, pushes it to each of its owner's
subscriptions, and marks it sent once every subscription was attempted.

Invocations may overlap when the external trigger double-fires. The
conditional ``mark_sent`` update is the gate: a run that finds the reminder
already sent treats it as a no-op.

Transmissions run concurrently, at most ``PUSH_MAX_CONCURRENCY`` in flight
across all reminders and subscriptions. Database work stays on the run's single session
and is serialized.
"""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from reminder_service.core.exceptions import StorageError
from reminder_service.core.services.base import BaseService
from reminder_service.core.settings import get_push_settings
from reminder_service.features.push.exceptions import GoneError, TransportError
from reminder_service.features.push.payload import reminder_payload
from reminder_service.features.push.service import PushSubscriptionService
from reminder_service.features.push.transport import SubscriptionTarget, WebPushTransport
from reminder_service.features.reminders.service import ReminderStore
from reminder_service.infra.metrics.tracking import track_mark_sent_failure, track_scheduler_run
from reminder_service.utils.retry import RetryError, retry
from reminder_service.utils.timeutils import ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from reminder_service.core.settings.push import PushSettings
    from reminder_service.features.push.payload import NotificationPayload
    from reminder_service.features.push.transport import PushTransport
    from reminder_service.features.reminders.models import Reminder


@dataclass(slots=True)
class SchedulerRunSummary:
    """Counters reported by one sweep.

    Attributes:
        checked: Due reminders found.
        sent: Notifications accepted by a push service.
        marked: Reminders this run transitioned to sent.
        skipped: Reminders whose owner has no subscription.
        failed: Transmissions that failed transiently.
        gone: Subscriptions removed after a 404/410.
        errors: One line per problem worth surfacing to the caller.
    """

    checked: int = 0
    sent: int = 0
    marked: int = 0
    skipped: int = 0
    failed: int = 0
    gone: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PushDeliveryScheduler(BaseService):
    """Sweep due reminders and deliver them over Web Push."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        transport: PushTransport | None = None,
        settings: PushSettings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__()
        if session_factory is None:
            from reminder_service.infra.database import AsyncSessionLocal

            session_factory = AsyncSessionLocal
        self._session_factory = session_factory
        self._settings = settings or get_push_settings()
        self._transport = transport or WebPushTransport.from_settings(self._settings)
        self._clock = clock

    async def run_once(self, now: datetime | None = None) -> SchedulerRunSummary:
        """Run one sweep.

        Raises:
            StorageError: If the due reminders or subscriptions cannot be
                loaded; nothing has been sent in that case.
        """
        started = time.perf_counter()
        now = ensure_utc(now) if now is not None else self._clock()
        summary = SchedulerRunSummary()

        try:
            async with self._session_factory() as session:
                await self._sweep(session, now, summary)
        except StorageError:
            track_scheduler_run("error", time.perf_counter() - started, summary.checked)
            self.logger.exception("Push delivery sweep aborted", extra={"now": now.isoformat()})
            raise

        track_scheduler_run("success", time.perf_counter() - started, summary.checked)
        log = self.logger.info if summary.checked else self._lazy.debug
        log(
            "Push delivery sweep finished",
            extra={"now": now.isoformat(), **summary.to_dict()},
        )
        return summary

    async def _sweep(self, session: AsyncSession, now: datetime, summary: SchedulerRunSummary) -> None:
        reminders = ReminderStore(session, clock=self._clock)
        subscriptions = PushSubscriptionService(session)

        due = await reminders.list_due_all(
            lookback=timedelta(seconds=self._settings.lookback_seconds),
            lookahead=timedelta(seconds=self._settings.lookahead_seconds),
            now=now,
        )
        summary.checked = len(due)
        if not due:
            return

        by_owner: dict[str, list[SubscriptionTarget]] = defaultdict(list)
        for subscription in await subscriptions.list_for_owners({r.owner for r in due}):
            by_owner[subscription.owner].append(SubscriptionTarget.from_model(subscription))

        semaphore = asyncio.Semaphore(self._settings.max_concurrency)
        db_lock = asyncio.Lock()
        await asyncio.gather(
            *(
                self._deliver(
                    reminder,
                    by_owner.get(reminder.owner, []),
                    reminders,
                    subscriptions,
                    semaphore,
                    db_lock,
                    summary,
                )
                for reminder in due
            )
        )

    async def _deliver(
        self,
        reminder: Reminder,
        targets: Sequence[SubscriptionTarget],
        reminders: ReminderStore,
        subscriptions: PushSubscriptionService,
        semaphore: asyncio.Semaphore,
        db_lock: asyncio.Lock,
        summary: SchedulerRunSummary,
    ) -> None:
        reminder_id = reminder.id
        if not targets:
            summary.skipped += 1
            self._lazy.debug(lambda: f"reminder {reminder_id}: owner has no push subscription, left for the client")
            return

        payload = reminder_payload(reminder)
        outcomes = await asyncio.gather(*(self._send(target, payload, semaphore) for target in targets))

        summary.sent += outcomes.count("delivered")
        summary.failed += outcomes.count("transient")

        async with db_lock:
            for target, outcome in zip(targets, outcomes, strict=True):
                if outcome == "gone":
                    await self._remove_gone(subscriptions, target, summary)
            await self._mark_sent(reminders, reminder_id, summary)

    async def _send(
        self,
        target: SubscriptionTarget,
        payload: NotificationPayload,
        semaphore: asyncio.Semaphore,
    ) -> str:
        try:
            async with semaphore:
                await self._transport.send(target, payload)
        except GoneError:
            return "gone"
        except TransportError:
            return "transient"
        except Exception:
            self.logger.exception(
                "Unexpected error sending push",
                extra={"subscription_id": str(target.id), "reminder_id": payload.reminder_id},
            )
            return "transient"
        return "delivered"

    async def _remove_gone(
        self,
        subscriptions: PushSubscriptionService,
        target: SubscriptionTarget,
        summary: SchedulerRunSummary,
    ) -> None:
        try:
            if await subscriptions.remove_gone(target.id):
                summary.gone += 1
        except StorageError as exc:
            summary.errors.append(f"subscription {target.id}: cleanup failed ({exc.detail})")

    async def _mark_sent(self, reminders: ReminderStore, reminder_id: Any, summary: SchedulerRunSummary) -> None:
        @retry(
            max_attempts=self._settings.mark_sent_attempts,
            initial_delay=0.2,
            max_delay=2.0,
            exceptions=(StorageError,),
        )
        async def mark_reminder_sent() -> bool:
            return await reminders.mark_sent(reminder_id, source="scheduler")

        try:
            changed = await mark_reminder_sent()
        except RetryError as exc:
            track_mark_sent_failure()
            self.logger.error(
                "Reminder could not be marked sent and may be delivered again",
                extra={"reminder_id": str(reminder_id), "attempts": exc.attempts, "error": str(exc.last_exception)},
            )
            summary.errors.append(f"reminder {reminder_id}: could not be marked sent")
            return

        if changed:
            summary.marked += 1
        else:
            self.logger.info(
                "Reminder already marked sent by a concurrent run",
                extra={"reminder_id": str(reminder_id)},
            )


__all__ = ["PushDeliveryScheduler", "SchedulerRunSummary"]
