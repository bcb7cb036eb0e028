"""Reminder store: the single write path for reminder state.

Every mutating operation is one transaction. Database failures roll the
transaction back and surface as :class:`StorageError`; partial writes are
never left behind.

Rescheduling policy (re-arm on edit):
    ``reschedule`` and ``advance_to_next_occurrence`` are the only
    operations that move a reminder forward. Marking a recurring reminder
    as sent does not re-arm it; the client (or the user editing the
    reminder) decides when the next occurrence becomes active.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from reminder_service.core.exceptions import NotFoundException, ValidationException
from reminder_service.core.services.base import TransactionalService
from reminder_service.features.reminders.models import Reminder
from reminder_service.features.reminders.recurrence import next_occurrence
from reminder_service.features.reminders.repository import (
    ReminderRepository,
    get_reminder_repository,
)
from reminder_service.infra.metrics.tracking import track_reminder_marked_sent
from reminder_service.utils.timeutils import ensure_utc, resolve_zone, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

    from reminder_service.features.reminders.recurrence import Recurrence


class ReminderStore(TransactionalService):
    """Reminder operations over one database session."""

    def __init__(
        self,
        session: AsyncSession,
        repository: ReminderRepository | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session)
        self._repository = repository or get_reminder_repository()
        self._clock = clock

    async def _load(self, reminder_id: UUID, owner: str | None) -> Reminder:
        reminder = await self._repository.get(self.session, reminder_id)
        if reminder is None or (owner is not None and reminder.owner != owner):
            raise NotFoundException(
                detail=f"Reminder {reminder_id} not found",
                type="reminder-not-found",
                extra={"reminder_id": str(reminder_id)},
            )
        return reminder

    @staticmethod
    def _zone(name: str | None) -> ZoneInfo:
        try:
            return resolve_zone(name)
        except ValueError as exc:
            raise ValidationException(detail=str(exc), type="invalid-timezone") from exc

    async def get(self, reminder_id: UUID, *, owner: str | None = None, fresh: bool = False) -> Reminder:
        """Fetch a reminder, optionally scoped to ``owner``.

        ``fresh`` reloads the row even if the session already holds it.

        Raises:
            NotFoundException: If it does not exist or belongs to someone else.
            StorageError: If the store cannot be read.
        """
        async with self._read("get", reminder_id=str(reminder_id)):
            reminder = await self._load(reminder_id, owner)
            if fresh:
                await self.session.refresh(reminder)
            return reminder

    async def create(
        self,
        owner: str,
        target_item: str,
        fire_time: datetime,
        recurrence: Recurrence | None = None,
        *,
        message: str | None = None,
        timezone: str = "UTC",
    ) -> Reminder:
        """Create an unsent reminder."""
        self._zone(timezone)
        reminder = Reminder(
            owner=owner,
            target_item=target_item,
            message=message,
            fire_time=ensure_utc(fire_time),
            timezone=timezone,
            sent=False,
            sent_at=None,
        )
        reminder.recurrence = recurrence

        async with self._transaction("create", owner=owner, target_item=target_item):
            created = await self._repository.create(self.session, reminder)

        self.logger.info(
            "Reminder created",
            extra={
                "reminder_id": str(created.id),
                "target_item": target_item,
                "fire_time": created.fire_time.isoformat(),
                "recurring": recurrence is not None,
                "operation": "service.create",
            },
        )
        return created

    async def reschedule(
        self,
        reminder_id: UUID,
        fire_time: datetime,
        recurrence: Recurrence | None = None,
        *,
        owner: str | None = None,
        message: str | None = None,
        timezone: str | None = None,
    ) -> Reminder:
        """Move a reminder to a new fire time and re-arm it.

        ``recurrence`` replaces the stored rule (``None`` makes it one-shot).
        A recurring reminder whose new fire time is already in the past is
        moved to its next occurrence after now.
        """
        now = self._clock()
        async with self._transaction("reschedule", reminder_id=str(reminder_id)):
            reminder = await self._load(reminder_id, owner)
            zone = self._zone(timezone or reminder.timezone)

            fire_time = ensure_utc(fire_time)
            if recurrence is not None and fire_time <= now:
                fire_time = next_occurrence(fire_time, recurrence, now, zone)

            reminder.fire_time = fire_time
            reminder.recurrence = recurrence
            if timezone is not None:
                reminder.timezone = timezone
            if message is not None:
                reminder.message = message
            reminder.sent = False
            reminder.sent_at = None
            await self.session.flush()

        self.logger.info(
            "Reminder rescheduled",
            extra={
                "reminder_id": str(reminder_id),
                "fire_time": fire_time.isoformat(),
                "recurring": recurrence is not None,
                "operation": "service.reschedule",
            },
        )
        return reminder

    async def delete(self, reminder_id: UUID, *, owner: str | None = None) -> None:
        async with self._transaction("delete", reminder_id=str(reminder_id)):
            reminder = await self._load(reminder_id, owner)
            await self._repository.delete(self.session, reminder)

    async def mark_sent(
        self,
        reminder_id: UUID,
        *,
        owner: str | None = None,
        source: str = "api",
    ) -> bool:
        """Mark a reminder as sent.

        Idempotent: only the first call flips the flag and stamps
        ``sent_at``; later calls are no-ops.

        Returns:
            True if this call performed the transition.

        Raises:
            NotFoundException: If ``owner`` is given and does not own the reminder.
            StorageError: If the update cannot be committed.
        """
        async with self._transaction("mark_sent", reminder_id=str(reminder_id), source=source):
            if owner is not None:
                await self._load(reminder_id, owner)
            changed = await self._repository.mark_sent(
                self.session,
                reminder_id,
                sent_at=self._clock(),
            )

        if changed:
            track_reminder_marked_sent(source)
            self.logger.info(
                "Reminder marked sent",
                extra={"reminder_id": str(reminder_id), "source": source, "operation": "service.mark_sent"},
            )
        else:
            self._lazy.debug(lambda: f"service.mark_sent({reminder_id}) -> already sent")
        return changed

    async def list_due(
        self,
        owner: str,
        *,
        lookback: timedelta,
        lookahead: timedelta,
        now: datetime | None = None,
    ) -> Sequence[Reminder]:
        """Unsent reminders of ``owner`` firing within ``[now - lookback, now + lookahead]``."""
        now = ensure_utc(now) if now is not None else self._clock()
        async with self._read("list_due", owner=owner):
            return await self._repository.list_due(
                self.session,
                owner=owner,
                start=now - lookback,
                end=now + lookahead,
            )

    async def list_due_all(
        self,
        *,
        lookback: timedelta,
        lookahead: timedelta,
        now: datetime | None = None,
        limit: int | None = None,
    ) -> Sequence[Reminder]:
        """Unsent reminders of all owners firing within the window around ``now``."""
        now = ensure_utc(now) if now is not None else self._clock()
        async with self._read("list_due_all"):
            return await self._repository.list_due_all(
                self.session,
                start=now - lookback,
                end=now + lookahead,
                limit=limit,
            )

    async def find_by_item(self, target_item: str, *, owner: str | None = None) -> Reminder | None:
        async with self._read("find_by_item", target_item=target_item):
            return await self._repository.find_by_item(self.session, target_item, owner=owner)

    async def advance_to_next_occurrence(
        self,
        reminder_id: UUID,
        *,
        owner: str | None = None,
        now: datetime | None = None,
    ) -> Reminder:
        """Move a recurring reminder to its first occurrence after now and re-arm it.

        Raises:
            ValidationException: If the reminder does not recur.
        """
        now = ensure_utc(now) if now is not None else self._clock()
        async with self._transaction("advance_to_next_occurrence", reminder_id=str(reminder_id)):
            reminder = await self._load(reminder_id, owner)
            rule = reminder.recurrence
            if rule is None:
                raise ValidationException(
                    detail=f"Reminder {reminder_id} does not recur",
                    type="reminder-not-recurring",
                    extra={"reminder_id": str(reminder_id)},
                )
            previous = reminder.fire_time
            reminder.fire_time = next_occurrence(previous, rule, now, self._zone(reminder.timezone))
            reminder.sent = False
            reminder.sent_at = None
            await self.session.flush()

        self.logger.info(
            "Reminder advanced to next occurrence",
            extra={
                "reminder_id": str(reminder_id),
                "previous_fire_time": previous.isoformat(),
                "fire_time": reminder.fire_time.isoformat(),
                "operation": "service.advance_to_next_occurrence",
            },
        )
        return reminder


__all__ = ["ReminderStore"]
