"""Repository for the reminders feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from reminder_service.core.database import BaseRepository
from reminder_service.features.reminders.models import Reminder

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class ReminderRepository(BaseRepository[Reminder]):
    """Repository for Reminder model.

    Inherits from BaseRepository:
        - get(session, id) -> Reminder | None
        - get_or_raise(session, id) -> Reminder
        - get_by(session, attr, value) -> Reminder | None
        - list(session, limit, offset) -> Sequence[Reminder]
        - create(session, instance) -> Reminder
        - delete(session, instance) -> None

    Feature-specific methods below.
    """

    def __init__(self) -> None:
        """Initialize with Reminder model."""
        super().__init__(Reminder)

    async def list_due(
        self,
        session: AsyncSession,
        *,
        owner: str,
        start: datetime,
        end: datetime,
    ) -> Sequence[Reminder]:
        """Unsent reminders of ``owner`` whose fire time is within ``[start, end]``.

        Returns:
            Reminders ordered by fire time, earliest first
        """
        stmt = (
            select(Reminder)
            .where(
                Reminder.owner == owner,
                Reminder.sent == False,  # noqa: E712
                Reminder.fire_time >= start,
                Reminder.fire_time <= end,
            )
            .order_by(Reminder.fire_time.asc(), Reminder.id.asc())
        )
        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_due: Reminder(owner={owner}, {start.isoformat()}..{end.isoformat()}) -> {len(items)}"
        )
        return items

    async def list_due_all(
        self,
        session: AsyncSession,
        *,
        start: datetime,
        end: datetime,
        limit: int | None = None,
    ) -> Sequence[Reminder]:
        """Unsent reminders of every owner whose fire time is within ``[start, end]``."""
        stmt = (
            select(Reminder)
            .where(
                Reminder.sent == False,  # noqa: E712
                Reminder.fire_time >= start,
                Reminder.fire_time <= end,
            )
            .order_by(Reminder.fire_time.asc(), Reminder.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        items = result.scalars().all()

        if items:
            self._logger.info(
                "Found due reminders",
                extra={
                    "count": len(items),
                    "window_start": start.isoformat(),
                    "window_end": end.isoformat(),
                    "operation": "db.list_due_all",
                },
            )
        else:
            self._lazy.debug(lambda: f"db.list_due_all: nothing due in {start.isoformat()}..{end.isoformat()}")
        return items

    async def find_by_item(
        self,
        session: AsyncSession,
        target_item: str,
        *,
        owner: str | None = None,
    ) -> Reminder | None:
        """Reminder attached to ``target_item``, preferring the most recent unsent one."""
        stmt = select(Reminder).where(Reminder.target_item == target_item)
        if owner is not None:
            stmt = stmt.where(Reminder.owner == owner)
        stmt = stmt.order_by(Reminder.sent.asc(), Reminder.created_at.desc()).limit(1)
        result = await session.execute(stmt)
        reminder = result.scalars().first()

        self._lazy.debug(
            lambda: f"db.find_by_item({target_item!r}, owner={owner}) -> {reminder.id if reminder else 'not found'}"
        )
        return reminder

    async def mark_sent(
        self,
        session: AsyncSession,
        reminder_id: UUID,
        *,
        sent_at: datetime,
    ) -> bool:
        """Flip ``sent`` to true only if it is currently false.

        The guard lives in the UPDATE itself so two concurrent callers
        cannot both observe the transition.

        Returns:
            True if this call performed the transition, False if the
            reminder was already sent or does not exist
        """
        stmt = (
            update(Reminder)
            .where(Reminder.id == reminder_id, Reminder.sent == False)  # noqa: E712
            .values(sent=True, sent_at=sent_at)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        changed = result.rowcount == 1

        self._lazy.debug(lambda: f"db.mark_sent({reminder_id}) -> {'changed' if changed else 'no-op'}")
        return changed


_reminder_repository: ReminderRepository | None = None


def get_reminder_repository() -> ReminderRepository:
    """Get the shared ReminderRepository instance."""
    global _reminder_repository
    if _reminder_repository is None:
        _reminder_repository = ReminderRepository()
    return _reminder_repository


__all__ = ["ReminderRepository", "get_reminder_repository"]
