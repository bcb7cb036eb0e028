"""SQLAlchemy models for the reminders feature."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from reminder_service.core.database import TimestampedBase, UTCDateTime
from reminder_service.features.reminders.recurrence import Recurrence, RecurrenceUnit


class Reminder(TimestampedBase):
    """A scheduled alert attached to a list item.

    ``target_item`` references an item owned by another system; the
    item's text is snapshotted into ``message`` so notifications can be
    rendered without reaching back to it.

    Recurring reminders carry ``recurrence_unit`` and ``recurrence_interval``
    together (both set or both null). ``sent`` flips to true exactly once per
    armed occurrence; re-arming resets it.
    """

    __tablename__ = "reminders"
    __table_args__ = (
        CheckConstraint(
            "(recurrence_unit IS NULL AND recurrence_interval IS NULL) "
            "OR (recurrence_unit IS NOT NULL AND recurrence_interval >= 1)",
            name="recurrence_complete",
        ),
        Index("ix_reminders_sent_fire_time", "sent", "fire_time"),
    )

    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    target_item: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    message: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Snapshot of the item text shown in notifications",
    )
    fire_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    timezone: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="UTC",
        server_default="UTC",
        comment="IANA zone used for recurrence wall-clock arithmetic",
    )
    recurrence_unit: Mapped[str | None] = mapped_column(String(16), nullable=True)
    recurrence_interval: Mapped[int | None] = mapped_column(Integer(), nullable=True)
    sent: Mapped[bool] = mapped_column(
        Boolean(),
        nullable=False,
        default=False,
        server_default=false(),
    )
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    @property
    def recurrence(self) -> Recurrence | None:
        if self.recurrence_unit is None or self.recurrence_interval is None:
            return None
        return Recurrence(RecurrenceUnit(self.recurrence_unit), self.recurrence_interval)

    @recurrence.setter
    def recurrence(self, rule: Recurrence | None) -> None:
        if rule is None:
            self.recurrence_unit = None
            self.recurrence_interval = None
        else:
            self.recurrence_unit = rule.unit.value
            self.recurrence_interval = rule.interval

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_unit is not None

    def __repr__(self) -> str:
        return (
            f"<Reminder(id={self.id}, owner={self.owner!r}, target_item={self.target_item!r}, "
            f"fire_time={self.fire_time}, sent={self.sent})>"
        )
