"""Pydantic schemas for the reminders feature."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reminder_service.features.reminders.recurrence import Recurrence, RecurrenceUnit
from reminder_service.utils.timeutils import ensure_utc, resolve_zone


class RecurrenceSchema(BaseModel):
    """Repeat rule: every ``interval`` ``unit``s."""

    unit: RecurrenceUnit = Field(..., description="Calendar unit the reminder repeats on")
    interval: int = Field(
        default=1,
        ge=1,
        le=1000,
        description="Repeat every N units (e.g. every 2 weeks)",
    )

    def to_rule(self) -> Recurrence:
        return Recurrence(self.unit, self.interval)


def _validate_zone(value: str | None) -> str | None:
    if value is not None:
        resolve_zone(value)
    return value


class ReminderCreate(BaseModel):
    """Payload used when creating a reminder."""

    target_item: str = Field(..., min_length=1, max_length=255, description="Identifier of the list item")
    fire_time: datetime = Field(..., description="When the reminder fires; naive values are read as UTC")
    recurrence: RecurrenceSchema | None = None
    message: str | None = Field(default=None, max_length=500, description="Text shown in the notification")
    timezone: str = Field(default="UTC", max_length=64, description="IANA zone for recurrence arithmetic")

    @field_validator("fire_time")
    @classmethod
    def normalize_fire_time(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        return _validate_zone(v) or "UTC"


class ReminderReschedule(BaseModel):
    """Payload for moving a reminder to a new fire time.

    ``recurrence`` replaces the stored rule; omit it to make the reminder one-shot.
    """

    fire_time: datetime
    recurrence: RecurrenceSchema | None = None
    message: str | None = Field(default=None, max_length=500)
    timezone: str | None = Field(default=None, max_length=64)

    @field_validator("fire_time")
    @classmethod
    def normalize_fire_time(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        return _validate_zone(v)


class ReminderResponse(BaseModel):
    """Reminder returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner: str
    target_item: str
    message: str | None = None
    fire_time: datetime
    timezone: str
    recurrence: RecurrenceSchema | None = None
    sent: bool
    sent_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("recurrence", mode="before")
    @classmethod
    def convert_rule(cls, v: object) -> object:
        if isinstance(v, Recurrence):
            return {"unit": v.unit, "interval": v.interval}
        return v


class MarkSentResponse(BaseModel):
    """Outcome of marking a reminder as sent."""

    id: UUID
    sent: bool
    sent_at: datetime | None
    changed: bool = Field(description="False when the reminder had already been marked sent")


__all__ = [
    "MarkSentResponse",
    "RecurrenceSchema",
    "ReminderCreate",
    "ReminderReschedule",
    "ReminderResponse",
]
