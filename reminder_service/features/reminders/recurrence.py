"""Recurrence arithmetic for repeating reminders.

A rule is a calendar unit plus a positive interval ("every 2 weeks"). The
next occurrence after a reference time is ``base + k * interval`` for the
smallest ``k >= 0`` that lands strictly after the reference.

Calendar policy:
    Offsets are applied to the wall-clock time in the reminder's time zone,
    so a 09:00 daily reminder stays at 09:00 across DST changes.

    Month and year steps clamp to the last day of the target month:
    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years), Feb 29 + 1 year is
    Feb 28. Every candidate is computed from the original base rather than
    from the previous candidate, so a clamp never shortens later
    occurrences (Jan 31 + 2 months is Mar 31, not Mar 28).

    The search is linear in the number of missed intervals. Reminders are
    re-armed frequently, so catch-up counts stay small.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from enum import Enum
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from reminder_service.utils.timeutils import ensure_utc

if TYPE_CHECKING:
    from collections.abc import Iterator


class RecurrenceUnit(str, Enum):
    """Supported recurrence units."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_UNIT_FIELD = {
    RecurrenceUnit.DAILY: "days",
    RecurrenceUnit.WEEKLY: "weeks",
    RecurrenceUnit.MONTHLY: "months",
    RecurrenceUnit.YEARLY: "years",
}


@dataclass(frozen=True, slots=True)
class Recurrence:
    """A repeat rule: every ``interval`` ``unit``s.

    Example:
        >>> Recurrence(RecurrenceUnit.WEEKLY, 2).offset(3)
        relativedelta(weeks=+6)
    """

    unit: RecurrenceUnit
    interval: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.unit, RecurrenceUnit):
            object.__setattr__(self, "unit", RecurrenceUnit(self.unit))
        if self.interval < 1:
            msg = f"Recurrence interval must be a positive integer, got {self.interval}"
            raise ValueError(msg)

    def offset(self, steps: int) -> relativedelta:
        """Calendar offset covering ``steps`` intervals."""
        return relativedelta(**{_UNIT_FIELD[self.unit]: steps * self.interval})

    def describe(self) -> str:
        noun = self.unit.value.removesuffix("ly").replace("dai", "day")
        if self.interval == 1:
            return f"every {noun}"
        return f"every {self.interval} {noun}s"


def occurrence(base: datetime, rule: Recurrence, k: int, tz: tzinfo = UTC) -> datetime:
    """Return the ``k``-th occurrence of ``rule`` counted from ``base`` (UTC).

    Args:
        base: First occurrence.
        rule: Repeat rule.
        k: Number of intervals after ``base``.
        tz: Zone whose wall clock the offsets are applied in.
    """
    local_base = ensure_utc(base).astimezone(tz)
    wall = local_base.replace(tzinfo=None) + rule.offset(k)
    return wall.replace(tzinfo=tz).astimezone(UTC)


def next_occurrence(
    base: datetime,
    rule: Recurrence,
    now: datetime,
    tz: tzinfo = UTC,
) -> datetime:
    """Return the first occurrence of ``rule`` strictly after ``now``.

    Args:
        base: The reminder's current fire time (first occurrence).
        rule: Repeat rule.
        now: Reference time.
        tz: Zone whose wall clock the offsets are applied in.

    Returns:
        ``base + k * interval`` in UTC for the smallest ``k >= 0`` greater than ``now``.

    Example:
        >>> next_occurrence(
        ...     datetime(2025, 1, 31, 9, tzinfo=UTC),
        ...     Recurrence(RecurrenceUnit.MONTHLY),
        ...     datetime(2025, 2, 1, tzinfo=UTC),
        ... )
        datetime.datetime(2025, 2, 28, 9, 0, tzinfo=datetime.timezone.utc)
    """
    now = ensure_utc(now)
    k = 0
    candidate = occurrence(base, rule, k, tz)
    while candidate <= now:
        k += 1
        candidate = occurrence(base, rule, k, tz)
    return candidate


def iter_occurrences(
    base: datetime,
    rule: Recurrence,
    after: datetime,
    tz: tzinfo = UTC,
) -> Iterator[datetime]:
    """Yield successive occurrences strictly after ``after``, without end."""
    after = ensure_utc(after)
    first = next_occurrence(base, rule, after, tz)
    k = 0
    while occurrence(base, rule, k, tz) != first:
        k += 1
    while True:
        yield occurrence(base, rule, k, tz)
        k += 1
