"""Tests for recurrence arithmetic."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import islice
from zoneinfo import ZoneInfo

import pytest

from reminder_service.features.reminders.recurrence import (
    Recurrence,
    RecurrenceUnit,
    iter_occurrences,
    next_occurrence,
    occurrence,
)

BASE = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError, match="positive"):
        Recurrence(RecurrenceUnit.DAILY, 0)


def test_unit_is_coerced_from_string() -> None:
    assert Recurrence("weekly", 2).unit is RecurrenceUnit.WEEKLY  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        (Recurrence(RecurrenceUnit.DAILY), "every day"),
        (Recurrence(RecurrenceUnit.WEEKLY, 2), "every 2 weeks"),
        (Recurrence(RecurrenceUnit.MONTHLY), "every month"),
        (Recurrence(RecurrenceUnit.YEARLY, 3), "every 3 years"),
    ],
)
def test_describe(rule: Recurrence, expected: str) -> None:
    assert rule.describe() == expected


def test_next_occurrence_daily_skips_missed_days() -> None:
    """A daily reminder first due 3 days ago comes back tomorrow-or-later at the same time."""
    now = datetime(2025, 3, 13, 12, 0, tzinfo=UTC)

    result = next_occurrence(BASE, Recurrence(RecurrenceUnit.DAILY), now)

    assert result == datetime(2025, 3, 14, 9, 0, tzinfo=UTC)
    assert result > now


@pytest.mark.parametrize(
    ("base", "expected"),
    [
        (datetime(2025, 5, 11, 9, 0, tzinfo=UTC), datetime(2025, 6, 8, 9, 0, tzinfo=UTC)),
        (datetime(2025, 5, 11, 15, 0, tzinfo=UTC), datetime(2025, 6, 1, 15, 0, tzinfo=UTC)),
    ],
)
def test_weekly_three_weeks_stale_lands_on_same_weekday(base: datetime, expected: datetime) -> None:
    now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

    result = next_occurrence(base, Recurrence(RecurrenceUnit.WEEKLY), now)

    assert result == expected
    assert result.weekday() == base.weekday()
    assert timedelta(0) < result - now <= timedelta(weeks=1)


def test_next_occurrence_is_strictly_after_now() -> None:
    result = next_occurrence(BASE, Recurrence(RecurrenceUnit.DAILY), BASE)

    assert result == BASE + timedelta(days=1)


def test_next_occurrence_returns_base_when_in_future() -> None:
    now = BASE - timedelta(hours=1)

    assert next_occurrence(BASE, Recurrence(RecurrenceUnit.WEEKLY), now) == BASE


def test_weekly_interval_steps_in_multiples() -> None:
    rule = Recurrence(RecurrenceUnit.WEEKLY, 2)
    now = BASE + timedelta(days=15)

    assert next_occurrence(BASE, rule, now) == BASE + timedelta(weeks=4)


def test_monthly_clamps_to_end_of_month() -> None:
    base = datetime(2025, 1, 31, 9, 0, tzinfo=UTC)
    rule = Recurrence(RecurrenceUnit.MONTHLY)

    assert next_occurrence(base, rule, datetime(2025, 2, 1, tzinfo=UTC)) == datetime(2025, 2, 28, 9, 0, tzinfo=UTC)


def test_monthly_clamp_does_not_drift() -> None:
    base = datetime(2025, 1, 31, 9, 0, tzinfo=UTC)
    rule = Recurrence(RecurrenceUnit.MONTHLY)

    assert occurrence(base, rule, 2) == datetime(2025, 3, 31, 9, 0, tzinfo=UTC)


def test_leap_day_yearly() -> None:
    base = datetime(2024, 2, 29, 8, 0, tzinfo=UTC)
    rule = Recurrence(RecurrenceUnit.YEARLY)

    assert occurrence(base, rule, 1) == datetime(2025, 2, 28, 8, 0, tzinfo=UTC)
    assert occurrence(base, rule, 4) == datetime(2028, 2, 29, 8, 0, tzinfo=UTC)


def test_daily_keeps_wall_clock_across_dst() -> None:
    zone = ZoneInfo("America/New_York")
    # 09:00 EST on the Saturday before the 2025 spring-forward
    base = datetime(2025, 3, 8, 9, 0, tzinfo=zone).astimezone(UTC)
    rule = Recurrence(RecurrenceUnit.DAILY)

    after_change = occurrence(base, rule, 2, zone)

    assert after_change.astimezone(zone).hour == 9
    assert after_change - base == timedelta(days=2, hours=-1)


def test_naive_now_is_treated_as_utc() -> None:
    now = datetime(2025, 3, 13, 12, 0)

    assert next_occurrence(BASE, Recurrence(RecurrenceUnit.DAILY), now) == datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


def test_iter_occurrences_yields_increasing_series() -> None:
    rule = Recurrence(RecurrenceUnit.DAILY, 3)
    after = BASE + timedelta(days=4)

    first_three = list(islice(iter_occurrences(BASE, rule, after), 3))

    assert first_three == [BASE + timedelta(days=d) for d in (6, 9, 12)]
