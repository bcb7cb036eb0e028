"""Custom SQLAlchemy column types."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC timestamp on every dialect.

    PostgreSQL stores ``timestamptz`` and hands back aware values, but SQLite
    drops the offset and returns naive datetimes. Reminder due-window maths
    compares stored values with ``datetime.now(UTC)``, so values are
    normalised to aware UTC both on the way in and on the way out.

    Example:
        >>> class Reminder(Base, UUIDPKMixin):
        ...     fire_time: Mapped[datetime] = mapped_column(UTCDateTime())

    Naive datetimes passed in are assumed to already be UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
