"""Database core: declarative base, mixins, column types and repository."""

from __future__ import annotations

from .base import NAMING_CONVENTION, Base, TimestampedBase, TimestampMixin, UUIDPKMixin
from .exceptions import NotFoundError, RepositoryError
from .repository import BaseRepository
from .types import UTCDateTime

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "NotFoundError",
    "RepositoryError",
    "TimestampMixin",
    "TimestampedBase",
    "UTCDateTime",
    "UUIDPKMixin",
]
