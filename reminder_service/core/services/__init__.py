"""Service layer base classes."""

from __future__ import annotations

from .base import BaseService, TransactionalService

__all__ = ["BaseService", "TransactionalService"]
