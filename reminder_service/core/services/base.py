"""Base service class for business logic."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from reminder_service.core.exceptions import StorageError
from reminder_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """Base class for all service classes.

    Loggers:
        - self.logger: Standard logger for INFO/WARNING/ERROR
        - self._lazy: Lazy logger for DEBUG (callables evaluated only when enabled)

    Example:
        class ReminderStore(BaseService):
            def __init__(self, session: AsyncSession):
                super().__init__()
                self.session = session

            async def delete(self, reminder_id: UUID) -> None:
                self.logger.info("Deleting reminder", extra={"reminder_id": str(reminder_id)})
                self._lazy.debug(lambda: f"Session state: {self.session.info}")
    """

    def __init__(self) -> None:
        class_name = self.__class__.__name__
        self.logger = logging.getLogger(class_name)
        self._lazy = get_lazy_logger(class_name)


class TransactionalService(BaseService):
    """Service owning the transaction boundary of one session.

    ``_transaction`` commits on success and rolls back on any failure;
    database errors are logged and re-raised as ``StorageError`` with the
    original chained.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__()
        self.session = session

    @asynccontextmanager
    async def _transaction(self, operation: str, **context: Any) -> AsyncIterator[None]:
        try:
            yield
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            self.logger.error(
                "Storage operation failed",
                extra={"operation": operation, "error": str(exc), **context},
            )
            raise StorageError(operation) from exc
        except BaseException:
            await self.session.rollback()
            raise

    @asynccontextmanager
    async def _read(self, operation: str, **context: Any) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            await self.session.rollback()
            self.logger.error(
                "Storage read failed",
                extra={"operation": operation, "error": str(exc), **context},
            )
            raise StorageError(operation) from exc
