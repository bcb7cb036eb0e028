"""Database engine and session management.

PostgreSQL through the psycopg3 async driver in production; when the
database is disabled the engine points at a local SQLite file via aiosqlite.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reminder_service.core.settings import get_app_settings, get_db_settings
from reminder_service.utils.retry import retry

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

db_settings = get_db_settings()
app_settings = get_app_settings()

engine_kwargs = db_settings.sqlalchemy_engine_kwargs()
engine_kwargs["echo"] = engine_kwargs["echo"] or app_settings.debug
engine = create_async_engine(db_settings.get_sqlalchemy_url(), **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Use in CLI commands, the scheduler and scripts; route handlers use the
    ``get_db_session`` dependency instead.

    Example:
        async with get_async_session() as session:
            store = ReminderStore(session)
            await store.mark_sent(reminder_id)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@retry(
    max_attempts=db_settings.startup_retry_attempts,
    initial_delay=db_settings.startup_retry_delay,
    max_delay=30.0,
    stop_after_delay=db_settings.startup_retry_timeout,
)
async def init_database() -> None:
    """Verify the database is reachable, retrying with backoff.

    Containers frequently start before PostgreSQL accepts connections, so
    startup retries per ``DB_STARTUP_RETRY_*`` before giving up.
    """
    logger.info(
        "Initializing database connection",
        extra={
            "max_attempts": db_settings.startup_retry_attempts,
            "initial_delay": db_settings.startup_retry_delay,
            "backend": "sqlite" if db_settings.is_sqlite else "postgresql",
        },
    )

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Failed to connect to database", extra={"error": str(e)})
        raise

    logger.info("Database connection established successfully")


async def create_tables() -> None:
    """Create any missing tables directly from model metadata.

    Used for the SQLite fallback where alembic migrations are not run.
    """
    from reminder_service.core.database import Base
    from reminder_service.features.push import models as _push_models  # noqa: F401
    from reminder_service.features.reminders import models as _reminder_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_database() -> None:
    """Dispose of the engine's connection pool on shutdown."""
    logger.info("Closing database connection")

    try:
        await engine.dispose()
        logger.info("Database connection closed successfully")
    except Exception as e:
        logger.exception("Error closing database connection", extra={"error": str(e)})


__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "create_tables",
    "engine",
    "get_async_session",
    "init_database",
]
