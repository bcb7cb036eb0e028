"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings defaults so tests never reach external services
    - Database Fixtures: in-memory SQLite engine, session factory and session
    - Application Fixtures: FastAPI app with the database dependency overridden
    - Push Fixtures: VAPID keys and push settings
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Iterator
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from reminder_service.features.push.vapid import VapidKeyPair

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("LOG_FILE_PATH", "")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
for _name in ("APP_CRON_TOKEN", "PUSH_VAPID_PUBLIC_KEY", "PUSH_VAPID_PRIVATE_KEY"):
    os.environ.pop(_name, None)

OWNER = "user-1"
OTHER_OWNER = "user-2"


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    """Settings loaders are lru-cached; every test starts from the environment."""
    from reminder_service.core.settings import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite shared by every connection of the test (StaticPool)."""
    from reminder_service.core.database.base import Base
    from reminder_service.features.push import models as _push_models  # noqa: F401
    from reminder_service.features.reminders import models as _reminder_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like ``AsyncSessionLocal``."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """FastAPI application whose request sessions come from the test database."""
    from reminder_service.app.main import create_app
    from reminder_service.core.dependencies.database import get_db_session

    application = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the app; requests carry no identity by default."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return {"X-User-Id": OWNER}


# ============================================================================
# Push Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def vapid_keys() -> VapidKeyPair:
    from reminder_service.features.push.vapid import generate_vapid_keys

    return generate_vapid_keys()


@pytest.fixture
def push_env(monkeypatch: pytest.MonkeyPatch, vapid_keys: VapidKeyPair) -> VapidKeyPair:
    """Configure VAPID keys through the environment."""
    from reminder_service.core.settings import clear_all_caches

    monkeypatch.setenv("PUSH_VAPID_PUBLIC_KEY", vapid_keys.public_key)
    monkeypatch.setenv("PUSH_VAPID_PRIVATE_KEY", vapid_keys.private_key)
    monkeypatch.setenv("PUSH_VAPID_SUBJECT", "mailto:ops@example.com")
    clear_all_caches()
    return vapid_keys
