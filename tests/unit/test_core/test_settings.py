"""Tests for the settings models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reminder_service.core.settings import clear_all_caches, get_app_settings, get_push_settings
from reminder_service.core.settings.client import ClientSettings
from reminder_service.core.settings.postgres import SQLITE_FALLBACK_URL, PostgresSettings
from reminder_service.core.settings.push import MAX_VAPID_TOKEN_TTL_SECONDS, PushSettings


def test_push_keys_must_come_in_pairs() -> None:
    with pytest.raises(ValidationError, match="provided together"):
        PushSettings(vapid_public_key="BPUB")


def test_push_configured_requires_keys_and_enabled() -> None:
    keys = {"vapid_public_key": "BPUB", "vapid_private_key": "priv"}

    assert PushSettings().is_configured is False
    assert PushSettings(**keys).is_configured is True  # type: ignore[arg-type]
    assert PushSettings(enabled=False, **keys).is_configured is False  # type: ignore[arg-type]


def test_push_token_ttl_is_capped() -> None:
    with pytest.raises(ValidationError):
        PushSettings(token_ttl_seconds=MAX_VAPID_TOKEN_TTL_SECONDS + 1)


def test_push_subject_must_be_contact_uri() -> None:
    with pytest.raises(ValidationError):
        PushSettings(vapid_subject="ops@example.com")


def test_push_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PUSH_MAX_CONCURRENCY", "3")
    monkeypatch.setenv("PUSH_LOOKBACK_SECONDS", "120")
    clear_all_caches()

    settings = get_push_settings()

    assert settings.max_concurrency == 3
    assert settings.lookback_seconds == 120


def test_client_ledger_bounds() -> None:
    with pytest.raises(ValidationError, match="ledger_trim_to"):
        ClientSettings(ledger_capacity=10, ledger_trim_to=20)


@pytest.mark.parametrize("interval", [29.0, 61.0])
def test_client_poll_interval_range(interval: float) -> None:
    with pytest.raises(ValidationError):
        ClientSettings(poll_interval_seconds=interval)


def test_postgres_url_from_components(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    settings = PostgresSettings(
        enabled=True,
        user="app",
        password="p@ss word",  # type: ignore[arg-type]
        host="db",
        name="reminders",
    )

    url = settings.get_sqlalchemy_url()
    assert url.startswith("postgresql+psycopg://app:p%40ss+word@db:5432/reminders")
    assert settings.is_sqlite is False
    assert "pool_size" in settings.sqlalchemy_engine_kwargs()


def test_postgres_disabled_falls_back_to_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    settings = PostgresSettings(enabled=False)

    assert settings.get_sqlalchemy_url() == SQLITE_FALLBACK_URL
    assert settings.is_sqlite is True
    assert "pool_size" not in settings.sqlalchemy_engine_kwargs()


def test_postgres_dsn_wins() -> None:
    settings = PostgresSettings(dsn="sqlite+aiosqlite:///:memory:")

    assert settings.get_sqlalchemy_url() == "sqlite+aiosqlite:///:memory:"


def test_app_settings_defaults() -> None:
    settings = get_app_settings()

    assert settings.api_prefix == "/api/v1"
    assert settings.user_header == "X-User-Id"
    assert settings.cron_token is None
    assert settings.docs_url == "/docs"


def test_app_settings_are_frozen() -> None:
    settings = get_app_settings()

    with pytest.raises(ValidationError):
        settings.api_prefix = "/other"  # type: ignore[misc]
