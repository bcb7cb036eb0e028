"""In-process scheduler settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """APScheduler configuration for the in-process reminder sweep.

    Production deployments usually trigger ``POST /push/check-reminders`` from
    an external cron; the in-process job is the alternative for single-node
    setups.

    Environment variables use SCHEDULER_ prefix.
    """

    enabled: bool = Field(
        default=False,
        description="Run the reminder sweep inside the API process",
    )
    interval_seconds: int = Field(
        default=60,
        ge=10,
        le=3600,
        description="Seconds between reminder sweeps",
    )
    misfire_grace_time: int = Field(
        default=30,
        ge=1,
        le=3600,
        description="Seconds a late sweep may still start before it is skipped",
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
