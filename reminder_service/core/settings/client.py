"""Settings for the client-side notification components."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Configuration for the poller, dedup ledger and API client.

    Environment variables use CLIENT_ prefix.
    Example: CLIENT_API_BASE_URL=https://reminders.example.com/api/v1
    """

    api_base_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL of the reminder API",
    )
    request_timeout: float = Field(default=10.0, gt=0.0, le=120.0)
    poll_interval_seconds: float = Field(
        default=60.0,
        ge=30.0,
        le=60.0,
        description="Seconds between foreground due-reminder checks",
    )
    due_lookback_seconds: int = Field(
        default=3600,
        ge=0,
        description="Overdue reminders older than this are no longer alerted locally",
    )
    due_lookahead_seconds: int = Field(
        default=300,
        ge=0,
        description="Reminders firing within this many seconds are alerted early",
    )
    ledger_capacity: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Number of alerted reminder ids kept before eviction",
    )
    ledger_trim_to: int = Field(
        default=50,
        ge=1,
        le=10_000,
        description="Number of most recent ids retained when the ledger overflows",
    )

    @model_validator(mode="after")
    def validate_ledger_bounds(self) -> ClientSettings:
        """Trimming must leave room below the capacity."""
        if self.ledger_trim_to > self.ledger_capacity:
            msg = "ledger_trim_to must not exceed ledger_capacity"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
