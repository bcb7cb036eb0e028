"""Web Push delivery settings."""

from __future__ import annotations

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Push services reject VAPID tokens that expire more than 24h out; keep well inside it
MAX_VAPID_TOKEN_TTL_SECONDS = 12 * 60 * 60


class PushSettings(BaseSettings):
    """Web Push (VAPID) and delivery scheduler configuration.

    Environment variables use PUSH_ prefix.
    Example: PUSH_VAPID_PRIVATE_KEY=..., PUSH_VAPID_SUBJECT=mailto:ops@example.com
    """

    enabled: bool = Field(
        default=True,
        description="Enable server-side push delivery. When False the scheduler checks but never sends.",
    )
    vapid_public_key: str | None = Field(
        default=None,
        description="Base64url uncompressed P-256 public key handed to clients as applicationServerKey",
    )
    vapid_private_key: SecretStr | None = Field(
        default=None,
        description="Base64url raw P-256 private key (or PEM/DER accepted by py-vapid)",
    )
    vapid_subject: str = Field(
        default="mailto:admin@example.com",
        pattern=r"^(mailto:|https://).+",
        description="Contact URI placed in the VAPID 'sub' claim",
    )
    token_ttl_seconds: int = Field(
        default=MAX_VAPID_TOKEN_TTL_SECONDS,
        ge=60,
        le=MAX_VAPID_TOKEN_TTL_SECONDS,
        description="Lifetime of each signed VAPID assertion ('exp' claim)",
    )
    message_ttl_seconds: int = Field(
        default=86_400,
        ge=0,
        le=2_419_200,
        description="TTL header: how long the push service may hold an undelivered message",
    )
    request_timeout: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="Timeout (seconds) for a single push transmission",
    )
    max_concurrency: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum reminders processed concurrently in one scheduler invocation",
    )
    lookback_seconds: int = Field(
        default=60,
        ge=0,
        le=86_400,
        description="How far in the past a reminder's fire_time may be and still be delivered",
    )
    lookahead_seconds: int = Field(
        default=60,
        ge=0,
        le=3_600,
        description="How far in the future a reminder's fire_time may be and already be delivered",
    )
    mark_sent_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made to persist the sent flag after a delivery round",
    )
    urgency: str = Field(
        default="high",
        pattern=r"^(very-low|low|normal|high)$",
        description="Urgency header sent with each push message",
    )

    @model_validator(mode="after")
    def validate_vapid_pair(self) -> PushSettings:
        """Require both halves of the VAPID key pair or neither."""
        if (self.vapid_public_key is None) != (self.vapid_private_key is None):
            msg = "vapid_public_key and vapid_private_key must be provided together"
            raise ValueError(msg)
        return self

    @property
    def is_configured(self) -> bool:
        return self.enabled and self.vapid_private_key is not None

    model_config = SettingsConfigDict(
        env_prefix="PUSH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
