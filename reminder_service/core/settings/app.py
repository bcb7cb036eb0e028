"""Application settings for FastAPI configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """FastAPI application settings.

    Environment variables use APP_ prefix.
    Example: APP_DEBUG=true, APP_API_PREFIX=/api/v1
    """

    service_name: str = Field(
        default="reminder-service",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Service name for logging (lowercase, hyphens allowed)",
    )
    title: str = Field(
        default="Reminder Service API",
        min_length=1,
        max_length=200,
        description="API title displayed in documentation",
    )
    description: str = Field(
        default="Reminder scheduling and Web Push delivery",
        description="API description (supports Markdown)",
    )
    version: str = Field(
        default="0.1.0",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$",
        description="API version (semver format)",
    )
    environment: Environment = Field(
        default="development", description="Environment: development|staging|production|test",
    )
    api_prefix: str = Field(
        default="/api/v1",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="Base URL prefix for API routes",
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    disable_docs: bool = Field(default=False, description="Disable all API documentation")
    host: str = Field(default="0.0.0.0", description="Bind host for the uvicorn server")  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port for the uvicorn server")

    # Reminder-specific surfaces
    app_origin: str = Field(
        default="http://localhost:5173",
        description="Origin of the web client; notification clicks focus windows on this origin",
    )
    cron_token: SecretStr | None = Field(
        default=None,
        description=(
            "Shared secret expected in the X-Cron-Token header of the scheduler trigger. "
            "When unset the trigger endpoint is unauthenticated."
        ),
    )
    user_header: str = Field(
        default="X-User-Id",
        min_length=1,
        description="Header carrying the authenticated owner identity from the upstream gateway",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def docs_url(self) -> str | None:
        return None if self.disable_docs else "/docs"

    @property
    def openapi_url(self) -> str | None:
        return None if self.disable_docs else "/openapi.json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
