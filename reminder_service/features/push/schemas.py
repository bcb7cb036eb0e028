"""Pydantic schemas for the push feature."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reminder_service.features.push.vapid import audience_for


class SubscriptionKeys(BaseModel):
    """Keys exactly as produced by ``PushSubscription.toJSON()`` in the browser."""

    p256dh: str = Field(..., min_length=1, max_length=255)
    auth: str = Field(..., min_length=1, max_length=255)


class SubscriptionCreate(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=2048)
    keys: SubscriptionKeys
    user_agent: str | None = Field(default=None, max_length=512)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        audience_for(v)
        return v


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner: str
    endpoint: str
    user_agent: str | None = None
    created_at: datetime
    updated_at: datetime


class PublicKeyResponse(BaseModel):
    """Application server key for ``pushManager.subscribe``."""

    public_key: str


class SchedulerRunResponse(BaseModel):
    """Summary of one delivery sweep."""

    checked: int
    sent: int
    marked: int
    skipped: int
    failed: int
    gone: int
    errors: list[str] = Field(default_factory=list)


__all__ = [
    "PublicKeyResponse",
    "SchedulerRunResponse",
    "SubscriptionCreate",
    "SubscriptionKeys",
    "SubscriptionResponse",
]
