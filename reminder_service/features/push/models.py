"""SQLAlchemy models for push subscriptions."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reminder_service.core.database import TimestampedBase


class PushSubscription(TimestampedBase):
    """A device's Web Push registration for one owner.

    ``encryption_key`` is the browser's P-256 ECDH public key (``p256dh``)
    and ``auth_secret`` its 16-byte authentication secret, both base64url
    as handed out by the push manager. An owner may hold many
    subscriptions, one per (owner, endpoint).
    """

    __tablename__ = "push_subscriptions"
    __table_args__ = (UniqueConstraint("owner", "endpoint", name="uq_push_subscriptions_owner_endpoint"),)

    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    endpoint: Mapped[str] = mapped_column(String(2048), nullable=False)
    encryption_key: Mapped[str] = mapped_column(String(255), nullable=False)
    auth_secret: Mapped[str] = mapped_column(String(255), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def to_subscription_info(self) -> dict[str, object]:
        """Shape expected by pywebpush's ``subscription_info``."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.encryption_key, "auth": self.auth_secret},
        }

    def __repr__(self) -> str:
        return f"<PushSubscription(id={self.id}, owner={self.owner!r})>"
