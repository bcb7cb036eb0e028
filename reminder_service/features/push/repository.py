"""Repository for push subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from reminder_service.core.database import BaseRepository
from reminder_service.features.push.models import PushSubscription

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class PushSubscriptionRepository(BaseRepository[PushSubscription]):
    """Repository for PushSubscription model.

    Feature-specific methods:
        - find(session, owner, endpoint) -> PushSubscription | None
        - upsert(session, ...) -> PushSubscription
        - list_for_owner(session, owner) -> Sequence[PushSubscription]
        - list_for_owners(session, owners) -> Sequence[PushSubscription]
        - delete_by_endpoint(session, owner, endpoint) -> bool
        - delete_by_id(session, id) -> bool
    """

    def __init__(self) -> None:
        super().__init__(PushSubscription)

    async def find(self, session: AsyncSession, owner: str, endpoint: str) -> PushSubscription | None:
        stmt = select(PushSubscription).where(
            PushSubscription.owner == owner,
            PushSubscription.endpoint == endpoint,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def upsert(
        self,
        session: AsyncSession,
        *,
        owner: str,
        endpoint: str,
        encryption_key: str,
        auth_secret: str,
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Insert or refresh the subscription keyed by (owner, endpoint).

        Browsers may rotate keys for an unchanged endpoint, so the keys of
        an existing row are overwritten.
        """
        existing = await self.find(session, owner, endpoint)
        if existing is None:
            return await self.create(
                session,
                PushSubscription(
                    owner=owner,
                    endpoint=endpoint,
                    encryption_key=encryption_key,
                    auth_secret=auth_secret,
                    user_agent=user_agent,
                ),
            )

        existing.encryption_key = encryption_key
        existing.auth_secret = auth_secret
        if user_agent is not None:
            existing.user_agent = user_agent
        await session.flush()
        self._lazy.debug(lambda: f"db.upsert: PushSubscription({existing.id}) refreshed")
        return existing

    async def list_for_owner(self, session: AsyncSession, owner: str) -> Sequence[PushSubscription]:
        stmt = (
            select(PushSubscription)
            .where(PushSubscription.owner == owner)
            .order_by(PushSubscription.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_for_owners(
        self,
        session: AsyncSession,
        owners: Collection[str],
    ) -> Sequence[PushSubscription]:
        if not owners:
            return []
        stmt = (
            select(PushSubscription)
            .where(PushSubscription.owner.in_(list(owners)))
            .order_by(PushSubscription.owner, PushSubscription.created_at.asc())
        )
        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_for_owners({len(owners)} owners) -> {len(items)} subscriptions")
        return items

    async def delete_by_endpoint(self, session: AsyncSession, owner: str, endpoint: str) -> bool:
        stmt = delete(PushSubscription).where(
            PushSubscription.owner == owner,
            PushSubscription.endpoint == endpoint,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_id(self, session: AsyncSession, subscription_id: UUID) -> bool:
        stmt = delete(PushSubscription).where(PushSubscription.id == subscription_id)
        result = await session.execute(stmt)
        return result.rowcount > 0


_push_subscription_repository: PushSubscriptionRepository | None = None


def get_push_subscription_repository() -> PushSubscriptionRepository:
    """Get the shared PushSubscriptionRepository instance."""
    global _push_subscription_repository
    if _push_subscription_repository is None:
        _push_subscription_repository = PushSubscriptionRepository()
    return _push_subscription_repository


__all__ = ["PushSubscriptionRepository", "get_push_subscription_repository"]
