"""Push subscription registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reminder_service.core.services.base import TransactionalService
from reminder_service.features.push.repository import (
    PushSubscriptionRepository,
    get_push_subscription_repository,
)
from reminder_service.infra.metrics.tracking import track_subscription_removed

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from reminder_service.features.push.models import PushSubscription


class PushSubscriptionService(TransactionalService):
    """Save, list and remove Web Push subscriptions."""

    def __init__(
        self,
        session: AsyncSession,
        repository: PushSubscriptionRepository | None = None,
    ) -> None:
        super().__init__(session)
        self._repository = repository or get_push_subscription_repository()

    async def subscribe(
        self,
        owner: str,
        endpoint: str,
        encryption_key: str,
        auth_secret: str,
        *,
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Store a subscription, replacing the keys of an existing (owner, endpoint) pair."""
        async with self._transaction("subscribe", owner=owner):
            subscription = await self._repository.upsert(
                self.session,
                owner=owner,
                endpoint=endpoint,
                encryption_key=encryption_key,
                auth_secret=auth_secret,
                user_agent=user_agent,
            )

        self.logger.info(
            "Push subscription saved",
            extra={"subscription_id": str(subscription.id), "owner": owner, "operation": "service.subscribe"},
        )
        return subscription

    async def unsubscribe(self, owner: str, endpoint: str) -> bool:
        """Remove a subscription; returns False if it was not registered."""
        async with self._transaction("unsubscribe", owner=owner):
            removed = await self._repository.delete_by_endpoint(self.session, owner, endpoint)

        if removed:
            track_subscription_removed("unsubscribed")
            self.logger.info("Push subscription removed", extra={"owner": owner, "operation": "service.unsubscribe"})
        return removed

    async def remove_gone(self, subscription_id: UUID) -> bool:
        """Delete a subscription the push service reported as expired."""
        async with self._transaction("remove_gone", subscription_id=str(subscription_id)):
            removed = await self._repository.delete_by_id(self.session, subscription_id)

        if removed:
            track_subscription_removed("gone")
            self.logger.info(
                "Expired push subscription deleted",
                extra={"subscription_id": str(subscription_id), "operation": "service.remove_gone"},
            )
        return removed

    async def list_for_owner(self, owner: str) -> Sequence[PushSubscription]:
        async with self._read("list_for_owner", owner=owner):
            return await self._repository.list_for_owner(self.session, owner)

    async def list_for_owners(self, owners: Collection[str]) -> Sequence[PushSubscription]:
        async with self._read("list_for_owners", owners=len(owners)):
            return await self._repository.list_for_owners(self.session, owners)


__all__ = ["PushSubscriptionService"]
