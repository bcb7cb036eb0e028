"""Device-side Web Push registration.

``subscribe`` is idempotent: an existing platform subscription is reused
and saved again, which also refreshes rotated keys server-side.
``unsubscribe`` removes the server record before tearing down the local
subscription, so the server never keeps pushing to an endpoint the device
has dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from reminder_service.features.notifications.exceptions import PermissionDenied, UnsupportedEnvironment
from reminder_service.features.notifications.platform import NotificationPermission

if TYPE_CHECKING:
    from reminder_service.features.notifications.platform import (
        Environment,
        PlatformSubscription,
        PushManager,
    )

logger = logging.getLogger(__name__)


class SubscriptionBackend(Protocol):
    """Server side of the registration (implemented by ``ReminderApiClient``)."""

    async def get_public_key(self) -> str: ...

    async def save_subscription(
        self,
        endpoint: str,
        p256dh: str,
        auth: str,
        *,
        user_agent: str | None = None,
    ) -> Any: ...

    async def delete_subscription(self, endpoint: str) -> bool: ...


class PushSubscriptionManager:
    def __init__(
        self,
        env: Environment,
        push_manager: PushManager | None,
        backend: SubscriptionBackend,
        *,
        public_key: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._env = env
        self._push_manager = push_manager
        self._backend = backend
        self._public_key = public_key
        self._user_agent = user_agent

    def is_supported(self) -> bool:
        return self._env.push_supported and self._push_manager is not None

    async def current(self) -> PlatformSubscription | None:
        if self._push_manager is None:
            return None
        return await self._push_manager.get_subscription()

    async def is_subscribed(self) -> bool:
        return await self.current() is not None

    async def subscribe(self) -> PlatformSubscription:
        """Ensure this device is subscribed and registered with the server.

        Raises:
            UnsupportedEnvironment: If the runtime lacks push support.
            PermissionDenied: If notification permission is not granted.
        """
        push_manager = self._push_manager
        if push_manager is None or not self._env.push_supported:
            raise UnsupportedEnvironment(
                "Web Push",
                needs_install=self._env.install_required and not self._env.standalone,
            )
        permission = self._env.permission or NotificationPermission.DEFAULT
        if permission is not NotificationPermission.GRANTED:
            raise PermissionDenied(NotificationPermission(permission).value)

        subscription = await push_manager.get_subscription()
        if subscription is None:
            key = self._public_key or await self._backend.get_public_key()
            subscription = await push_manager.subscribe(key)
            logger.info("Created push subscription")
        else:
            logger.debug("Reusing existing push subscription")

        await self._backend.save_subscription(
            subscription.endpoint,
            subscription.keys.p256dh,
            subscription.keys.auth,
            user_agent=self._user_agent,
        )
        return subscription

    async def unsubscribe(self) -> bool:
        """Remove the subscription server-side, then locally.

        Returns:
            True if a local subscription existed and was removed.
        """
        subscription = await self.current()
        if subscription is None:
            return False
        await self._backend.delete_subscription(subscription.endpoint)
        removed = await subscription.unsubscribe()
        logger.info("Push subscription removed", extra={"local_removed": removed})
        return removed
