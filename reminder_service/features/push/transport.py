"""Web Push transport built on pywebpush.

pywebpush performs payload encryption (RFC 8291, aes128gcm), VAPID signing
and the HTTP POST synchronously through requests, so each send runs in a
worker thread. Callers bound parallelism themselves.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import requests
from pywebpush import WebPushException, webpush

from reminder_service.core.settings import get_push_settings
from reminder_service.features.push.exceptions import (
    GoneError,
    TransientTransportError,
    VapidConfigurationError,
)
from reminder_service.features.push.vapid import build_vapid_claims, load_vapid_key
from reminder_service.infra.metrics.tracking import track_push_result

if TYPE_CHECKING:
    from collections.abc import Callable

    from py_vapid import Vapid01

    from reminder_service.core.settings.push import PushSettings
    from reminder_service.features.push.models import PushSubscription
    from reminder_service.features.push.payload import NotificationPayload

logger = logging.getLogger(__name__)

GONE_STATUS_CODES = frozenset({404, 410})


@dataclass(frozen=True, slots=True)
class SubscriptionTarget:
    """Detached copy of a subscription, safe to hand to worker threads."""

    id: Any
    endpoint: str
    encryption_key: str
    auth_secret: str

    @classmethod
    def from_model(cls, subscription: PushSubscription) -> SubscriptionTarget:
        return cls(
            id=subscription.id,
            endpoint=subscription.endpoint,
            encryption_key=subscription.encryption_key,
            auth_secret=subscription.auth_secret,
        )

    def to_subscription_info(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.encryption_key, "auth": self.auth_secret},
        }


class PushTransport(Protocol):
    """Delivers one payload to one subscription or raises a TransportError."""

    async def send(self, target: SubscriptionTarget, payload: NotificationPayload) -> None: ...


class WebPushTransport:
    """Send encrypted notifications with VAPID authentication.

    Raises from ``send``:
        GoneError: push service answered 404 or 410.
        TransientTransportError: any other error status, timeout or
            connection failure.

    The blocking request runs in a worker thread and is bounded by the
    ``requests`` connect/read ``timeout`` handed to pywebpush, so the
    thread has finished by the time ``send`` returns or raises.
    """

    def __init__(
        self,
        vapid: Vapid01,
        subject: str,
        *,
        token_ttl_seconds: int,
        message_ttl_seconds: int,
        timeout: float,
        urgency: str = "high",
        sender: Callable[..., Any] = webpush,
    ) -> None:
        self._vapid = vapid
        self._subject = subject
        self._token_ttl = token_ttl_seconds
        self._message_ttl = message_ttl_seconds
        self._timeout = timeout
        self._urgency = urgency
        self._sender = sender

    @classmethod
    def from_settings(cls, settings: PushSettings | None = None) -> WebPushTransport:
        """Build a transport from ``PUSH_*`` settings.

        Raises:
            VapidConfigurationError: If push is disabled or keys are missing.
        """
        settings = settings or get_push_settings()
        if not settings.is_configured:
            raise VapidConfigurationError()
        vapid = load_vapid_key(
            settings.vapid_private_key.get_secret_value(),
            expected_public_key=settings.vapid_public_key,
        )
        return cls(
            vapid,
            settings.vapid_subject,
            token_ttl_seconds=settings.token_ttl_seconds,
            message_ttl_seconds=settings.message_ttl_seconds,
            timeout=settings.request_timeout,
            urgency=settings.urgency,
        )

    def _post(self, target: SubscriptionTarget, data: str) -> Any:
        return self._sender(
            subscription_info=target.to_subscription_info(),
            data=data,
            vapid_private_key=self._vapid,
            vapid_claims=build_vapid_claims(target.endpoint, self._subject, ttl_seconds=self._token_ttl),
            ttl=self._message_ttl,
            timeout=self._timeout,
            headers={"Urgency": self._urgency},
        )

    async def send(self, target: SubscriptionTarget, payload: NotificationPayload) -> None:
        start = time.perf_counter()
        try:
            await asyncio.to_thread(self._post, target, payload.to_json())
        except WebPushException as exc:
            # requests.Response is falsy for error statuses, compare against None
            status = exc.response.status_code if exc.response is not None else None
            duration = time.perf_counter() - start
            if status in GONE_STATUS_CODES:
                track_push_result("gone", duration)
                logger.info(
                    "Push subscription is gone",
                    extra={"subscription_id": str(target.id), "status_code": status},
                )
                raise GoneError(target.endpoint, status, "subscription expired") from exc
            track_push_result("transient", duration)
            logger.warning(
                "Push delivery failed",
                extra={"subscription_id": str(target.id), "status_code": status, "error": str(exc)},
            )
            raise TransientTransportError(target.endpoint, status, str(exc)) from exc
        except (requests.RequestException, ValueError) as exc:
            track_push_result("transient", time.perf_counter() - start)
            logger.warning(
                "Push delivery failed",
                extra={"subscription_id": str(target.id), "error": repr(exc)},
            )
            raise TransientTransportError(target.endpoint, None, repr(exc)) from exc

        track_push_result("delivered", time.perf_counter() - start)


__all__ = [
    "GONE_STATUS_CODES",
    "PushTransport",
    "SubscriptionTarget",
    "WebPushTransport",
]
