"""HTTP client for the reminder API.

Used on the device side by the poller and the push subscription manager.
Network failures on idempotent calls are retried with backoff; HTTP error
responses raise ``httpx.HTTPStatusError`` unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from reminder_service.core.settings import get_app_settings, get_client_settings
from reminder_service.features.push.schemas import (
    SchedulerRunResponse,
    SubscriptionResponse,
)
from reminder_service.features.reminders.schemas import MarkSentResponse, ReminderResponse
from reminder_service.infra.logging import get_lazy_logger
from reminder_service.utils.retry import retry

if TYPE_CHECKING:
    from datetime import datetime
    from types import TracebackType

    from reminder_service.features.reminders.recurrence import Recurrence

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class ReminderApiClient:
    """Owner-scoped client for the reminder and push endpoints.

    Example:
        async with ReminderApiClient("user-42") as api:
            due = await api.list_due(lookback_seconds=3600, lookahead_seconds=300)
    """

    def __init__(
        self,
        owner: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        user_header: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_client_settings()
        self.owner = owner
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.request_timeout,
            headers={user_header or get_app_settings().user_header: owner},
            transport=transport,
        )

    async def __aenter__(self) -> ReminderApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, path, **kwargs)
        lazy_logger.debug(lambda: f"client.{method} {path} -> {response.status_code}")
        response.raise_for_status()
        return response

    @retry(max_attempts=3, initial_delay=0.5, max_delay=5.0, exceptions=(httpx.TransportError,))
    async def _send_idempotent(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return await self._send(method, path, **kwargs)

    async def list_due(self, *, lookback_seconds: int = 3600, lookahead_seconds: int = 300) -> list[ReminderResponse]:
        response = await self._send_idempotent(
            "GET",
            "/reminders/due",
            params={"lookback_seconds": lookback_seconds, "lookahead_seconds": lookahead_seconds},
        )
        return [ReminderResponse.model_validate(item) for item in response.json()]

    async def mark_sent(self, reminder_id: Any) -> MarkSentResponse:
        response = await self._send_idempotent("POST", f"/reminders/{reminder_id}/sent")
        return MarkSentResponse.model_validate(response.json())

    async def create_reminder(
        self,
        target_item: str,
        fire_time: datetime,
        recurrence: Recurrence | None = None,
        *,
        message: str | None = None,
        timezone: str = "UTC",
    ) -> ReminderResponse:
        body: dict[str, Any] = {
            "target_item": target_item,
            "fire_time": fire_time.isoformat(),
            "message": message,
            "timezone": timezone,
        }
        if recurrence is not None:
            body["recurrence"] = {"unit": recurrence.unit.value, "interval": recurrence.interval}
        response = await self._send("POST", "/reminders", json=body)
        return ReminderResponse.model_validate(response.json())

    async def reschedule(
        self,
        reminder_id: Any,
        fire_time: datetime,
        recurrence: Recurrence | None = None,
        *,
        message: str | None = None,
    ) -> ReminderResponse:
        body: dict[str, Any] = {"fire_time": fire_time.isoformat(), "message": message}
        if recurrence is not None:
            body["recurrence"] = {"unit": recurrence.unit.value, "interval": recurrence.interval}
        response = await self._send_idempotent("PUT", f"/reminders/{reminder_id}", json=body)
        return ReminderResponse.model_validate(response.json())

    async def find_by_item(self, target_item: str) -> ReminderResponse | None:
        try:
            response = await self._send_idempotent("GET", f"/reminders/by-item/{target_item}")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        return ReminderResponse.model_validate(response.json())

    async def advance(self, reminder_id: Any) -> ReminderResponse:
        response = await self._send("POST", f"/reminders/{reminder_id}/next")
        return ReminderResponse.model_validate(response.json())

    async def delete_reminder(self, reminder_id: Any) -> None:
        await self._send_idempotent("DELETE", f"/reminders/{reminder_id}")

    async def get_public_key(self) -> str:
        response = await self._send_idempotent("GET", "/push/public-key")
        return response.json()["public_key"]

    async def save_subscription(
        self,
        endpoint: str,
        p256dh: str,
        auth: str,
        *,
        user_agent: str | None = None,
    ) -> SubscriptionResponse:
        response = await self._send_idempotent(
            "POST",
            "/push/subscriptions",
            json={"endpoint": endpoint, "keys": {"p256dh": p256dh, "auth": auth}, "user_agent": user_agent},
        )
        return SubscriptionResponse.model_validate(response.json())

    async def delete_subscription(self, endpoint: str) -> bool:
        """Remove the server record; False if it was already gone."""
        try:
            await self._send_idempotent("DELETE", "/push/subscriptions", params={"endpoint": endpoint})
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                return False
            raise
        return True

    async def check_reminders(self, cron_token: str | None = None) -> SchedulerRunResponse:
        headers = {"X-Cron-Token": cron_token} if cron_token else None
        response = await self._send("POST", "/push/check-reminders", headers=headers)
        return SchedulerRunResponse.model_validate(response.json())


__all__ = ["ReminderApiClient"]
