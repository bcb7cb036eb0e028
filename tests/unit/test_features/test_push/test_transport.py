"""Tests for the pywebpush-backed transport."""

from __future__ import annotations

import json
import time
from typing import Any
from uuid import uuid4

import pytest
import requests
from pywebpush import WebPushException

from reminder_service.core.settings.push import PushSettings
from reminder_service.features.push.exceptions import GoneError, TransientTransportError, VapidConfigurationError
from reminder_service.features.push.payload import NotificationPayload
from reminder_service.features.push.transport import SubscriptionTarget, WebPushTransport
from reminder_service.features.push.vapid import VapidKeyPair, load_vapid_key

TARGET = SubscriptionTarget(
    id=uuid4(),
    endpoint="https://fcm.googleapis.com/fcm/send/abc",
    encryption_key="BKEY",
    auth_secret="auth",
)
PAYLOAD = NotificationPayload("\N{BELL} Reminder", "You have a reminder", {"reminderId": "r-1"})


def _response(status: int) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    return response


class RecordingSender:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> requests.Response:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return _response(201)


def _transport(vapid_keys: VapidKeyPair, sender: RecordingSender) -> WebPushTransport:
    return WebPushTransport(
        load_vapid_key(vapid_keys.private_key),
        "mailto:ops@example.com",
        token_ttl_seconds=3600,
        message_ttl_seconds=600,
        timeout=2.0,
        sender=sender,
    )


@pytest.mark.asyncio
async def test_send_passes_encrypted_request_parameters(vapid_keys: VapidKeyPair) -> None:
    sender = RecordingSender()

    await _transport(vapid_keys, sender).send(TARGET, PAYLOAD)

    call = sender.calls[0]
    assert call["subscription_info"] == {
        "endpoint": TARGET.endpoint,
        "keys": {"p256dh": "BKEY", "auth": "auth"},
    }
    assert json.loads(call["data"])["data"]["reminderId"] == "r-1"
    assert call["vapid_claims"]["aud"] == "https://fcm.googleapis.com"
    assert call["vapid_claims"]["sub"] == "mailto:ops@example.com"
    assert call["ttl"] == 600
    assert call["headers"] == {"Urgency": "high"}


@pytest.mark.asyncio
async def test_each_send_gets_fresh_claims(vapid_keys: VapidKeyPair) -> None:
    sender = RecordingSender()
    transport = _transport(vapid_keys, sender)

    await transport.send(TARGET, PAYLOAD)
    await transport.send(TARGET, PAYLOAD)

    assert sender.calls[0]["vapid_claims"] is not sender.calls[1]["vapid_claims"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 410])
async def test_gone_statuses_raise_gone(vapid_keys: VapidKeyPair, status: int) -> None:
    sender = RecordingSender(WebPushException("gone", response=_response(status)))

    with pytest.raises(GoneError) as exc_info:
        await _transport(vapid_keys, sender).send(TARGET, PAYLOAD)

    assert exc_info.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 413, 429, 500, 503])
async def test_other_statuses_are_transient(vapid_keys: VapidKeyPair, status: int) -> None:
    sender = RecordingSender(WebPushException("nope", response=_response(status)))

    with pytest.raises(TransientTransportError) as exc_info:
        await _transport(vapid_keys, sender).send(TARGET, PAYLOAD)

    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_connection_errors_are_transient(vapid_keys: VapidKeyPair) -> None:
    sender = RecordingSender(requests.ConnectionError("refused"))

    with pytest.raises(TransientTransportError) as exc_info:
        await _transport(vapid_keys, sender).send(TARGET, PAYLOAD)

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_read_timeout_is_transient_and_worker_has_finished(vapid_keys: VapidKeyPair) -> None:
    finished: list[bool] = []

    def slow_sender(**kwargs: Any) -> requests.Response:
        try:
            time.sleep(1.1)
            raise requests.ReadTimeout(f"read timed out after {kwargs['timeout']}s")
        finally:
            finished.append(True)

    transport = WebPushTransport(
        load_vapid_key(vapid_keys.private_key),
        "mailto:ops@example.com",
        token_ttl_seconds=3600,
        message_ttl_seconds=600,
        timeout=0.01,
        sender=slow_sender,
    )

    with pytest.raises(TransientTransportError, match="0.01s") as exc_info:
        await transport.send(TARGET, PAYLOAD)

    assert isinstance(exc_info.value.__cause__, requests.ReadTimeout)
    assert finished == [True]


def test_from_settings_requires_keys() -> None:
    with pytest.raises(VapidConfigurationError):
        WebPushTransport.from_settings(PushSettings())


def test_from_settings_builds_transport(vapid_keys: VapidKeyPair) -> None:
    settings = PushSettings(
        vapid_public_key=vapid_keys.public_key,
        vapid_private_key=vapid_keys.private_key,  # type: ignore[arg-type]
    )

    assert isinstance(WebPushTransport.from_settings(settings), WebPushTransport)
