"""HTTP tests for the reminders router."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.conftest import OTHER_OWNER

BASE = "/api/v1/reminders"


def _iso(value: datetime) -> str:
    return value.isoformat()


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


async def _create(client: AsyncClient, headers: dict[str, str], **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "target_item": "item-1",
        "fire_time": _iso(datetime.now(UTC) - timedelta(seconds=30)),
        "message": "Call the dentist",
    }
    body.update(overrides)
    response = await client.post(BASE, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_get_reminder(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers, recurrence={"unit": "weekly", "interval": 2})

    response = await client.get(f"{BASE}/{created['id']}", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["owner"] == "user-1"
    assert data["sent"] is False
    assert data["sent_at"] is None
    assert data["recurrence"] == {"unit": "weekly", "interval": 2}
    assert data["timezone"] == "UTC"


@pytest.mark.asyncio
async def test_naive_fire_time_is_read_as_utc(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers, fire_time="2030-01-02T03:04:05")

    assert _parse(created["fire_time"]) == datetime(2030, 1, 2, 3, 4, 5, tzinfo=UTC)


@pytest.mark.asyncio
async def test_missing_identity_is_unauthorized(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/due")

    assert response.status_code == 401
    assert response.json()["type"] == "missing-identity"


@pytest.mark.asyncio
async def test_other_owner_sees_not_found(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers)

    response = await client.get(f"{BASE}/{created['id']}", headers={"X-User-Id": OTHER_OWNER})

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "reminder-not-found"
    assert body["status"] == 404


@pytest.mark.asyncio
async def test_invalid_timezone_is_rejected(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    response = await client.post(
        BASE,
        json={"target_item": "item-1", "fire_time": _iso(datetime.now(UTC)), "timezone": "Mars/Olympus"},
        headers=owner_headers,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "validation-error"
    assert any(error["field"].endswith("timezone") for error in body["errors"])


@pytest.mark.asyncio
async def test_due_then_mark_sent(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers)
    await _create(client, owner_headers, target_item="later", fire_time=_iso(datetime.now(UTC) + timedelta(days=1)))

    due = await client.get(f"{BASE}/due", headers=owner_headers)
    assert [r["id"] for r in due.json()] == [created["id"]]

    first = await client.post(f"{BASE}/{created['id']}/sent", headers=owner_headers)
    second = await client.post(f"{BASE}/{created['id']}/sent", headers=owner_headers)

    assert first.status_code == 200
    assert first.json()["changed"] is True
    assert second.json()["changed"] is False
    assert second.json()["sent_at"] == first.json()["sent_at"]
    assert (await client.get(f"{BASE}/due", headers=owner_headers)).json() == []


@pytest.mark.asyncio
async def test_due_window_parameters(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    await _create(client, owner_headers, fire_time=_iso(datetime.now(UTC) - timedelta(minutes=10)))

    narrow = await client.get(f"{BASE}/due", params={"lookback_seconds": 60}, headers=owner_headers)
    wide = await client.get(f"{BASE}/due", params={"lookback_seconds": 3600}, headers=owner_headers)
    invalid = await client.get(f"{BASE}/due", params={"lookback_seconds": -1}, headers=owner_headers)

    assert narrow.json() == []
    assert len(wide.json()) == 1
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_mark_sent_unknown_reminder(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    response = await client.post(f"{BASE}/{uuid4()}/sent", headers=owner_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_find_by_item(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers, target_item="groceries")

    found = await client.get(f"{BASE}/by-item/groceries", headers=owner_headers)
    missing = await client.get(f"{BASE}/by-item/nothing", headers=owner_headers)

    assert found.json()["id"] == created["id"]
    assert missing.status_code == 404
    assert missing.json()["target_item"] == "nothing"


@pytest.mark.asyncio
async def test_reschedule_rearms(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers)
    await client.post(f"{BASE}/{created['id']}/sent", headers=owner_headers)
    new_time = datetime.now(UTC) + timedelta(hours=2)

    response = await client.put(
        f"{BASE}/{created['id']}",
        json={"fire_time": _iso(new_time), "message": "Moved"},
        headers=owner_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sent"] is False
    assert data["message"] == "Moved"
    assert abs(_parse(data["fire_time"]) - new_time) < timedelta(seconds=1)


@pytest.mark.asyncio
async def test_next_advances_recurring_reminder(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    base = (datetime.now(UTC) - timedelta(days=2, minutes=5)).replace(microsecond=0)
    created = await _create(client, owner_headers, fire_time=_iso(base), recurrence={"unit": "daily"})
    await client.post(f"{BASE}/{created['id']}/sent", headers=owner_headers)

    response = await client.post(f"{BASE}/{created['id']}/next", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert _parse(data["fire_time"]) == base + timedelta(days=3)
    assert data["sent"] is False


@pytest.mark.asyncio
async def test_next_on_one_shot_is_rejected(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers)

    response = await client.post(f"{BASE}/{created['id']}/next", headers=owner_headers)

    assert response.status_code == 422
    assert response.json()["type"] == "reminder-not-recurring"


@pytest.mark.asyncio
async def test_delete_reminder(client: AsyncClient, owner_headers: dict[str, str]) -> None:
    created = await _create(client, owner_headers)

    deleted = await client.delete(f"{BASE}/{created['id']}", headers=owner_headers)
    again = await client.delete(f"{BASE}/{created['id']}", headers=owner_headers)

    assert deleted.status_code == 204
    assert again.status_code == 404
