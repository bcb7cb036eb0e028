"""Tests for the persisted notification switch."""

from __future__ import annotations

import pytest

from reminder_service.features.notifications.platform import MemoryStorage
from reminder_service.features.notifications.preferences import ENABLED_KEY, NotificationPreferences


@pytest.mark.parametrize(
    ("stored", "expected"),
    [(None, False), ("true", True), ("1", True), ("granted", True), ("false", False), ("garbage", False)],
)
def test_load_interprets_stored_value(stored: str | None, expected: bool) -> None:
    storage = MemoryStorage({ENABLED_KEY: stored} if stored is not None else None)

    assert NotificationPreferences(storage).load() is expected


def test_flag_survives_a_new_instance() -> None:
    storage = MemoryStorage()
    NotificationPreferences(storage).enable()

    assert NotificationPreferences(storage).enabled is True


def test_listeners_fire_only_on_change() -> None:
    preferences = NotificationPreferences(MemoryStorage())
    seen: list[bool] = []
    preferences.add_listener(seen.append)

    preferences.enable()
    preferences.enable()
    preferences.disable()

    assert seen == [True, False]


def test_remover_detaches_listener() -> None:
    preferences = NotificationPreferences(MemoryStorage())
    seen: list[bool] = []
    remove = preferences.add_listener(seen.append)

    remove()
    remove()
    preferences.enable()

    assert seen == []


def test_toggle_flips_flag() -> None:
    preferences = NotificationPreferences(MemoryStorage())

    assert preferences.toggle() is True
    assert preferences.toggle() is False
