"""Interfaces to the device runtime.

The notification components talk to the platform only through these
protocols: a key/value store that survives restarts, the system
notification display, window clients, and the push manager. Browser
bindings implement them in the embedding shell; the storage backends
below cover in-process and file-backed use.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class NotificationPermission(str, Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class NotificationOptions:
    """Options passed to the system notification display."""

    body: str
    tag: str = "reminder"
    icon: str = "/icon-192.png"
    badge: str = "/icon-192.png"
    renotify: bool = True
    require_interaction: bool = True
    vibrate: tuple[int, ...] = (200, 100, 200)
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class KeyValueStorage(Protocol):
    """Persistent string storage local to the device."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class NotificationDisplay(Protocol):
    async def show(self, title: str, options: NotificationOptions) -> None: ...


class DisplayedNotification(Protocol):
    data: dict[str, Any]

    def close(self) -> None: ...


class WindowClient(Protocol):
    url: str

    async def focus(self) -> None: ...


class WindowClients(Protocol):
    async def match_all(self, *, include_uncontrolled: bool = True) -> list[WindowClient]: ...

    async def open_window(self, url: str) -> WindowClient | None: ...


@dataclass(frozen=True, slots=True)
class SubscriptionKeys:
    p256dh: str
    auth: str


class PlatformSubscription(Protocol):
    endpoint: str
    keys: SubscriptionKeys

    async def unsubscribe(self) -> bool: ...


class PushManager(Protocol):
    async def get_subscription(self) -> PlatformSubscription | None: ...

    async def subscribe(self, application_server_key: str) -> PlatformSubscription: ...


class InAppNotifier(Protocol):
    """In-app cue used when system notifications are unavailable."""

    async def notify(self, title: str, body: str, data: dict[str, Any]) -> None: ...


@dataclass(slots=True)
class Environment:
    """Capabilities reported by the runtime.

    Attributes:
        has_notifications: The notification API exists.
        has_service_worker: A service worker can be registered.
        has_push_manager: The push API exists.
        standalone: Running as an installed app.
        install_required: The platform only exposes notifications to
            installed apps (e.g. iOS Safari outside the home screen).
        permission: Current permission, ``None`` when it cannot be queried.
    """

    has_notifications: bool = True
    has_service_worker: bool = True
    has_push_manager: bool = True
    standalone: bool = False
    install_required: bool = False
    permission: NotificationPermission | None = NotificationPermission.DEFAULT

    @property
    def push_supported(self) -> bool:
        return self.has_notifications and self.has_service_worker and self.has_push_manager


class MemoryStorage:
    """Dict-backed storage; lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Storage persisted as one JSON object on disk.

    Writes go to a temporary file that replaces the target, so a crash
    mid-write leaves the previous contents intact. A corrupt file is
    treated as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable client storage file", extra={"path": str(self.path)})
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)
