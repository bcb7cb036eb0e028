"""Per-device record of reminder occurrences already alerted.

The ledger keeps the poller and the push handler from alerting the same
occurrence twice on one device. Entries are keyed by reminder id and fire
time (see ``occurrence_key``), so a re-armed reminder alerts again at its
next fire time. It is bounded: once it holds more than ``capacity`` entries,
only the ``trim_to`` most recent are kept. Losing an entry can at worst
cause one duplicate alert; the server-side ``sent`` flag remains the
source of truth.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from reminder_service.utils.timeutils import ensure_utc

if TYPE_CHECKING:
    from reminder_service.features.notifications.platform import KeyValueStorage

logger = logging.getLogger(__name__)

LEDGER_KEY = "reminders.notified"


def occurrence_key(reminder_id: object, fire_time: datetime | str | None = None) -> str:
    """Ledger entry for one occurrence: ``"{id}:{fire_time as UTC ISO 8601}"``.

    Without a fire time the bare id is used. A fire time string that does
    not parse is kept verbatim.
    """
    if fire_time is None or fire_time == "":
        return str(reminder_id)
    if isinstance(fire_time, str):
        try:
            fire_time = datetime.fromisoformat(fire_time)
        except ValueError:
            return f"{reminder_id}:{fire_time}"
    return f"{reminder_id}:{ensure_utc(fire_time).isoformat()}"


class DeliveryLedger:
    """Insertion-ordered, bounded set of occurrence keys.

    The list is re-read from storage on every operation so that several
    components sharing one storage observe each other's entries.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        capacity: int = 100,
        trim_to: int = 50,
        key: str = LEDGER_KEY,
    ) -> None:
        if not 0 < trim_to <= capacity:
            msg = "trim_to must be between 1 and capacity"
            raise ValueError(msg)
        self._storage = storage
        self._capacity = capacity
        self._trim_to = trim_to
        self._key = key

    def _read(self) -> list[str]:
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable notification ledger")
            return []
        return [str(item) for item in data] if isinstance(data, list) else []

    def _write(self, ids: list[str]) -> None:
        self._storage.set(self._key, json.dumps(ids))

    def __contains__(self, entry: object) -> bool:
        return str(entry) in self._read()

    def __len__(self) -> int:
        return len(self._read())

    def entries(self) -> list[str]:
        """Keys oldest first."""
        return self._read()

    def claim(self, entry: object) -> bool:
        """Record ``entry``; False if it was already recorded.

        Only the caller that receives True should display an alert.
        """
        key = str(entry)
        ids = self._read()
        if key in ids:
            return False
        ids.append(key)
        if len(ids) > self._capacity:
            ids = ids[-self._trim_to :]
        self._write(ids)
        return True

    def forget(self, entry: object) -> None:
        """Release an entry whose alert could not be shown, so a later check retries it."""
        key = str(entry)
        ids = self._read()
        if key in ids:
            ids.remove(key)
            self._write(ids)

    def clear(self) -> None:
        self._storage.remove(self._key)
