"""Foreground poller raising local alerts for due reminders.

One asyncio task checks immediately on start and then every
``interval`` seconds. Checks never overlap. Stopping (explicitly or by
disabling notifications) prevents any further tick at once; a check that
is already running finishes its current reminder and then returns without
further side effects.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any, Protocol

from reminder_service.features.notifications.dedup import occurrence_key
from reminder_service.infra.logging import get_lazy_logger
from reminder_service.utils.timeutils import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from reminder_service.features.notifications.dedup import DeliveryLedger
    from reminder_service.features.notifications.preferences import NotificationPreferences
    from reminder_service.features.notifications.presentation import DueReminder, NotificationPresenter

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class DueReminderSource(Protocol):
    """Where the poller reads due reminders and reports alerts."""

    async def list_due(self, *, lookback_seconds: int, lookahead_seconds: int) -> Sequence[DueReminder]: ...

    async def mark_sent(self, reminder_id: Any) -> Any: ...


class ReminderPoller:
    """Periodic due-reminder check for the signed-in user."""

    def __init__(
        self,
        source: DueReminderSource,
        presenter: NotificationPresenter,
        ledger: DeliveryLedger,
        preferences: NotificationPreferences,
        *,
        interval: float = 60.0,
        lookback_seconds: int = 3600,
        lookahead_seconds: int = 300,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if interval <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        self._source = source
        self._presenter = presenter
        self._ledger = ledger
        self._preferences = preferences
        self._interval = interval
        self._lookback = lookback_seconds
        self._lookahead = lookahead_seconds
        self._clock = clock

        self._task: asyncio.Task[None] | None = None
        self._stop_requested = asyncio.Event()
        self._check_lock = asyncio.Lock()
        self._wanted = False
        self._remove_listener = preferences.add_listener(self._on_preference_change)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin polling; a no-op while already running. Requires a running loop."""
        self._wanted = True
        if self.running:
            return
        self._stop_requested = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="reminder-poller")
        logger.info("Reminder poller started", extra={"interval": self._interval})

    def request_stop(self) -> None:
        """Prevent any further tick; does not wait for an in-flight check."""
        self._stop_requested.set()

    async def stop(self) -> None:
        """Stop polling and wait for an in-flight check to wind down."""
        self._wanted = False
        self.request_stop()
        task, self._task = self._task, None
        if task is not None:
            await task
            logger.info("Reminder poller stopped")

    async def close(self) -> None:
        """Stop polling and detach from the preferences."""
        await self.stop()
        self._remove_listener()

    def _on_preference_change(self, enabled: bool) -> None:
        if not enabled:
            self.request_stop()
            return
        if self._wanted and not self.running:
            with contextlib.suppress(RuntimeError):
                self.start()

    async def _run(self) -> None:
        while not self._stop_requested.is_set():
            try:
                await self.check_once()
            except Exception:
                logger.exception("Reminder check failed")
            if self._stop_requested.is_set():
                break
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_requested.wait(), timeout=self._interval)

    async def check_once(self) -> int:
        """Run one check; returns the number of reminders alerted.

        Returns 0 without doing anything when a check is already running or
        notifications are disabled.
        """
        if self._check_lock.locked():
            lazy_logger.debug(lambda: "poller: check already in flight, skipping")
            return 0

        async with self._check_lock:
            if not self._preferences.load():
                return 0
            try:
                due = await self._source.list_due(
                    lookback_seconds=self._lookback,
                    lookahead_seconds=self._lookahead,
                )
            except Exception as exc:
                logger.warning("Due reminder check failed", extra={"error": repr(exc)})
                return 0

            now = self._clock()
            alerted = 0
            for reminder in due:
                if self._stop_requested.is_set():
                    break
                if await self._alert(reminder, now):
                    alerted += 1

            lazy_logger.debug(lambda: f"poller: {len(due)} due, {alerted} alerted")
            return alerted

    async def _alert(self, reminder: DueReminder, now: datetime) -> bool:
        """Show one reminder and report it sent; False if it was not shown.

        The ledger entry is claimed up front so a concurrent push for the same
        occurrence is suppressed, and released again when nothing could be
        displayed. An undisplayed reminder is not marked sent, leaving it to
        the server sweep and the next check.
        """
        key = occurrence_key(reminder.id, reminder.fire_time)
        if not self._ledger.claim(key):
            return False

        try:
            shown = await self._presenter.show_reminder(reminder, now)
        except Exception:
            self._ledger.forget(key)
            logger.exception("Could not display reminder", extra={"reminder_id": str(reminder.id)})
            return False
        if not shown:
            self._ledger.forget(key)
            logger.info("No channel could display reminder", extra={"reminder_id": str(reminder.id)})
            return False

        try:
            await self._source.mark_sent(reminder.id)
        except Exception as exc:
            logger.warning(
                "Could not mark reminder sent",
                extra={"reminder_id": str(reminder.id), "error": repr(exc)},
            )
        return True
