"""API router for the reminders feature.

Every route is scoped to the caller identified by the owner header; a
reminder belonging to someone else is reported as not found.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from reminder_service.core.dependencies import CurrentOwnerDep, SessionDep
from reminder_service.core.exceptions import NotFoundException
from reminder_service.features.reminders.schemas import (
    MarkSentResponse,
    ReminderCreate,
    ReminderReschedule,
    ReminderResponse,
)
from reminder_service.features.reminders.service import ReminderStore
from reminder_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/reminders", tags=["reminders"])

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reminder",
)
async def create_reminder(
    payload: ReminderCreate,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> ReminderResponse:
    store = ReminderStore(session)
    reminder = await store.create(
        owner,
        payload.target_item,
        payload.fire_time,
        payload.recurrence.to_rule() if payload.recurrence else None,
        message=payload.message,
        timezone=payload.timezone,
    )
    return ReminderResponse.model_validate(reminder)


@router.get(
    "/due",
    response_model=list[ReminderResponse],
    summary="List due reminders",
    description="Unsent reminders of the caller whose fire time lies in [now - lookback, now + lookahead].",
)
async def list_due_reminders(
    owner: CurrentOwnerDep,
    session: SessionDep,
    lookback_seconds: Annotated[int, Query(ge=0, le=7 * 24 * 3600)] = 3600,
    lookahead_seconds: Annotated[int, Query(ge=0, le=24 * 3600)] = 300,
) -> list[ReminderResponse]:
    store = ReminderStore(session)
    reminders = await store.list_due(
        owner,
        lookback=timedelta(seconds=lookback_seconds),
        lookahead=timedelta(seconds=lookahead_seconds),
    )
    lazy_logger.debug(lambda: f"list_due_reminders(owner={owner}) -> {len(reminders)} due")
    return [ReminderResponse.model_validate(r) for r in reminders]


@router.get(
    "/by-item/{target_item}",
    response_model=ReminderResponse,
    summary="Find the reminder attached to an item",
    description="Returns the most recent unsent reminder for the item, or the most recent sent one.",
)
async def find_reminder_by_item(
    target_item: str,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> ReminderResponse:
    reminder = await ReminderStore(session).find_by_item(target_item, owner=owner)
    if reminder is None:
        raise NotFoundException(
            detail=f"No reminder for item {target_item}",
            type="reminder-not-found",
            extra={"target_item": target_item},
        )
    return ReminderResponse.model_validate(reminder)


@router.get("/{reminder_id}", response_model=ReminderResponse, summary="Get a reminder")
async def get_reminder(
    reminder_id: UUID,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> ReminderResponse:
    reminder = await ReminderStore(session).get(reminder_id, owner=owner)
    return ReminderResponse.model_validate(reminder)


@router.put(
    "/{reminder_id}",
    response_model=ReminderResponse,
    summary="Reschedule a reminder",
    description="Sets a new fire time and recurrence, and re-arms the reminder (sent=false).",
)
async def reschedule_reminder(
    reminder_id: UUID,
    payload: ReminderReschedule,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> ReminderResponse:
    reminder = await ReminderStore(session).reschedule(
        reminder_id,
        payload.fire_time,
        payload.recurrence.to_rule() if payload.recurrence else None,
        owner=owner,
        message=payload.message,
        timezone=payload.timezone,
    )
    return ReminderResponse.model_validate(reminder)


@router.post(
    "/{reminder_id}/sent",
    response_model=MarkSentResponse,
    summary="Mark a reminder as sent",
    description="Idempotent; repeated calls leave sent_at unchanged.",
)
async def mark_reminder_sent(
    reminder_id: UUID,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> MarkSentResponse:
    store = ReminderStore(session)
    changed = await store.mark_sent(reminder_id, owner=owner, source="client")
    reminder = await store.get(reminder_id, owner=owner, fresh=True)
    return MarkSentResponse(
        id=reminder.id,
        sent=reminder.sent,
        sent_at=reminder.sent_at,
        changed=changed,
    )


@router.post(
    "/{reminder_id}/next",
    response_model=ReminderResponse,
    summary="Advance a recurring reminder",
    description="Moves the reminder to its first occurrence after now and re-arms it.",
)
async def advance_reminder(
    reminder_id: UUID,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> ReminderResponse:
    reminder = await ReminderStore(session).advance_to_next_occurrence(reminder_id, owner=owner)
    return ReminderResponse.model_validate(reminder)


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a reminder",
)
async def delete_reminder(
    reminder_id: UUID,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> None:
    await ReminderStore(session).delete(reminder_id, owner=owner)
    logger.info("Reminder deleted", extra={"reminder_id": str(reminder_id), "owner": owner})
