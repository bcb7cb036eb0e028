"""API router for the push feature."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from reminder_service.core.dependencies import CronTokenDep, CurrentOwnerDep, SessionDep
from reminder_service.core.exceptions import AppException, NotFoundException, StorageError
from reminder_service.core.settings import get_push_settings
from reminder_service.features.push.exceptions import VapidConfigurationError
from reminder_service.features.push.scheduler import PushDeliveryScheduler
from reminder_service.features.push.schemas import (
    PublicKeyResponse,
    SchedulerRunResponse,
    SubscriptionCreate,
    SubscriptionResponse,
)
from reminder_service.features.push.service import PushSubscriptionService

router = APIRouter(prefix="/push", tags=["push"])

logger = logging.getLogger(__name__)


def get_delivery_scheduler() -> PushDeliveryScheduler:
    """Build the delivery sweep; overridden in tests.

    Raises:
        VapidConfigurationError: If push is disabled or keys are missing.
    """
    return PushDeliveryScheduler()


@router.get(
    "/public-key",
    response_model=PublicKeyResponse,
    summary="Get the VAPID application server key",
)
async def get_public_key() -> PublicKeyResponse:
    settings = get_push_settings()
    if not settings.is_configured:
        raise VapidConfigurationError()
    return PublicKeyResponse(public_key=settings.vapid_public_key)


@router.post(
    "/subscriptions",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a push subscription",
    description="Upserts on (owner, endpoint); re-registering refreshes the keys.",
)
async def create_subscription(
    payload: SubscriptionCreate,
    request: Request,
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> SubscriptionResponse:
    subscription = await PushSubscriptionService(session).subscribe(
        owner,
        payload.endpoint,
        payload.keys.p256dh,
        payload.keys.auth,
        user_agent=payload.user_agent or request.headers.get("user-agent"),
    )
    return SubscriptionResponse.model_validate(subscription)


@router.delete(
    "/subscriptions",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a push subscription",
)
async def delete_subscription(
    endpoint: Annotated[str, Query(min_length=1, max_length=2048)],
    owner: CurrentOwnerDep,
    session: SessionDep,
) -> None:
    removed = await PushSubscriptionService(session).unsubscribe(owner, endpoint)
    if not removed:
        raise NotFoundException(detail="Push subscription not found", type="subscription-not-found")


@router.post(
    "/check-reminders",
    response_model=SchedulerRunResponse,
    summary="Run one delivery sweep",
    description="Invoked by an external cron trigger; guarded by the X-Cron-Token header when configured.",
)
async def check_reminders(
    _: CronTokenDep,
    scheduler: Annotated[PushDeliveryScheduler, Depends(get_delivery_scheduler)],
) -> SchedulerRunResponse:
    try:
        summary = await scheduler.run_once()
    except StorageError as exc:
        raise AppException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Due reminders could not be loaded",
            type="scheduler-failed",
            extra={"operation": exc.operation},
        ) from exc
    return SchedulerRunResponse(**summary.to_dict())
