"""Caller identity dependencies.

Authentication is performed upstream (gateway or identity provider); this
service trusts the owner identity forwarded in a header, whose name is
configured by ``APP_USER_HEADER`` (default ``X-User-Id``).

The scheduler trigger is machine-to-machine and is guarded by a shared
cron token instead of a user identity.

Usage:
    from reminder_service.core.dependencies.auth import CurrentOwnerDep

    @router.get("/reminders/due")
    async def list_due(owner: CurrentOwnerDep): ...
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, Request

from reminder_service.core.exceptions import UnauthorizedException
from reminder_service.core.settings import get_app_settings
from reminder_service.infra.logging import set_log_context


async def get_current_owner(request: Request) -> str:
    """Resolve the owner identity of the current request.

    Raises:
        UnauthorizedException: If the identity header is missing or blank.
    """
    header = get_app_settings().user_header
    owner = (request.headers.get(header) or "").strip()
    if not owner:
        raise UnauthorizedException(
            detail=f"Missing {header} header",
            type="missing-identity",
        )
    set_log_context(owner=owner)
    return owner


async def verify_cron_token(request: Request) -> None:
    """Check the shared secret on the scheduler trigger.

    Passes unconditionally when ``APP_CRON_TOKEN`` is unset.

    Raises:
        UnauthorizedException: If a token is configured and does not match.
    """
    expected = get_app_settings().cron_token
    if expected is None:
        return

    supplied = request.headers.get("X-Cron-Token", "")
    if not hmac.compare_digest(supplied.encode(), expected.get_secret_value().encode()):
        raise UnauthorizedException(detail="Invalid cron token", type="invalid-cron-token")


CurrentOwnerDep = Annotated[str, Depends(get_current_owner)]
CronTokenDep = Annotated[None, Depends(verify_cron_token)]
