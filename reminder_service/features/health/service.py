"""Dependency checks backing the health endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from reminder_service.core.dependencies.database import get_db_session
from reminder_service.core.services.base import BaseService
from reminder_service.core.settings import get_app_settings, get_push_settings, get_scheduler_settings
from reminder_service.utils.timeutils import utcnow


class HealthService(BaseService):
    """Database reachability is critical; push configuration is informational."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__()
        self.session = session

    async def check_database(self) -> bool:
        try:
            await self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self.logger.warning("Database health check failed", extra={"error": str(exc)})
            return False
        return True

    async def check_health(self) -> dict[str, Any]:
        app = get_app_settings()
        checks = {
            "database": await self.check_database(),
            "push_configured": get_push_settings().is_configured,
            "scheduler_enabled": get_scheduler_settings().enabled,
        }
        if not checks["database"]:
            status = "unhealthy"
        elif not checks["push_configured"]:
            status = "degraded"
        else:
            status = "healthy"
        return {
            "status": status,
            "service": app.service_name,
            "version": app.version,
            "timestamp": utcnow(),
            "checks": checks,
        }


async def get_health_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> HealthService:
    return HealthService(session)


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]
