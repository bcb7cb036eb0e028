"""Health check API endpoints.

- ``/health/live``: the process is up.
- ``/health``: database reachability and push configuration.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from reminder_service.features.health.schemas import HealthResponse, LivenessResponse

# FastAPI must see the Annotated[..., Depends(...)] metadata at runtime
from reminder_service.features.health.service import HealthServiceDep  # noqa: TC001
from reminder_service.utils.timeutils import utcnow

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness() -> LivenessResponse:
    return LivenessResponse(timestamp=utcnow())


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns 503 when the database is unreachable.",
)
async def health_check(service: HealthServiceDep, response: Response) -> HealthResponse:
    result = HealthResponse(**await service.check_health())
    if result.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
