"""Prometheus metrics endpoint.

Endpoints:
    GET /metrics - scrape endpoint in the Prometheus text format

Metrics exposed include HTTP request counters and latency, reminder sweep
runs and durations, push outcomes (delivered/gone/transient), removed
subscriptions, reminders marked sent by source, retry counters and error
counters, plus ``app_info``.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from reminder_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
