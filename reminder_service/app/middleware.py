"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from reminder_service.core.settings import get_app_settings
from reminder_service.infra.logging import clear_log_context, set_log_context
from reminder_service.infra.metrics import prometheus

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate ``X-Request-ID`` and bind it to the log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_log_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_log_context()
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counts, latency and in-flight requests per route template."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        start = time.perf_counter()
        status_code = 500
        in_progress = prometheus.http_requests_in_progress.labels(method=method, endpoint="all")
        in_progress.inc()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            in_progress.dec()
            route = request.scope.get("route")
            endpoint = getattr(route, "path", None) or "unmatched"
            prometheus.http_requests_total.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
            prometheus.http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start
            )


def configure_middleware(app: FastAPI) -> None:
    """Install CORS, metrics and request-id middleware (outermost last)."""
    app_settings = get_app_settings()

    cors_origins = [app_settings.app_origin]
    logger.info("Configuring CORS", extra={"origins": cors_origins})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
