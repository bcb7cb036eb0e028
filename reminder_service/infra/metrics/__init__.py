"""Prometheus metrics registry and tracking helpers."""

from __future__ import annotations

from reminder_service.infra.metrics import prometheus, tracking
from reminder_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY", "prometheus", "tracking"]
