"""Push delivery errors.

Transport failures are split by what the caller should do next: a
``GoneError`` means the subscription is permanently invalid and must be
deleted; a ``TransientTransportError`` means the push service could not
take the message right now and the subscription is kept.
"""

from __future__ import annotations

from reminder_service.core.exceptions import ServiceUnavailableException


class TransportError(Exception):
    """Base class for failures delivering one message to one subscription."""

    def __init__(self, endpoint: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.reason = reason
        detail = f"status={status_code}" if status_code is not None else "no response"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(f"Push to {endpoint} failed ({detail})")


class GoneError(TransportError):
    """The push service reported the subscription as expired (404/410)."""


class TransientTransportError(TransportError):
    """Timeouts, connection failures and any non-gone error response."""


class VapidConfigurationError(ServiceUnavailableException):
    """VAPID keys are missing or unusable, so nothing can be sent."""

    def __init__(self, detail: str = "Push delivery is not configured") -> None:
        super().__init__(detail=detail, type="push-not-configured")
