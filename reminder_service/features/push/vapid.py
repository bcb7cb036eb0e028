"""VAPID key handling and claim construction.

Keys use the formats browsers and push services expect:

- public key: uncompressed P-256 point (65 bytes), base64url without padding;
  this is the ``applicationServerKey`` handed to ``pushManager.subscribe``.
- private key: raw 32-byte scalar, base64url without padding (PEM is
  accepted too).

The signed claims carry the push service origin as ``aud`` and an expiry at
most 12 hours ahead, which push services enforce.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlsplit

from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from py_vapid import Vapid01
from py_vapid.utils import b64urlencode

from reminder_service.core.settings.push import MAX_VAPID_TOKEN_TTL_SECONDS
from reminder_service.features.push.exceptions import VapidConfigurationError
from reminder_service.utils.timeutils import ensure_utc, utcnow


@dataclass(frozen=True, slots=True)
class VapidKeyPair:
    """Application server key pair, both halves base64url encoded."""

    public_key: str
    private_key: str


def public_key_of(vapid: Vapid01) -> str:
    """Base64url uncompressed point of the key pair's public half."""
    raw = vapid.public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
    return b64urlencode(raw)


def private_key_of(vapid: Vapid01) -> str:
    """Base64url raw scalar of the key pair's private half."""
    value = vapid.private_key.private_numbers().private_value
    return b64urlencode(value.to_bytes(32, "big"))


def generate_vapid_keys() -> VapidKeyPair:
    """Create a fresh P-256 application server key pair."""
    vapid = Vapid01()
    vapid.generate_keys()
    return VapidKeyPair(public_key=public_key_of(vapid), private_key=private_key_of(vapid))


def load_vapid_key(private_key: str, expected_public_key: str | None = None) -> Vapid01:
    """Load a configured private key.

    Args:
        private_key: base64url raw scalar, base64url DER, or PEM text.
        expected_public_key: when given, the derived public key must match it,
            otherwise browsers subscribed with that key would reject every push.

    Raises:
        VapidConfigurationError: If the key cannot be parsed or does not match.
    """
    value = private_key.strip()
    try:
        if value.startswith("-----BEGIN"):
            vapid = Vapid01.from_pem(value.encode())
        else:
            vapid = Vapid01.from_string(value)
    except Exception as exc:
        msg = f"Invalid VAPID private key: {exc}"
        raise VapidConfigurationError(msg) from exc

    if expected_public_key is not None and public_key_of(vapid) != expected_public_key.strip():
        msg = "VAPID public key does not match the configured private key"
        raise VapidConfigurationError(msg)
    return vapid


def audience_for(endpoint: str) -> str:
    """Origin (``scheme://host[:port]``) of a push service endpoint.

    Raises:
        ValueError: If the endpoint is not an absolute http(s) URL.
    """
    parts = urlsplit(endpoint)
    if parts.scheme not in ("https", "http") or not parts.netloc:
        msg = f"Push endpoint is not an absolute URL: {endpoint!r}"
        raise ValueError(msg)
    return f"{parts.scheme}://{parts.netloc}"


def build_vapid_claims(
    endpoint: str,
    subject: str,
    *,
    ttl_seconds: int = MAX_VAPID_TOKEN_TTL_SECONDS,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Claims for one request to ``endpoint``.

    A new dict is returned on every call; pywebpush fills in missing claims
    in place, so claim dicts are never shared between requests.

    Example:
        >>> build_vapid_claims(
        ...     "https://fcm.googleapis.com/fcm/send/abc",
        ...     "mailto:ops@example.com",
        ...     ttl_seconds=3600,
        ...     now=datetime(2025, 1, 1, tzinfo=UTC),
        ... )
        {'sub': 'mailto:ops@example.com', 'aud': 'https://fcm.googleapis.com', 'exp': 1735693200}
    """
    if not 0 < ttl_seconds <= MAX_VAPID_TOKEN_TTL_SECONDS:
        msg = f"VAPID token lifetime must be within (0, {MAX_VAPID_TOKEN_TTL_SECONDS}] seconds"
        raise ValueError(msg)
    issued = ensure_utc(now) if now is not None else utcnow()
    return {
        "sub": subject,
        "aud": audience_for(endpoint),
        "exp": int((issued + timedelta(seconds=ttl_seconds)).timestamp()),
    }


__all__ = [
    "VapidKeyPair",
    "audience_for",
    "build_vapid_claims",
    "generate_vapid_keys",
    "load_vapid_key",
    "private_key_of",
    "public_key_of",
]
