"""Client-side notification components.

These run on the user's device rather than in the API process: capability
detection, the enablement flag, the dedup ledger, the foreground poller,
push payload presentation and push subscription management. Platform
access goes through the protocols in ``platform``.
"""

from .capability import Capability, CapabilityStatus, detect_capability, request_notification_permission
from .client import ReminderApiClient
from .dedup import DeliveryLedger, occurrence_key
from .exceptions import NotificationError, PermissionDenied, UnsupportedEnvironment
from .poller import ReminderPoller
from .preferences import NotificationPreferences
from .presentation import NotificationPresenter, parse_push_payload
from .subscription import PushSubscriptionManager

__all__ = [
    "Capability",
    "CapabilityStatus",
    "DeliveryLedger",
    "NotificationError",
    "NotificationPreferences",
    "NotificationPresenter",
    "PermissionDenied",
    "PushSubscriptionManager",
    "ReminderApiClient",
    "ReminderPoller",
    "UnsupportedEnvironment",
    "detect_capability",
    "occurrence_key",
    "parse_push_payload",
    "request_notification_permission",
]
