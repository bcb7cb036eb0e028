"""Web Push feature package: subscriptions, VAPID signing and the delivery sweep."""

from .router import router
from .scheduler import PushDeliveryScheduler, SchedulerRunSummary
from .service import PushSubscriptionService

__all__ = [
    "PushDeliveryScheduler",
    "PushSubscriptionService",
    "SchedulerRunSummary",
    "router",
]
