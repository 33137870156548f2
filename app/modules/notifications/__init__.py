"""Board notification distribution.

Public API:
    - NotificationService: facade used by routes, scheduler and business code
    - CardEvent: input of ``notify()``
    - NotificationDispatcher / FlushJob: fan-out and deferred digest delivery
"""

from modules.notifications.dispatcher import NotificationDispatcher
from modules.notifications.flush import FlushJob, compose_summary
from modules.notifications.models import (
    CardEvent,
    DeliveryOutcome,
    DispatchReport,
    EventKind,
    FlushReport,
    GroupOutcome,
    NotificationPreference,
    PreferenceUpdate,
    QueuedNotification,
)
from modules.notifications.quiet_hours import current_hour, is_quiet
from modules.notifications.service import NotificationService

__all__ = [
    "NotificationService",
    "NotificationDispatcher",
    "FlushJob",
    "compose_summary",
    "CardEvent",
    "DeliveryOutcome",
    "DispatchReport",
    "EventKind",
    "FlushReport",
    "GroupOutcome",
    "NotificationPreference",
    "PreferenceUpdate",
    "QueuedNotification",
    "current_hour",
    "is_quiet",
]
