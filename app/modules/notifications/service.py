"""Notification service for dependency injection.

Provides a class-based interface to the notification subsystem for the API
routes, the scheduler and business callers.
"""

from typing import TYPE_CHECKING, Any, Optional

from modules.notifications.dispatcher import NotificationDispatcher
from modules.notifications.factory import (
    NotificationStores,
    create_broadcast_channel,
    create_personal_channel,
    create_stores,
)
from modules.notifications.flush import FlushJob
from modules.notifications.models import (
    CardEvent,
    DispatchReport,
    FlushReport,
    NotificationPreference,
)
from modules.notifications.quiet_hours import current_hour

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from modules.notifications.channels import BroadcastChannel, PersonalChannel


class NotificationService:
    """Class-based notification service.

    Thin facade over NotificationDispatcher, FlushJob and the preference
    store; every collaborator may be injected for tests, otherwise it is
    created from settings.

    Usage:
        # Via dependency injection
        from infrastructure.services import NotificationServiceDep

        @router.post("/cards/{card_id}/assign")
        def assign(card_id: str, notification_service: NotificationServiceDep):
            ...
            notification_service.notify(
                CardEvent(
                    card_title=card.title,
                    action=f"指派給 {assignee.name}",
                    project_name=project.name,
                    target_user_ids=[assignee.id],
                )
            )

        # Direct instantiation
        settings = get_settings()
        service = NotificationService(settings)
        report = service.flush()
    """

    def __init__(
        self,
        settings: "Settings",
        stores: Optional[NotificationStores] = None,
        personal_channel: Optional["PersonalChannel"] = None,
        broadcast_channel: Optional["BroadcastChannel"] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        flush_job: Optional[FlushJob] = None,
    ):
        """Initialize notification service.

        Args:
            settings: Settings instance (required, passed from provider).
            stores: Optional preference/identity/queue stores. If not
                provided, created for settings.notifications.backend.
            personal_channel: Optional personal channel; defaults to LINE.
            broadcast_channel: Optional broadcast channel; defaults to the
                configured backend (None when disabled).
            dispatcher: Optional pre-configured dispatcher.
            flush_job: Optional pre-configured flush job.
        """
        self._settings = settings
        self.stores = stores or create_stores(settings)
        channel = personal_channel or create_personal_channel(settings)
        if broadcast_channel is None and dispatcher is None:
            broadcast_channel = create_broadcast_channel(settings)

        tz_name = settings.notifications.timezone
        self._dispatcher = dispatcher or NotificationDispatcher(
            personal_channel=channel,
            preferences=self.stores.preferences,
            identities=self.stores.identities,
            queue=self.stores.queue,
            broadcast_channel=broadcast_channel,
            hour_provider=lambda: current_hour(tz_name),
            max_workers=settings.notifications.dispatch_max_workers,
        )
        self._flush_job = flush_job or FlushJob(
            queue=self.stores.queue,
            personal_channel=channel,
            summary_max_lines=settings.notifications.summary_max_lines,
            max_workers=settings.notifications.flush_max_workers,
        )

    def notify(self, event: CardEvent) -> DispatchReport:
        """Announce a card event. Never raises.

        Args:
            event: The card mutation.

        Returns:
            DispatchReport for observability; callers may ignore it.
        """
        return self._dispatcher.notify(event)

    def flush(self) -> FlushReport:
        """Deliver pending notifications as digests.

        Raises:
            Exception: When the pending rows cannot be fetched.
        """
        return self._flush_job.flush()

    def get_preferences(self, user_id: str) -> NotificationPreference:
        return self.stores.preferences.get(user_id)

    def update_preferences(self, user_id: str, **changes: Any) -> NotificationPreference:
        """Partially update a user's preferences.

        Raises:
            pydantic.ValidationError: On unknown fields or out-of-range hours.
        """
        return self.stores.preferences.set(user_id, **changes)
