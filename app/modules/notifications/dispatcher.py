"""Card event fan-out.

Usage Example:
    dispatcher = NotificationDispatcher(
        personal_channel=LinePushChannel(token),
        preferences=InMemoryPreferenceStore(),
        identities=InMemoryIdentityDirectory({"u-1": "U4af4980629"}),
        queue=InMemoryNotificationQueue(),
        broadcast_channel=DiscordBroadcastChannel(webhook_url),
    )

    report = dispatcher.notify(
        CardEvent(
            card_title="Fix login",
            action="指派給 Amy",
            project_name="Website",
            target_user_ids=["u-1"],
        )
    )
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

import structlog

from modules.notifications.channels import BroadcastChannel, PersonalChannel
from modules.notifications.identities import IdentityDirectory
from modules.notifications.models import CardEvent, DeliveryOutcome, DispatchReport
from modules.notifications.preferences import PreferenceStore
from modules.notifications.queue import NotificationQueue
from modules.notifications.quiet_hours import current_hour, is_quiet

logger = structlog.get_logger()


class NotificationDispatcher:
    """Routes one card event to the broadcast sink and to each target user.

    Per recipient: no push identity -> skipped; inside quiet hours ->
    queued for the next flush; otherwise pushed immediately. A failed
    immediate push is logged and dropped, never queued.

    ``notify()`` never raises. A failure for one recipient does not affect
    the others or the broadcast.

    Attributes:
        personal_channel: Per-user push channel
        preferences: Preference store (quiet hours)
        identities: Push identity lookup
        queue: Deferred notification queue
        broadcast_channel: Optional team-wide sink
        hour_provider: Returns the current hour of day for quiet-hours checks
        max_workers: Recipients processed in parallel
    """

    def __init__(
        self,
        personal_channel: PersonalChannel,
        preferences: PreferenceStore,
        identities: IdentityDirectory,
        queue: NotificationQueue,
        broadcast_channel: Optional[BroadcastChannel] = None,
        hour_provider: Optional[Callable[[], int]] = None,
        max_workers: int = 4,
    ):
        self.personal_channel = personal_channel
        self.preferences = preferences
        self.identities = identities
        self.queue = queue
        self.broadcast_channel = broadcast_channel
        self.hour_provider = hour_provider or current_hour
        self.max_workers = max_workers

        logger.info(
            "initialized_notification_dispatcher",
            personal_channel=personal_channel.channel_name,
            broadcast_channel=broadcast_channel.channel_name if broadcast_channel else None,
            max_workers=max_workers,
        )

    def notify(self, event: CardEvent) -> DispatchReport:
        """Announce a card event.

        Args:
            event: The card mutation

        Returns:
            DispatchReport with the broadcast flag and per-user outcomes
        """
        report = DispatchReport(broadcast_sent=self._broadcast(event))

        user_ids = list(dict.fromkeys(event.target_user_ids))
        if not user_ids:
            return report

        try:
            hour = self.hour_provider()
        except Exception as e:  # pylint: disable=broad-except
            logger.error("quiet_hours_clock_failed", error=str(e), exc_info=True)
            report.outcomes = {user_id: DeliveryOutcome.FAILED for user_id in user_ids}
            return report

        if len(user_ids) == 1 or self.max_workers <= 1:
            outcomes: List[DeliveryOutcome] = [
                self._deliver(event, user_id, hour) for user_id in user_ids
            ]
        else:
            with ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(user_ids)),
                thread_name_prefix="notify",
            ) as executor:
                outcomes = list(
                    executor.map(lambda uid: self._deliver(event, uid, hour), user_ids)
                )

        report.outcomes = dict(zip(user_ids, outcomes))
        logger.info(
            "card_event_dispatched",
            project=event.project_name,
            recipients=len(user_ids),
            sent=report.count(DeliveryOutcome.SENT),
            queued=report.count(DeliveryOutcome.QUEUED),
            skipped=report.count(DeliveryOutcome.SKIPPED),
            failed=report.count(DeliveryOutcome.FAILED),
        )
        return report

    def _broadcast(self, event: CardEvent) -> Optional[bool]:
        if self.broadcast_channel is None:
            logger.debug("broadcast_skipped", reason="no_broadcast_channel")
            return None
        try:
            result = self.broadcast_channel.send(event)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "broadcast_error",
                channel=self.broadcast_channel.channel_name,
                error=str(e),
                exc_info=True,
            )
            return False
        if not result.is_success:
            logger.warning(
                "broadcast_failed",
                channel=self.broadcast_channel.channel_name,
                error=result.message,
                error_code=result.error_code,
            )
        return result.is_success

    def _deliver(self, event: CardEvent, user_id: str, hour: int) -> DeliveryOutcome:
        log = logger.bind(user_id=user_id, project=event.project_name)
        try:
            identity = self.identities.get_identity(user_id)
            if not identity:
                log.debug("recipient_skipped", reason="no_identity")
                return DeliveryOutcome.SKIPPED

            pref = self.preferences.get(user_id)
            if is_quiet(pref.quiet_hours_start, pref.quiet_hours_end, hour):
                self.queue.enqueue(
                    user_id=user_id,
                    project_name=event.project_name,
                    card_title=event.card_title,
                    action=event.action,
                )
                log.info("notification_deferred", hour=hour)
                return DeliveryOutcome.QUEUED

            result = self.personal_channel.send(
                identity,
                title=event.project_name,
                body=event.card_title,
                alt_text=event.line,
                caption=event.action,
            )
            if not result.is_success:
                log.warning(
                    "personal_notification_failed",
                    error=result.message,
                    error_code=result.error_code,
                )
                return DeliveryOutcome.FAILED

            log.info("personal_notification_sent")
            return DeliveryOutcome.SENT

        except Exception as e:  # pylint: disable=broad-except
            log.error("recipient_delivery_error", error=str(e), exc_info=True)
            return DeliveryOutcome.FAILED
