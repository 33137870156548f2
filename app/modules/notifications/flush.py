"""Deferred notification flush.

Drains the queue: every user with pending rows receives one digest
message; rows are marked sent only after that user's push succeeded.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Sequence, Tuple

import structlog

from modules.notifications.channels import PersonalChannel
from modules.notifications.models import (
    FlushReport,
    GroupOutcome,
    PendingGroup,
    QueuedNotification,
)
from modules.notifications.queue import NotificationQueue

logger = structlog.get_logger()

DIGEST_TITLE = "通知摘要"


def compose_summary(
    entries: Sequence[QueuedNotification], max_lines: int = 5
) -> Tuple[str, str]:
    """Build the digest text for one user.

    Args:
        entries: Pending rows, oldest first
        max_lines: Rows listed before the overflow line

    Returns:
        (title_line, summary). The title counts every entry.

    Example:
        With seven rows the title is "你有 7 個新通知" and the summary lists
        rows 1-5 followed by "...還有 2 則通知".
    """
    count = len(entries)
    lines = [f"{i}. {entry.line}" for i, entry in enumerate(entries[:max_lines], start=1)]
    if count > max_lines:
        lines.append(f"...還有 {count - max_lines} 則通知")
    return f"你有 {count} 個新通知", "\n".join(lines)


class FlushJob:
    """Delivers pending notifications as one digest per user.

    Groups are processed independently; a failure for one user leaves that
    user's rows pending and does not affect the others. Only the ids
    captured at fetch time are marked sent, so rows enqueued during the
    flush wait for the next run.

    Overlapping calls in one process do not stack: a call made while
    another flush is running returns immediately with
    ``already_running=True``.
    """

    def __init__(
        self,
        queue: NotificationQueue,
        personal_channel: PersonalChannel,
        summary_max_lines: int = 5,
        max_workers: int = 4,
    ):
        self.queue = queue
        self.personal_channel = personal_channel
        self.summary_max_lines = summary_max_lines
        self.max_workers = max_workers
        self._lock = threading.Lock()

    def flush(self) -> FlushReport:
        """Run one flush.

        Returns:
            FlushReport; ``sent`` counts delivered rows and ``users`` counts
            groups attempted (delivered or failed).

        Raises:
            Exception: When fetching pending rows fails
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("flush_already_running")
            return FlushReport(already_running=True)
        try:
            return self._flush()
        finally:
            self._lock.release()

    def _flush(self) -> FlushReport:
        groups = self.queue.fetch_pending_grouped_by_user()
        if not groups:
            logger.info("flush_nothing_pending")
            return FlushReport()

        workers = max(1, min(self.max_workers, len(groups)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="flush") as executor:
            results = list(executor.map(self._deliver_group, groups.values()))

        outcomes: Dict[str, GroupOutcome] = {}
        sent = 0
        for group, outcome in zip(groups.values(), results):
            outcomes[group.user_id] = outcome
            if outcome == GroupOutcome.DELIVERED:
                sent += group.count

        report = FlushReport(
            sent=sent,
            users=sum(1 for o in outcomes.values() if o != GroupOutcome.SKIPPED),
            failed_users=sum(1 for o in outcomes.values() if o == GroupOutcome.FAILED),
            skipped_users=sum(1 for o in outcomes.values() if o == GroupOutcome.SKIPPED),
            outcomes=outcomes,
        )
        logger.info(
            "flush_completed",
            sent=report.sent,
            users=report.users,
            failed_users=report.failed_users,
            skipped_users=report.skipped_users,
        )
        return report

    def _deliver_group(self, group: PendingGroup) -> GroupOutcome:
        log = logger.bind(user_id=group.user_id, pending=group.count)
        if not group.identity:
            log.info("flush_group_skipped", reason="no_identity")
            return GroupOutcome.SKIPPED

        title_line, summary = compose_summary(group.entries, self.summary_max_lines)
        try:
            result = self.personal_channel.send(
                group.identity,
                title=DIGEST_TITLE,
                body=summary,
                alt_text=title_line,
                caption=title_line,
            )
        except Exception as e:  # pylint: disable=broad-except
            log.error("flush_group_send_error", error=str(e), exc_info=True)
            return GroupOutcome.FAILED

        if not result.is_success:
            log.warning(
                "flush_group_send_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return GroupOutcome.FAILED

        try:
            self.queue.mark_sent(group.ids)
        except Exception as e:  # pylint: disable=broad-except
            # Already pushed; rows stay pending and will be sent again
            log.error("flush_mark_sent_failed", error=str(e), exc_info=True)
            return GroupOutcome.FAILED

        log.info("flush_group_delivered")
        return GroupOutcome.DELIVERED
