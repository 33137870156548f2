"""Deferred notification queue.

Holds personal notifications that arrived during a recipient's quiet
hours until the flush job delivers them as one digest. Rows are
append-only; the only update is marking a fetched batch as sent.

Two backends share the NotificationQueue protocol:
- InMemoryNotificationQueue: development and tests
- SqlNotificationQueue: the ``notification_queue`` table
"""

import itertools
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import NotificationQueueRecord, ProfileRecord
from modules.notifications.identities import InMemoryIdentityDirectory
from modules.notifications.models import PendingGroup, QueuedNotification

logger = get_module_logger()

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationQueue(Protocol):
    """Storage interface for deferred notifications.

    Methods:
        enqueue: Append one unsent row
        fetch_pending_grouped_by_user: Every unsent row, grouped per user,
            oldest first, joined with the user's current push identity
        mark_sent: Mark exactly the given ids as sent
    """

    def enqueue(
        self, user_id: str, project_name: str, card_title: str, action: str
    ) -> QueuedNotification:
        """Append one row with ``sent=False``.

        Raises:
            Exception: Storage failures propagate to the caller
        """
        ...

    def fetch_pending_grouped_by_user(self) -> Dict[str, PendingGroup]:
        """Return pending rows grouped by user.

        Users without an identity are included with ``identity=None``.
        """
        ...

    def mark_sent(self, ids: Sequence[str]) -> int:
        """Mark the given ids as sent in one batch.

        Rows already sent are left untouched.

        Returns:
            Number of rows updated
        """
        ...


class InMemoryNotificationQueue:
    """Thread-safe in-memory queue.

    Args:
        identities: Directory used to attach push identities on fetch
        clock: Source of ``created_at`` / ``sent_at`` timestamps
    """

    def __init__(
        self,
        identities: Optional[InMemoryIdentityDirectory] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._rows: Dict[str, QueuedNotification] = {}
        self._order: Dict[str, int] = {}
        self._counter = itertools.count()
        self._lock = threading.Lock()
        self._identities = identities or InMemoryIdentityDirectory()
        self._clock = clock or utcnow

    def enqueue(
        self, user_id: str, project_name: str, card_title: str, action: str
    ) -> QueuedNotification:
        row = QueuedNotification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            project_name=project_name,
            card_title=card_title,
            action=action,
            created_at=self._clock(),
        )
        with self._lock:
            self._rows[row.id] = row
            self._order[row.id] = next(self._counter)
        logger.info("notification_enqueued", user_id=user_id, notification_id=row.id)
        return row.model_copy()

    def fetch_pending_grouped_by_user(self) -> Dict[str, PendingGroup]:
        with self._lock:
            pending = [row.model_copy() for row in self._rows.values() if not row.sent]
            order = dict(self._order)

        pending.sort(key=lambda row: (row.created_at, order[row.id]))
        identities = self._identities.get_identities({row.user_id for row in pending})

        groups: Dict[str, PendingGroup] = {}
        for row in pending:
            group = groups.get(row.user_id)
            if group is None:
                group = groups[row.user_id] = PendingGroup(
                    user_id=row.user_id, identity=identities.get(row.user_id)
                )
            group.entries.append(row)

        logger.debug(
            "fetched_pending_notifications", rows=len(pending), users=len(groups)
        )
        return groups

    def mark_sent(self, ids: Sequence[str]) -> int:
        now = self._clock()
        updated = 0
        with self._lock:
            for notification_id in ids:
                row = self._rows.get(notification_id)
                if row is None or row.sent:
                    continue
                self._rows[notification_id] = row.model_copy(
                    update={"sent": True, "sent_at": now}
                )
                updated += 1
        logger.info("notifications_marked_sent", requested=len(ids), updated=updated)
        return updated

    def all_rows(self) -> List[QueuedNotification]:
        """Every row, sent or not, in insertion order (inspection and tests)."""
        with self._lock:
            return [
                row.model_copy()
                for row in sorted(self._rows.values(), key=lambda r: self._order[r.id])
            ]


class SqlNotificationQueue:
    """SQLAlchemy-backed queue (``notification_queue`` joined to ``profiles``)."""

    mark_sent_batch_size = 500

    def __init__(
        self, session_factory: sessionmaker, clock: Optional[Clock] = None
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or utcnow
        self._seq_lock = threading.Lock()
        self._last_seq = 0

    def _next_seq(self) -> int:
        # Monotonic within the process; orders rows sharing a timestamp
        with self._seq_lock:
            self._last_seq = max(self._last_seq + 1, time.time_ns())
            return self._last_seq

    def enqueue(
        self, user_id: str, project_name: str, card_title: str, action: str
    ) -> QueuedNotification:
        record = NotificationQueueRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            project_name=project_name,
            card_title=card_title,
            action=action,
            created_at=self._clock(),
            seq=self._next_seq(),
            sent=False,
            sent_at=None,
        )
        with self._session_factory() as session, session.begin():
            session.add(record)
        logger.info("notification_enqueued", user_id=user_id, notification_id=record.id)
        return self._to_model(record)

    def fetch_pending_grouped_by_user(self) -> Dict[str, PendingGroup]:
        stmt = (
            select(NotificationQueueRecord, ProfileRecord.line_user_id)
            .outerjoin(ProfileRecord, NotificationQueueRecord.user_id == ProfileRecord.id)
            .where(NotificationQueueRecord.sent.is_(False))
            .order_by(
                NotificationQueueRecord.user_id,
                NotificationQueueRecord.created_at,
                NotificationQueueRecord.seq,
            )
        )
        groups: Dict[str, PendingGroup] = {}
        rows = 0
        with self._session_factory() as session:
            for record, identity in session.execute(stmt):
                group = groups.get(record.user_id)
                if group is None:
                    group = groups[record.user_id] = PendingGroup(
                        user_id=record.user_id, identity=identity or None
                    )
                group.entries.append(self._to_model(record))
                rows += 1

        logger.debug("fetched_pending_notifications", rows=rows, users=len(groups))
        return groups

    def mark_sent(self, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        ids = list(ids)
        sent_at = self._clock()
        updated = 0
        # Chunked to stay under the driver bound-parameter limit; one transaction
        with self._session_factory() as session, session.begin():
            for start in range(0, len(ids), self.mark_sent_batch_size):
                chunk = ids[start : start + self.mark_sent_batch_size]
                stmt = (
                    update(NotificationQueueRecord)
                    .where(NotificationQueueRecord.id.in_(chunk))
                    .where(NotificationQueueRecord.sent.is_(False))
                    .values(sent=True, sent_at=sent_at)
                    .execution_options(synchronize_session=False)
                )
                updated += session.execute(stmt).rowcount
        logger.info("notifications_marked_sent", requested=len(ids), updated=updated)
        return updated

    @staticmethod
    def _to_model(record: NotificationQueueRecord) -> QueuedNotification:
        return QueuedNotification(
            id=record.id,
            user_id=record.user_id,
            project_name=record.project_name,
            card_title=record.card_title,
            action=record.action,
            created_at=record.created_at,
            sent=record.sent,
            sent_at=record.sent_at,
        )
