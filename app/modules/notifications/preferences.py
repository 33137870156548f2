"""Notification preference storage.

Preferences are read on every dispatch and written by the settings
surface. A user without a stored row gets the defaults; the row is created
on the first write.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Protocol

from sqlalchemy.orm import sessionmaker

from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import NotificationPreferenceRecord
from modules.notifications.models import NotificationPreference, PreferenceUpdate

logger = get_module_logger()

PREFERENCE_FIELDS = (
    "notify_assigned",
    "notify_title_changed",
    "notify_due_soon",
    "notify_moved",
    "quiet_hours_start",
    "quiet_hours_end",
)


class PreferenceStore(Protocol):
    """Storage interface for notification preferences.

    Methods:
        get: Return the user's preferences, defaults when none are stored
        set: Apply a partial update (upsert) and return the stored result
    """

    def get(self, user_id: str) -> NotificationPreference:
        ...

    def set(self, user_id: str, **changes: Any) -> NotificationPreference:
        ...


def _validated_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Validate raw keyword changes through PreferenceUpdate.

    Raises:
        pydantic.ValidationError: On unknown fields or out-of-range hours
    """
    return PreferenceUpdate(**changes).changes()


class InMemoryPreferenceStore:
    """Thread-safe in-memory preference store (development, tests)."""

    def __init__(self) -> None:
        self._rows: Dict[str, NotificationPreference] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> NotificationPreference:
        with self._lock:
            row = self._rows.get(user_id)
            return row.model_copy() if row else NotificationPreference(user_id=user_id)

    def set(self, user_id: str, **changes: Any) -> NotificationPreference:
        updates = _validated_changes(changes)
        with self._lock:
            current = self._rows.get(user_id) or NotificationPreference(user_id=user_id)
            row = current.model_copy(update=updates)
            self._rows[user_id] = row
        logger.info("notification_preferences_updated", user_id=user_id, fields=sorted(updates))
        return row.model_copy()


class SqlPreferenceStore:
    """SQLAlchemy-backed preference store (``notification_preferences``)."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, user_id: str) -> NotificationPreference:
        with self._session_factory() as session:
            record = session.get(NotificationPreferenceRecord, user_id)
            if record is None:
                return NotificationPreference(user_id=user_id)
            return self._to_model(record)

    def set(self, user_id: str, **changes: Any) -> NotificationPreference:
        updates = _validated_changes(changes)
        with self._session_factory() as session, session.begin():
            record = session.get(NotificationPreferenceRecord, user_id, with_for_update=True)
            if record is None:
                defaults = NotificationPreference(user_id=user_id).model_dump()
                record = NotificationPreferenceRecord(**defaults)
                session.add(record)
            for key, value in updates.items():
                setattr(record, key, value)
            record.updated_at = datetime.now(timezone.utc)
            result = self._to_model(record)
        logger.info("notification_preferences_updated", user_id=user_id, fields=sorted(updates))
        return result

    @staticmethod
    def _to_model(record: NotificationPreferenceRecord) -> NotificationPreference:
        return NotificationPreference(
            user_id=record.user_id,
            **{name: getattr(record, name) for name in PREFERENCE_FIELDS},
        )
