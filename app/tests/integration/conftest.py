"""
Root-level conftest.py for integration tests.

Integration tests run the notification stores against a real SQLite
database and mock only the outbound channels (LINE, Discord, Slack).
"""

import pytest

from modules.notifications.identities import SqlIdentityDirectory
from modules.notifications.preferences import SqlPreferenceStore
from modules.notifications.queue import SqlNotificationQueue
from infrastructure.persistence.models import ProfileRecord
from tests.factories.notifications import StepClock


@pytest.fixture
def add_profiles(sqlite_session_factory):
    """Insert board profiles.

    Example:
        add_profiles({"u-1": "U-line-1", "u-2": None})
    """

    def _add(profiles):
        with sqlite_session_factory() as session, session.begin():
            for user_id, line_user_id in profiles.items():
                session.add(ProfileRecord(id=user_id, line_user_id=line_user_id))

    return _add


@pytest.fixture
def sql_clock():
    return StepClock()


@pytest.fixture
def sql_preferences(sqlite_session_factory):
    return SqlPreferenceStore(sqlite_session_factory)


@pytest.fixture
def sql_identities(sqlite_session_factory):
    return SqlIdentityDirectory(sqlite_session_factory)


@pytest.fixture
def sql_queue(sqlite_session_factory, sql_clock):
    return SqlNotificationQueue(sqlite_session_factory, clock=sql_clock)
