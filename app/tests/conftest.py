from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import Settings
from infrastructure.operations import OperationResult
from infrastructure.persistence import (
    create_tables,
    dispose_engines,
    get_engine,
    get_session_factory,
)
from modules.notifications.channels import BroadcastChannel, PersonalChannel
from modules.notifications.identities import InMemoryIdentityDirectory
from modules.notifications.preferences import InMemoryPreferenceStore
from modules.notifications.queue import InMemoryNotificationQueue
from tests.factories.notifications import (
    StepClock,
    make_card_event,
    make_queued_notification,
)


@pytest.fixture
def settings_factory():
    """Factory building Settings without reading the environment or .env.

    Example:
        settings = settings_factory(notifications={"backend": "memory"})
    """
    from infrastructure.configuration.infrastructure import (
        DatabaseSettings,
        NotificationSettings,
        ServerSettings,
    )
    from infrastructure.configuration.integrations import (
        DiscordSettings,
        LineSettings,
        SlackSettings,
    )

    def _factory(**sections) -> Settings:
        defaults = {
            "line": (LineSettings, {"LINE_MESSAGING_CHANNEL_ACCESS_TOKEN": "line-token"}),
            "discord": (DiscordSettings, {}),
            "slack": (SlackSettings, {}),
            "database": (DatabaseSettings, {"url": "sqlite:///:memory:"}),
            "notifications": (
                NotificationSettings,
                {"backend": "memory", "broadcast_backend": "none"},
            ),
            "server": (ServerSettings, {}),
        }
        kwargs = {}
        for name, (cls, values) in defaults.items():
            merged = {**values, **sections.get(name, {})}
            kwargs[name] = cls(_env_file=None, **merged)
        return Settings(_env_file=None, **kwargs)

    return _factory


@pytest.fixture
def card_event_factory():
    return make_card_event


@pytest.fixture
def queued_notification_factory():
    return make_queued_notification


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def identities():
    return InMemoryIdentityDirectory({"u-1": "U-line-1", "u-2": "U-line-2"})


@pytest.fixture
def preferences():
    return InMemoryPreferenceStore()


@pytest.fixture
def queue(identities, clock):
    return InMemoryNotificationQueue(identities=identities, clock=clock)


@pytest.fixture
def mock_personal_channel():
    """PersonalChannel mock whose sends succeed."""
    channel = MagicMock(spec=PersonalChannel)
    channel.channel_name = "line"
    channel.send.return_value = OperationResult.success()
    return channel


@pytest.fixture
def mock_broadcast_channel():
    """BroadcastChannel mock whose sends succeed."""
    channel = MagicMock(spec=BroadcastChannel)
    channel.channel_name = "discord"
    channel.send.return_value = OperationResult.success()
    return channel


@pytest.fixture
def sqlite_session_factory(tmp_path):
    """Session factory on a fresh SQLite file with every table created.

    A file (not ``:memory:``) so pool threads share the same database.
    """
    engine = get_engine(f"sqlite:///{tmp_path / 'notifications.db'}")
    create_tables(engine)
    yield get_session_factory(engine)
    dispose_engines()
