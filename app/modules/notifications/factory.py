"""Factories creating notification stores and channels from configuration."""

from dataclasses import dataclass
from typing import Optional

import structlog

from infrastructure.configuration import Settings
from infrastructure.persistence import create_tables, get_engine, get_session_factory
from modules.notifications.channels import (
    BroadcastChannel,
    LinePushChannel,
    PersonalChannel,
    build_broadcast_channel,
)
from modules.notifications.identities import (
    IdentityDirectory,
    InMemoryIdentityDirectory,
    SqlIdentityDirectory,
)
from modules.notifications.preferences import (
    InMemoryPreferenceStore,
    PreferenceStore,
    SqlPreferenceStore,
)
from modules.notifications.queue import (
    InMemoryNotificationQueue,
    NotificationQueue,
    SqlNotificationQueue,
)

logger = structlog.get_logger()


@dataclass
class NotificationStores:
    """Storage collaborators sharing one backend."""

    preferences: PreferenceStore
    identities: IdentityDirectory
    queue: NotificationQueue


def create_stores(settings: Settings, backend: Optional[str] = None) -> NotificationStores:
    """Create preference, identity and queue stores.

    Args:
        settings: Application settings
        backend: Optional backend override (memory, sql).
            If None, uses settings.notifications.backend

    Returns:
        NotificationStores for the selected backend

    Raises:
        ValueError: If unknown backend specified

    Examples:
        >>> stores = create_stores(settings)  # Uses settings.notifications.backend
        >>> stores = create_stores(settings, backend="memory")  # Force memory
    """
    backend = backend or settings.notifications.backend

    if backend == "memory":
        logger.info("creating_in_memory_notification_stores")
        identities = InMemoryIdentityDirectory()
        return NotificationStores(
            preferences=InMemoryPreferenceStore(),
            identities=identities,
            queue=InMemoryNotificationQueue(identities=identities),
        )

    elif backend == "sql":
        engine = get_engine(settings.database.url, echo=settings.database.echo)
        if settings.database.create_tables:
            create_tables(engine)
        session_factory = get_session_factory(engine)
        logger.info("creating_sql_notification_stores", dialect=engine.dialect.name)
        return NotificationStores(
            preferences=SqlPreferenceStore(session_factory),
            identities=SqlIdentityDirectory(session_factory),
            queue=SqlNotificationQueue(session_factory),
        )

    else:
        raise ValueError(
            f"Unknown notifications backend: {backend}. Supported: memory, sql"
        )


def create_personal_channel(settings: Settings) -> PersonalChannel:
    """Create the LINE push channel."""
    return LinePushChannel(
        access_token=settings.line.LINE_MESSAGING_CHANNEL_ACCESS_TOKEN,
        api_url=settings.line.LINE_API_URL,
        accent_color=settings.line.LINE_ACCENT_COLOR,
        timeout=settings.notifications.send_timeout_seconds,
    )


def create_broadcast_channel(settings: Settings) -> Optional[BroadcastChannel]:
    """Create the configured broadcast channel, or None when disabled."""
    return build_broadcast_channel(
        settings.notifications.broadcast_backend,
        discord_webhook_url=settings.discord.DISCORD_WEBHOOK_URL,
        discord_color=settings.discord.DISCORD_EMBED_COLOR,
        slack_token=settings.slack.SLACK_TOKEN,
        slack_channel=settings.slack.SLACK_BROADCAST_CHANNEL,
        timeout=settings.notifications.send_timeout_seconds,
    )
