"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.database import DatabaseSettings
from infrastructure.configuration.infrastructure.notifications import (
    NotificationSettings,
)
from infrastructure.configuration.infrastructure.server import ServerSettings

__all__ = [
    "DatabaseSettings",
    "NotificationSettings",
    "ServerSettings",
]
