"""Top-level settings object aggregating every configuration section."""

from typing import Dict, Type

from pydantic_settings import BaseSettings, SettingsConfigDict

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

# Section name -> settings class, each reading its own environment variables
SECTIONS: Dict[str, Type[BaseSettings]] = {
    "line": LineSettings,
    "discord": DiscordSettings,
    "slack": SlackSettings,
    "database": DatabaseSettings,
    "notifications": NotificationSettings,
    "server": ServerSettings,
}


class Settings(BaseSettings):
    """Board notifier settings.

    Delivery targets live in the integration sections (``line``,
    ``discord``, ``slack``); storage, notification behaviour and the HTTP
    server in the infrastructure sections. Sections not passed explicitly
    are built from the environment.

    Environment Variables:
        PREFIX: Environment prefix; empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Commit deployed, reported by ``GET /version``

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.notifications.backend == "sql":
            url = settings.database.url
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    line: LineSettings
    discord: DiscordSettings
    slack: SlackSettings

    database: DatabaseSettings
    notifications: NotificationSettings
    server: ServerSettings

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        for name, section_class in SECTIONS.items():
            kwargs.setdefault(name, section_class())
        super().__init__(**kwargs)

    @property
    def is_production(self) -> bool:
        """True when PREFIX is empty."""
        return not self.PREFIX
