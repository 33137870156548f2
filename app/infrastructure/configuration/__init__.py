"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the board
notifier using Pydantic BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    NotificationSettings: Notification delivery settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    # Access settings
    webhook = settings.discord.DISCORD_WEBHOOK_URL
    backend = settings.notifications.backend

    # Check environment
    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.infrastructure.notifications import (
    NotificationSettings,
)

__all__ = ["Settings", "NotificationSettings"]
