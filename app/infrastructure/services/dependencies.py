"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common dependencies.
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.services.providers import get_notification_service, get_settings
from modules.notifications.service import NotificationService

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Notification service dependency - override with
# app.dependency_overrides[get_notification_service] in tests
NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]

__all__ = [
    "SettingsDep",
    "NotificationServiceDep",
]
