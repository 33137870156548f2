"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process.

    Infrastructure packages should use this directly:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/version")
        def get_version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_service():
    """
    Get application-scoped notification service singleton.

    Stores, channels, the dispatcher and the flush job are created once per
    process from settings, so the API and the scheduler thread share the
    same flush lock and connection pool.

    Returns:
        NotificationService: Cached service instance.

    Usage:
        @router.post("/notifications/flush")
        def flush(service: NotificationServiceDep):
            return service.flush()
    """
    from modules.notifications.service import NotificationService

    return NotificationService(settings=get_settings())
