"""Notification delivery infrastructure settings."""

from typing import Optional

import pytz
from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class NotificationSettings(InfrastructureSettings):
    """Notification fan-out, queue and flush configuration.

    Environment Variables:
        NOTIFICATIONS_BACKEND: Storage backend for preferences, identities and
            the queue - 'memory' or 'sql' (default: sql)
        NOTIFICATIONS_BROADCAST_BACKEND: Broadcast sink - 'discord', 'slack'
            or 'none' (default: discord)
        NOTIFICATIONS_TIMEZONE: pytz zone used to evaluate quiet hours. Empty
            means the server-local clock.
        NOTIFICATIONS_SEND_TIMEOUT_SECONDS: Timeout of every external send
        NOTIFICATIONS_DISPATCH_MAX_WORKERS: Recipients processed in parallel
        NOTIFICATIONS_FLUSH_MAX_WORKERS: Users flushed in parallel
        NOTIFICATIONS_FLUSH_INTERVAL_MINUTES: Scheduler flush interval
        NOTIFICATIONS_SCHEDULER_ENABLED: Start the in-process scheduler
        NOTIFICATIONS_SUMMARY_MAX_LINES: Entries listed in a flush summary

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.notifications.scheduler_enabled:
            interval = settings.notifications.flush_interval_minutes
        ```
    """

    backend: str = Field(default="sql", alias="NOTIFICATIONS_BACKEND")
    broadcast_backend: str = Field(
        default="discord", alias="NOTIFICATIONS_BROADCAST_BACKEND"
    )
    timezone: Optional[str] = Field(default=None, alias="NOTIFICATIONS_TIMEZONE")
    send_timeout_seconds: float = Field(
        default=10.0, alias="NOTIFICATIONS_SEND_TIMEOUT_SECONDS"
    )
    dispatch_max_workers: int = Field(
        default=4, alias="NOTIFICATIONS_DISPATCH_MAX_WORKERS"
    )
    flush_max_workers: int = Field(default=4, alias="NOTIFICATIONS_FLUSH_MAX_WORKERS")
    flush_interval_minutes: int = Field(
        default=15, alias="NOTIFICATIONS_FLUSH_INTERVAL_MINUTES"
    )
    scheduler_enabled: bool = Field(
        default=True, alias="NOTIFICATIONS_SCHEDULER_ENABLED"
    )
    summary_max_lines: int = Field(default=5, alias="NOTIFICATIONS_SUMMARY_MAX_LINES")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("memory", "sql"):
            raise ValueError(f"Unknown notifications backend: {v}")
        return v

    @field_validator("broadcast_backend")
    @classmethod
    def validate_broadcast_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("discord", "slack", "none"):
            raise ValueError(f"Unknown broadcast backend: {v}")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator(
        "dispatch_max_workers",
        "flush_max_workers",
        "flush_interval_minutes",
        "summary_max_lines",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v
