"""ORM records backing the notification stores."""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.persistence.database import Base


class ProfileRecord(Base):
    """Read-only view of the board's user profiles.

    Only the columns needed to resolve a push identity are mapped; the table
    itself belongs to the business schema.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    line_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)


class NotificationPreferenceRecord(Base):
    """Per-user notification preferences."""

    __tablename__ = "notification_preferences"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    notify_assigned: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_title_changed: Mapped[bool] = mapped_column(Boolean, default=False)
    notify_due_soon: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_moved: Mapped[bool] = mapped_column(Boolean, default=False)
    quiet_hours_start: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quiet_hours_end: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class NotificationQueueRecord(Base):
    """Deferred personal notification awaiting a flush."""

    __tablename__ = "notification_queue"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    project_name: Mapped[str] = mapped_column(Text, nullable=False)
    card_title: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Tie-breaker for rows enqueued within the same clock tick
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_notification_queue_sent_user", "sent", "user_id"),
    )
