"""Notification subsystem models.

Card events coming from the board, per-user preferences, deferred queue
rows and the reports returned by the dispatcher and the flush job.

Uses Pydantic BaseModel for:
- Validation of quiet-hour bounds (0..23) at the API boundary
- Partial preference updates (explicitly set fields only)
- JSON serialization in API responses
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EventKind(Enum):
    """Kinds of card changes a user can opt in or out of."""

    ASSIGNED = "assigned"
    TITLE_CHANGED = "title_changed"
    DUE_SOON = "due_soon"
    MOVED = "moved"


class CardEvent(BaseModel):
    """A card mutation to announce.

    Attributes:
        card_title: Title of the card that changed
        action: Human-readable description ("更新標題", "指派給 Amy"...)
        project_name: Project the card belongs to
        target_user_ids: Users to notify personally (may be empty)

    Example:
        event = CardEvent(
            card_title="Fix login",
            action="指派給 Amy",
            project_name="Website",
            target_user_ids=["u-1"],
        )
    """

    card_title: str
    action: str
    project_name: str
    target_user_ids: List[str] = Field(default_factory=list)

    @property
    def line(self) -> str:
        return f"[{self.project_name}] {self.action}: {self.card_title}"


class NotificationPreference(BaseModel):
    """Per-user notification settings.

    The ``notify_*`` flags describe which event kinds the user wants. The
    dispatcher does not enforce them; callers building ``target_user_ids``
    filter with :meth:`wants`. Quiet hours are an hour-of-day window,
    inclusive start and exclusive end; a missing bound disables them.
    """

    user_id: str
    notify_assigned: bool = True
    notify_title_changed: bool = False
    notify_due_soon: bool = True
    notify_moved: bool = False
    quiet_hours_start: Optional[int] = Field(default=None, ge=0, le=23)
    quiet_hours_end: Optional[int] = Field(default=None, ge=0, le=23)

    @property
    def quiet_hours_enabled(self) -> bool:
        return self.quiet_hours_start is not None and self.quiet_hours_end is not None

    def wants(self, kind: EventKind) -> bool:
        """Whether the user opted in to events of ``kind``."""
        return {
            EventKind.ASSIGNED: self.notify_assigned,
            EventKind.TITLE_CHANGED: self.notify_title_changed,
            EventKind.DUE_SOON: self.notify_due_soon,
            EventKind.MOVED: self.notify_moved,
        }[kind]


class PreferenceUpdate(BaseModel):
    """Partial preference update.

    Omitted fields are left unchanged. An explicit ``null`` for a quiet hour
    clears it; an explicit ``null`` for a ``notify_*`` flag is ignored.
    """

    model_config = ConfigDict(extra="forbid")

    notify_assigned: Optional[bool] = None
    notify_title_changed: Optional[bool] = None
    notify_due_soon: Optional[bool] = None
    notify_moved: Optional[bool] = None
    quiet_hours_start: Optional[int] = Field(default=None, ge=0, le=23)
    quiet_hours_end: Optional[int] = Field(default=None, ge=0, le=23)

    def changes(self) -> Dict[str, Optional[object]]:
        """Fields to write, keyed by column name."""
        changes = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in changes.items()
            if value is not None or key.startswith("quiet_hours_")
        }


class QueuedNotification(BaseModel):
    """A personal notification deferred by quiet hours.

    Invariant: ``sent == (sent_at is not None)``.
    """

    id: str
    user_id: str
    project_name: str
    card_title: str
    action: str
    created_at: datetime
    sent: bool = False
    sent_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_sent_invariant(self) -> "QueuedNotification":
        if self.sent != (self.sent_at is not None):
            raise ValueError("sent must be True exactly when sent_at is set")
        return self

    @property
    def line(self) -> str:
        return f"[{self.project_name}] {self.action}: {self.card_title}"


@dataclass
class PendingGroup:
    """Unsent rows of one user, as captured by a single fetch.

    ``ids`` are the exact rows a successful delivery may mark sent; rows
    enqueued after the fetch are not part of the group.
    """

    user_id: str
    identity: Optional[str]
    entries: List[QueuedNotification] = field(default_factory=list)

    @property
    def ids(self) -> List[str]:
        return [entry.id for entry in self.entries]

    @property
    def count(self) -> int:
        return len(self.entries)


class DeliveryOutcome(Enum):
    """What the dispatcher did for one recipient of an event."""

    SENT = "sent"
    QUEUED = "queued"
    SKIPPED = "skipped"
    FAILED = "failed"


class GroupOutcome(Enum):
    """What the flush job did for one user's pending group.

    Only DELIVERED marks the group's rows as sent.
    """

    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


class DispatchReport(BaseModel):
    """Result of one ``notify()`` call.

    Attributes:
        broadcast_sent: None when no broadcast channel is configured
        outcomes: Per-recipient outcome
    """

    broadcast_sent: Optional[bool] = None
    outcomes: Dict[str, DeliveryOutcome] = Field(default_factory=dict)

    def count(self, outcome: DeliveryOutcome) -> int:
        return sum(1 for value in self.outcomes.values() if value == outcome)


class FlushReport(BaseModel):
    """Result of one flush.

    Attributes:
        sent: Notifications delivered (rows marked sent)
        users: Users whose group was attempted (delivered or failed)
        failed_users: Users whose delivery failed; their rows stay pending
        skipped_users: Users without a push identity; their rows stay pending
        already_running: True when another flush held the lock in this process
        outcomes: Per-user group outcome
    """

    sent: int = 0
    users: int = 0
    failed_users: int = 0
    skipped_users: int = 0
    already_running: bool = False
    outcomes: Dict[str, GroupOutcome] = Field(default_factory=dict)
