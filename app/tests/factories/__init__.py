"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    BASE_TIME,
    StepClock,
    make_card_event,
    make_preference,
    make_queued_notification,
    make_queued_notifications,
)

__all__ = [
    "BASE_TIME",
    "StepClock",
    "make_card_event",
    "make_preference",
    "make_queued_notification",
    "make_queued_notifications",
]
