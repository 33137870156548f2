"""Fixtures for server module unit tests."""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def mock_settings():
    """Create a mock settings object."""
    settings = MagicMock()
    settings.is_production = False
    settings.LOG_LEVEL = "INFO"
    settings.model_dump.return_value = {
        "PREFIX": "dev-",
        "notifications": {"backend": "memory"},
    }
    settings.notifications.scheduler_enabled = True
    settings.notifications.flush_interval_minutes = 15
    return settings
