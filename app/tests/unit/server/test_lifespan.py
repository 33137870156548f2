"""Unit tests for server.lifespan module."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

from server import lifespan as lifespan_module


def _run_lifespan(app):
    async def _run():
        async with lifespan_module.lifespan(app):
            pass

    asyncio.run(_run())


@pytest.mark.unit
class TestStartScheduledTasks:
    def test_skipped_when_disabled(self, mock_settings):
        mock_settings.notifications.scheduler_enabled = False
        logger = MagicMock()

        with patch.object(lifespan_module, "scheduled_tasks") as tasks:
            result = lifespan_module._start_scheduled_tasks(mock_settings, logger)

        assert result is None
        tasks.init.assert_not_called()
        logger.info.assert_called_with(
            "scheduled_tasks_skipped", reason="scheduler_disabled"
        )

    def test_skipped_in_test_environment(self, mock_settings):
        logger = MagicMock()

        with patch.object(lifespan_module, "scheduled_tasks") as tasks:
            result = lifespan_module._start_scheduled_tasks(mock_settings, logger)

        assert result is None
        tasks.run_continuously.assert_not_called()

    def test_started_outside_tests(self, mock_settings):
        logger = MagicMock()
        stop_event = MagicMock()

        with patch.object(
            lifespan_module, "_is_test_environment", return_value=False
        ), patch.object(lifespan_module, "scheduled_tasks") as tasks:
            tasks.run_continuously.return_value = stop_event
            result = lifespan_module._start_scheduled_tasks(mock_settings, logger)

        assert result is stop_event
        tasks.init.assert_called_once_with(mock_settings)


@pytest.mark.unit
class TestLifespan:
    def test_startup_and_shutdown(self, mock_settings):
        app = FastAPI()
        service = MagicMock()
        stop_event = MagicMock()

        with patch.object(
            lifespan_module, "get_settings", return_value=mock_settings
        ), patch.object(
            lifespan_module, "get_notification_service", return_value=service
        ), patch.object(
            lifespan_module, "_start_scheduled_tasks", return_value=stop_event
        ), patch.object(
            lifespan_module, "dispose_engines"
        ) as dispose:
            _run_lifespan(app)

        assert app.state.notification_service is service
        assert app.state.settings is mock_settings
        stop_event.set.assert_called_once()
        dispose.assert_called_once()

    def test_service_failure_aborts_startup(self, mock_settings):
        app = FastAPI()

        with patch.object(
            lifespan_module, "get_settings", return_value=mock_settings
        ), patch.object(
            lifespan_module,
            "get_notification_service",
            side_effect=ValueError("Unknown notifications backend"),
        ):
            with pytest.raises(ValueError):
                _run_lifespan(app)
