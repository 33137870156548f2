"""Structlog configuration and logger setup.

Every record carries the callsite, is passed through secret masking and
is rendered as colored console output in development or one JSON object
per line in production. Chatty third-party loggers (HTTP pools, the SQL
engine, the scheduler) are held at WARNING unless the level is DEBUG.

Usage:
    from infrastructure.logging import configure_logging, get_module_logger

    configure_logging()

    logger = get_module_logger()
    logger.info("notification_enqueued", user_id="u-1")
"""

import inspect
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
)

NOISY_LIBRARY_LOGGERS = ("urllib3", "sqlalchemy.engine", "schedule", "slack_sdk")

SILENCED = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _build_processors(prod_mode: bool) -> List[Any]:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        mask_sensitive_data(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if prod_mode:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _quiet_library_loggers(level: int) -> None:
    library_level = level if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structured logging for the process.

    Under pytest every record is dropped so test output stays readable;
    tests that need to inspect logs patch the module logger instead.

    Args:
        log_level: Level name override. Defaults to settings.LOG_LEVEL.
        is_production: JSON output override. Defaults to settings.is_production.

    Returns:
        Root structlog logger
    """
    if _is_test_environment():
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SILENCED, force=True)
        return structlog.stdlib.get_logger()

    # Settings are only needed once a real sink is configured
    from infrastructure.services.providers import get_settings

    settings = get_settings()
    prod_mode = settings.is_production if is_production is None else is_production
    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)

    structlog.configure(
        processors=_build_processors(prod_mode),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)
    _quiet_library_loggers(level)

    return structlog.stdlib.get_logger()


def get_module_logger() -> BoundLogger:
    """Get a logger bound to the calling module.

    Binds ``component`` (last module path segment) and ``module_path``.

    Example:
        # In modules/notifications/queue.py
        logger = get_module_logger()
        # context: {"component": "queue", "module_path": "modules.notifications.queue"}
    """
    logger = structlog.stdlib.get_logger()

    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    module = inspect.getmodule(caller) if caller is not None else None
    if module is None:
        return logger.bind(component="unknown")

    module_name = module.__name__
    return logger.bind(component=module_name.rsplit(".", 1)[-1], module_path=module_name)
