"""Infrastructure modules for the board notifier.

Centralized infrastructure components:
- configuration: Settings management (Settings, NotificationSettings)
- logging: Structured logging (configure_logging, get_module_logger)
- operations: Operation results and error classification
- persistence: SQLAlchemy engine, session factories and ORM records
- services: Dependency injection services (SettingsDep, NotificationServiceDep, get_settings)
"""

from infrastructure.logging import get_module_logger
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "get_module_logger",
    "OperationResult",
    "OperationStatus",
]
