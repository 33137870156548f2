"""Persistence layer for notification preferences and the deferred queue.

Provides the SQLAlchemy declarative base, ORM records and cached
engine/session factories.
"""

from infrastructure.persistence.database import (
    Base,
    create_tables,
    dispose_engines,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "create_tables",
    "dispose_engines",
    "get_engine",
    "get_session_factory",
]
