"""Database engine and session factories.

Engines are cached per URL so the API process, the scheduler thread and
the dispatcher share one connection pool.
"""

from threading import Lock
from typing import Dict

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

logger = structlog.get_logger()

_engines: Dict[str, Engine] = {}
_engines_lock = Lock()


class Base(DeclarativeBase):
    """Declarative base shared by every notification table."""


def get_engine(url: str, echo: bool = False) -> Engine:
    """Get or create the engine for a database URL."""
    with _engines_lock:
        engine = _engines.get(url)
        if engine is None:
            connect_args = {}
            if url.startswith("sqlite"):
                # Dispatcher and flush workers use connections from pool threads
                connect_args["check_same_thread"] = False
            engine = create_engine(
                url,
                echo=echo,
                pool_pre_ping=True,
                connect_args=connect_args,
            )
            _engines[url] = engine
            logger.info("database_engine_created", dialect=engine.dialect.name)
        return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create the notification tables that do not exist yet."""
    # Registers the ORM classes on Base.metadata
    from infrastructure.persistence import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("database_tables_ensured", tables=sorted(Base.metadata.tables))


def dispose_engines() -> None:
    """Dispose every cached engine (shutdown and tests)."""
    with _engines_lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()
