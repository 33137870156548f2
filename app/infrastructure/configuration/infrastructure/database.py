"""Relational database settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class DatabaseSettings(InfrastructureSettings):
    """SQLAlchemy database configuration.

    Environment Variables:
        DATABASE_URL: SQLAlchemy URL of the board database
        DATABASE_ECHO: Echo SQL statements (default: False)
        DATABASE_CREATE_TABLES: Create notification tables on startup

    Hosted Postgres providers often hand out ``postgres://`` URLs, which
    SQLAlchemy expects as ``postgresql://``; they are normalized on load.
    """

    url: str = Field(default="sqlite:///./board-notifier.db", alias="DATABASE_URL")
    echo: bool = Field(default=False, alias="DATABASE_ECHO")
    create_tables: bool = Field(default=True, alias="DATABASE_CREATE_TABLES")

    @field_validator("url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v
