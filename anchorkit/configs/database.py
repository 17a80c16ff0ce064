"""
Database configuration settings.

Manages the embedded annotation store connection for SQLAlchemy.
Defaults to a local SQLite file through aiosqlite; any async
SQLAlchemy URL (e.g. postgresql+asyncpg) is accepted.

Dependencies: pydantic, pydantic_settings
System role: Record store connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from anchorkit.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Annotation store database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ANCHORKIT_DB_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./anchorkit.db",
        description="Async SQLAlchemy database URL",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    pool_size: int = Field(default=5, description="Connection pool size (server databases only)")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL targets SQLite."""
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        """Whether the configured URL is an in-process SQLite database."""
        return self.is_sqlite and (":memory:" in self.url or self.url.endswith("://"))
