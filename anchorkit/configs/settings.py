"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI and the annotation service.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from anchorkit.configs.base import BaseSettings
from anchorkit.configs.database import DatabaseSettings
from anchorkit.configs.anchoring import AnchoringSettings, MarkerSettings, WatcherSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    anchoring: AnchoringSettings = Field(default_factory=AnchoringSettings)
    marker: MarkerSettings = Field(default_factory=MarkerSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from anchorkit.configs import get_settings
        settings = get_settings()
    """
    return Settings()
