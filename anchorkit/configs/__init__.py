"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from anchorkit.configs.anchoring import AnchoringSettings, MarkerSettings, WatcherSettings
from anchorkit.configs.database import DatabaseSettings
from anchorkit.configs.settings import Settings, get_settings

__all__ = [
    "AnchoringSettings",
    "DatabaseSettings",
    "MarkerSettings",
    "Settings",
    "WatcherSettings",
    "get_settings",
]
