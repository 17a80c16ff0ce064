"""API-specific dependencies."""

from .dependencies import (
    get_message_dispatcher,
    get_record_store,
    get_settings_dependency,
)

__all__ = [
    "get_message_dispatcher",
    "get_record_store",
    "get_settings_dependency",
]
