"""
Core business logic module.

Contains the exception hierarchy, text identity helpers, similarity
scoring, the anchor resolver, the marker renderer and the change watcher.
"""

from anchorkit.core.exceptions import (
    AnchorKitException,
    ConflictError,
    InitializationError,
    InvalidStatusTransitionError,
    NotFoundError,
    RenderError,
    StoreNotInitializedError,
    ValidationError,
)

__all__ = [
    "AnchorKitException",
    "ConflictError",
    "InitializationError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "RenderError",
    "StoreNotInitializedError",
    "ValidationError",
]
