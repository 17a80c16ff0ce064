"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, RecordIdMixin, TimestampMixin, UTCDateTime: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - AnnotationModel: Annotation entity
  - annotation_crud: CRUD operation singleton

Dependencies: sqlalchemy, aiosqlite, anchorkit.configs
System role: Database adapter providing persistent storage for annotation records
"""

from anchorkit.boundary.db.base import Base, RecordIdMixin, TimestampMixin, UTCDateTime, utc_now
from anchorkit.boundary.db.connection import get_async_engine, get_async_session_factory
from anchorkit.boundary.db.models.annotation_model import AnnotationModel
from anchorkit.boundary.db.CRUD import (
    AnnotationCRUD,
    BaseCRUD,
    annotation_crud,
)

__all__ = [
    # Base classes
    "Base",
    "RecordIdMixin",
    "TimestampMixin",
    "UTCDateTime",
    "utc_now",
    # Connection
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "AnnotationModel",
    # CRUD
    "AnnotationCRUD",
    "BaseCRUD",
    "annotation_crud",
]
