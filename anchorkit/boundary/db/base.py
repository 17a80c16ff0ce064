"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and reusable mixins
for common fields (string record ids, creation/modification timestamps).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from anchorkit.core.text_hasher import generate_record_id


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column normalised to UTC.

    SQLite drops tzinfo on the way in and hands back naive values; this
    stores UTC and re-attaches the UTC zone on load so every backend
    returns comparable aware datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Any, dialect: Dialect) -> Any:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class RecordIdMixin:
    """
    Mixin providing an opaque string primary key.

    Generates ``ann_<hex>`` ids when the caller does not supply one.

    Attributes:
        id: String primary key, auto-generated on insert
    """

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_record_id,
        nullable=False,
    )


class TimestampMixin:
    """
    Mixin providing creation and modification timestamps.

    timestamp is set once on row creation and never changes.
    last_modified is refreshed on every update via onupdate hook.
    Both are stored in UTC.

    Attributes:
        timestamp: Row creation time (UTC, immutable, indexed for ordering)
        last_modified: Last modification time (UTC)
    """

    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        nullable=False,
        index=True,
    )
    last_modified: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
