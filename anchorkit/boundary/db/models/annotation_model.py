"""
Annotation ORM model.

One logical table keyed by record id with secondary indexes on url,
domain, status, timestamp and text hash so page and status lookups stay
off full scans.

Dependencies: sqlalchemy, anchorkit.boundary.db.base
System role: Annotation persistence
"""

from sqlalchemy import Enum, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from anchorkit.boundary.db.base import Base, RecordIdMixin, TimestampMixin
from anchorkit.models.annotation import AnnotationKind, AnnotationStatus


class AnnotationModel(Base, RecordIdMixin, TimestampMixin):
    """
    Annotation ORM model.

    Lifecycle: created ACTIVE on a user selection; toggled between ACTIVE
    and ARCHIVED; DELETED is terminal. Rows are removed only by explicit
    deletion.

    Attributes:
        id: Opaque string primary key
        url: Page URL (indexed)
        domain: Page host name (indexed)
        selector: Advisory structural path to the selection container
        original_text: Exact selected text
        text_hash: MD5 of original_text (indexed)
        kind: HIGHLIGHT or NOTE
        color: Highlight colour
        summary: Note summary
        user_comment: Note body
        position: Geometry snapshot {x, y, width, height}
        context: {before, after} text around the selection
        status: ACTIVE / ARCHIVED / DELETED (indexed)
        page_metadata: {pageTitle, pageUrl, userId}
        timestamp: Creation time (indexed)
        last_modified: Last update time
    """

    __tablename__ = "annotations"

    url: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)
    domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    selector: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    text_hash: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    kind: Mapped[AnnotationKind] = mapped_column(
        Enum(AnnotationKind, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AnnotationKind.HIGHLIGHT,
    )
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user_comment: Mapped[str] = mapped_column(Text, nullable=False, default="")

    position: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    context: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[AnnotationStatus] = mapped_column(
        Enum(AnnotationStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AnnotationStatus.ACTIVE,
        index=True,
    )

    page_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
