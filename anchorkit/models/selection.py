"""
Selection snapshot schemas.

Plain-data capture of a user selection. The live selection object never
crosses into the core; everything needed to create a record is copied here.

Dependencies: pydantic
System role: Annotation creation input contracts
"""

from datetime import datetime, timezone

from pydantic import Field

from anchorkit.models.annotation import AnnotationKind, CamelModel


class BoundingRect(CamelModel):
    """Viewport rectangle of the selection."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class SelectionRange(CamelModel):
    """Range-equivalent geometry: the container's text and offsets into it."""

    container_text: str = ""
    start_offset: int | None = Field(default=None, ge=0)
    end_offset: int | None = Field(default=None, ge=0)
    selector: str = ""


class SelectionSnapshot(CamelModel):
    """Everything the core keeps from a user selection."""

    text: str
    range: SelectionRange | None = None
    bounding_rect: BoundingRect | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AnnotationAttributes(CamelModel):
    """User-chosen presentation for a new annotation."""

    kind: AnnotationKind = AnnotationKind.HIGHLIGHT
    color: str | None = None
    summary: str = ""
    user_comment: str = ""
    user_id: str | None = None
