"""Domain models and transport schemas."""

from anchorkit.models.annotation import (
    AnnotationContext,
    AnnotationCreate,
    AnnotationFilter,
    AnnotationKind,
    AnnotationMetadata,
    AnnotationPatch,
    AnnotationRecord,
    AnnotationStats,
    AnnotationStatus,
    Position,
)
from anchorkit.models.common import TransportRequest, TransportResponse
from anchorkit.models.selection import (
    AnnotationAttributes,
    BoundingRect,
    SelectionRange,
    SelectionSnapshot,
)

__all__ = [
    "AnnotationAttributes",
    "AnnotationContext",
    "AnnotationCreate",
    "AnnotationFilter",
    "AnnotationKind",
    "AnnotationMetadata",
    "AnnotationPatch",
    "AnnotationRecord",
    "AnnotationStats",
    "AnnotationStatus",
    "BoundingRect",
    "Position",
    "SelectionRange",
    "SelectionSnapshot",
    "TransportRequest",
    "TransportResponse",
]
