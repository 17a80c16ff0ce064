"""
Annotation domain models and schemas.

The durable annotation record plus the create/patch/filter payloads the
record store accepts. Attributes are snake_case in Python and camelCase
on the wire.

Dependencies: pydantic
System role: Annotation data contracts
"""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class AnnotationStatus(str, enum.Enum):
    """
    Annotation lifecycle states.

    ACTIVE: Rendered on the page and returned by page listings
    ARCHIVED: Kept but hidden; can return to ACTIVE
    DELETED: Terminal; awaiting external purge
    """

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"

    def can_transition_to(self, target: "AnnotationStatus") -> bool:
        """Whether a record in this status may move to ``target``."""
        if self is target:
            return True
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[AnnotationStatus, frozenset[AnnotationStatus]] = {
    AnnotationStatus.ACTIVE: frozenset({AnnotationStatus.ARCHIVED, AnnotationStatus.DELETED}),
    AnnotationStatus.ARCHIVED: frozenset({AnnotationStatus.ACTIVE, AnnotationStatus.DELETED}),
    AnnotationStatus.DELETED: frozenset(),
}


class AnnotationKind(str, enum.Enum):
    """Presentation style of an annotation."""

    HIGHLIGHT = "highlight"
    NOTE = "note"


class CamelModel(BaseModel):
    """Base schema serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(CamelModel):
    """Geometry snapshot taken when the selection was made."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class AnnotationContext(CamelModel):
    """Text captured immediately before and after the selection."""

    before: str = ""
    after: str = ""


class AnnotationMetadata(CamelModel):
    """Page-level facts recorded with the annotation."""

    page_title: str = ""
    page_url: str = ""
    user_id: str | None = None


class AnnotationRecord(CamelModel):
    """A persisted highlight or note."""

    id: str
    url: str
    domain: str
    selector: str = ""
    original_text: str
    text_hash: str
    kind: AnnotationKind = AnnotationKind.HIGHLIGHT
    color: str | None = None
    summary: str = ""
    user_comment: str = ""
    timestamp: datetime
    last_modified: datetime
    position: Position = Field(default_factory=Position)
    context: AnnotationContext = Field(default_factory=AnnotationContext)
    status: AnnotationStatus = AnnotationStatus.ACTIVE
    metadata: AnnotationMetadata = Field(default_factory=AnnotationMetadata)


class AnnotationCreate(CamelModel):
    """
    Partial record accepted by the store's create operation.

    ``id``, ``domain`` and ``timestamp`` are filled in when absent.
    ``text_hash`` is always derived from ``original_text``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, min_length=1, max_length=64)
    url: str = Field(min_length=1)
    domain: str | None = None
    selector: str = ""
    original_text: str
    kind: AnnotationKind = AnnotationKind.HIGHLIGHT
    color: str | None = None
    summary: str = ""
    user_comment: str = ""
    timestamp: datetime | None = None
    position: Position = Field(default_factory=Position)
    context: AnnotationContext = Field(default_factory=AnnotationContext)
    status: AnnotationStatus = AnnotationStatus.ACTIVE
    metadata: AnnotationMetadata = Field(default_factory=AnnotationMetadata)


class AnnotationPatch(CamelModel):
    """
    Field replacements accepted by the store's update operation.

    Only fields explicitly present are applied; nested objects replace the
    stored value wholesale. Identity and bookkeeping fields are rejected.
    An explicit null clears ``color``, empties the free-text fields and is
    rejected everywhere else.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    selector: str | None = None
    original_text: str | None = None
    kind: AnnotationKind | None = None
    color: str | None = None
    summary: str | None = None
    user_comment: str | None = None
    position: Position | None = None
    context: AnnotationContext | None = None
    status: AnnotationStatus | None = None
    metadata: AnnotationMetadata | None = None

    @field_validator("selector", "summary", "user_comment", mode="before")
    @classmethod
    def _null_text_to_empty(cls, value):
        return "" if value is None else value

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> "AnnotationPatch":
        nulls = sorted(
            name
            for name in self.model_fields_set
            if name != "color" and getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class AnnotationFilter(CamelModel):
    """Query filter; every criterion is optional and combined with AND."""

    url: str | None = None
    domain: str | None = None
    status: AnnotationStatus | None = None
    text_contains: str | None = None
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)


class AnnotationStats(CamelModel):
    """Record counts per status."""

    total: int = 0
    active: int = 0
    archived: int = 0
    deleted: int = 0
