"""
Common response models and transport envelopes.

Request/response wrappers shared by the message dispatcher and the
HTTP adapter.

Dependencies: pydantic
System role: Transport boundary structures
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransportRequest(BaseModel):
    """Opaque request crossing an execution-context boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str = Field(min_length=1, description="Operation name, e.g. 'create' or 'query'")
    payload: dict[str, Any] = Field(default_factory=dict)
    request_id: str | None = Field(default=None, description="Caller-chosen id echoed back")


class TransportResponse(BaseModel):
    """Response to a TransportRequest; exactly one of data/error is meaningful."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    data: Any = None
    error: str | None = Field(default=None, description="Error message")
    request_id: str | None = None

    @classmethod
    def ok(cls, data: Any = None, request_id: str | None = None) -> "TransportResponse":
        """Build a success envelope."""
        return cls(success=True, data=data, request_id=request_id)

    @classmethod
    def fail(cls, error: str, request_id: str | None = None) -> "TransportResponse":
        """Build an error envelope."""
        return cls(success=False, error=error, request_id=request_id)
