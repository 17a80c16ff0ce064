"""
Exception hierarchy for the annotation toolkit.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Resolution failure is deliberately absent: a record that cannot be
reanchored is a normal ``None`` outcome, not an error.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class AnchorKitException(Exception):
    """Base exception for all annotation toolkit errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(AnchorKitException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidStatusTransitionError(ValidationError):
    """Raised when a status change violates the record lifecycle."""

    def __init__(
        self,
        record_id: str,
        current: str,
        requested: str,
    ) -> None:
        """
        Initialize transition error.

        Args:
            record_id: ID of the record being updated
            current: Stored status
            requested: Status the patch asked for
        """
        super().__init__(
            f"Cannot change status from {current} to {requested}",
            field="status",
            details={"record_id": record_id, "current": current, "requested": requested},
        )


class InitializationError(AnchorKitException):
    """Raised when the record store cannot be set up. Fatal for the session."""

    pass


class StoreNotInitializedError(InitializationError):
    """Raised when the record store is used before a successful initialize()."""

    def __init__(self, operation: str) -> None:
        """
        Initialize not-ready error.

        Args:
            operation: Store operation that was attempted
        """
        super().__init__(
            "Record store is not initialized",
            {"operation": operation},
        )


class NotFoundError(AnchorKitException):
    """Raised when an operation references a record id that does not exist."""

    def __init__(self, record_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize not found error.

        Args:
            record_id: ID of the missing record
            details: Additional context
        """
        details = details or {}
        details["record_id"] = record_id
        self.record_id = record_id
        super().__init__(f"Annotation not found: {record_id}", details)


class ConflictError(AnchorKitException):
    """Raised when a create collides with an existing record id."""

    def __init__(self, record_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize conflict error.

        Args:
            record_id: ID that already exists
            details: Additional context
        """
        details = details or {}
        details["record_id"] = record_id
        self.record_id = record_id
        super().__init__(f"Annotation already exists: {record_id}", details)


class RenderError(AnchorKitException):
    """Raised when a marker cannot be inserted into the document."""

    def __init__(
        self,
        message: str,
        record_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize render error.

        Args:
            message: Error message
            record_id: ID of the record whose marker failed
            details: Additional context
        """
        details = details or {}
        if record_id:
            details["record_id"] = record_id
        super().__init__(message, details)
