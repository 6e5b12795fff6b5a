"""Shared domain error messages and error types."""

import traceback
from typing import Any, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Every subclass carries a stable ``code`` so callers can branch on the
    category without parsing the message.
    """

    code = "domain_error"


class ValidationError(DomainError):
    """Invalid, missing or out-of-range input."""

    code = "validation_error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.details = details or {}


class NotFoundError(DomainError):
    """Referenced entity, profile or transaction does not exist."""

    code = "not_found"


class ConflictError(DomainError):
    """Deletion blocked by dependents, or a transition on an ineligible state."""

    code = "conflict"


class StorageError(DomainError):
    """The underlying store failed while executing an operation."""

    code = "storage_error"


def serialize_error(error: DomainError, include_trace: bool = False) -> dict[str, Any]:
    """Render an error as a response body.

    Args:
        error: Error to serialize
        include_trace: Attach the formatted traceback (non-production only)

    Returns:
        Dict of the form {"error": {"code", "message", ...}}
    """
    body: dict[str, Any] = {
        "code": getattr(error, "code", DomainError.code),
        "message": str(error),
    }
    if isinstance(error, ValidationError):
        if error.field is not None:
            body["field"] = error.field
        if error.details:
            body["details"] = error.details
    if include_trace:
        body["trace"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return {"error": body}


def entity_not_found(entity: str, entity_id: int) -> str:
    """Return message for a missing entity."""
    return f"{entity} with ID {entity_id} not found"


def active_profile_not_found(profile_id: int) -> str:
    """Return message when a profile is missing or no longer active."""
    return f"Active profiler profile with ID {profile_id} not found"


def delete_blocked(entity: str, entity_id: int, dependent_count: int, dependent: str) -> str:
    """Return message when an entity has dependent rows."""
    plural = "s" if dependent_count != 1 else ""
    return (
        f"Cannot delete {entity} {entity_id}: it has {dependent_count} {dependent}{plural}. "
        "Please delete them first."
    )


def invalid_range(field: str, low: Any, high: Any) -> str:
    """Return message for a range filter whose lower bound exceeds its upper bound."""
    return f"Invalid {field} range: minimum {low} is greater than maximum {high}"
