"""
bountera.errors — Domain Exceptions
====================================

Services raise these for business-rule violations; the API layer turns
them into ``{"success": false, "error": ...}`` responses using
:attr:`BounteraError.status_code`.  Anything that is not a
:class:`BounteraError` is treated as unexpected (HTTP 500).
"""

from __future__ import annotations

from typing import Any


class BounteraError(Exception):
    """Base class for all expected, client-facing failures."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(BounteraError):
    """A required field is missing or has an invalid value."""

    status_code = 400


class NotFoundError(BounteraError):
    """The referenced user or record does not exist."""

    status_code = 404


class ConflictError(BounteraError):
    """The write would violate a uniqueness rule."""

    status_code = 409


def require(value: Any, field: str) -> None:
    """Raise :class:`ValidationError` unless *value* is present and non-blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", {"field": field})
