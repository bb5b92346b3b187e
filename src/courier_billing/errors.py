"""Typed errors raised by the billing core.

Every failure in the services and repositories surfaces as one of these
classes. Nothing here retries or swallows; the HTTP layer maps each class to a
status code and an ``{"success": false, "error": ...}`` envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class BillingError(Exception):
    """Base class for all billing-domain errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(BillingError):
    """Missing or malformed input, out-of-range values, unknown service types."""

    status_code = 400


class DuplicateValueError(ValidationError):
    """A unique customer field (locker code, email, identity) is already taken."""

    def __init__(self, field: str, value: Any, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"A customer with {field} '{value}' already exists",
            details={"field": field, "value": value},
        )
        self.field = field
        self.value = value


class NotFoundError(BillingError):
    status_code = 404


class ConflictError(BillingError):
    """The requested state change is not allowed for the current record state."""

    status_code = 409


class RenderError(BillingError):
    status_code = 500


class RepositoryError(BillingError):
    """Opaque failure of the underlying storage."""

    status_code = 503
