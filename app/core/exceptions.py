# app/core/exceptions.py
"""
Booking domain exceptions.

InvalidInputError, NotFoundError and SlotUnavailableError are expected
control flow and map to distinct client responses. InternalError is the
only unexpected failure and is safe for the caller to retry with backoff.
"""
from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response_body(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(DomainException):
    """Missing or malformed request fields. Not retried."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_INPUT"


class NotFoundError(DomainException):
    """A referenced entity (package, rule) does not exist for this coach."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class SlotUnavailableError(DomainException):
    """The requested interval overlaps an active booking for the coach.

    The interval is stale; clients should re-fetch slots rather than
    retrying the same one.
    """

    status_code = status.HTTP_409_CONFLICT
    default_code = "SLOT_UNAVAILABLE"

    def __init__(
        self,
        message: str = "This time slot is no longer available",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details.setdefault("action", "refresh_slots")
        super().__init__(message, code=code, details=details)


class InternalError(DomainException):
    """Storage or infrastructure failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL"


class BookingConflictError(Exception):
    """Raised by the store when an insert violates the overlap-exclusion constraint."""

    def __init__(self, constraint_name: str = ""):
        self.constraint_name = constraint_name
        super().__init__(f"Booking overlaps an existing reservation ({constraint_name or 'unknown constraint'})")
