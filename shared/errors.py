"""
Shared error handling for the Delegate Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(AccessLayerException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(AccessLayerException):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, kind: str, key: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", f"{kind} '{key}' not found", {"kind": kind, "key": key, **(details or {})})


class AccessDeniedError(AccessLayerException):
    """The delegate's package does not admit them to the event."""

    status_code = 403

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__("CHECKIN_DENIED", message, details)


class AlreadyCheckedInError(AccessLayerException):
    """The delegate already holds a check-in timestamp for the event."""

    status_code = 409

    def __init__(self, delegate_id: str, event_id: str, checked_in_at: str):
        self.checked_in_at = checked_in_at
        super().__init__(
            "ALREADY_CHECKED_IN",
            f"Delegate '{delegate_id}' already checked in to '{event_id}' at {checked_in_at}",
            {"delegate_id": delegate_id, "event_id": event_id, "checked_in_at": checked_in_at}
        )

