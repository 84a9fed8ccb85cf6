"""
Domain exceptions for the order lifecycle.

Each exception carries the HTTP status it maps to so the API layer can
render it without a lookup table.
"""
from typing import Any, Optional

from fastapi import status


class BackofficeError(Exception):
    """Base exception for all order platform errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "bad_request"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        body: dict[str, Any] = {
            "detail": self.message,
            "error": self.error_code,
        }
        if self.details:
            body["details"] = self.details
        return body


class OrderValidationError(BackofficeError):
    """Malformed cart, bad total, bad rating or malformed identifier."""

    error_code = "validation_error"


class InvalidStatusError(OrderValidationError):
    """Status value outside the enum, or a transition the policy forbids."""

    error_code = "invalid_status"


class NotFoundError(BackofficeError):
    """Order or product reference could not be resolved."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class UnauthorizedError(BackofficeError):
    """No valid identity attached to the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"


class ForbiddenError(BackofficeError):
    """Identity is valid but lacks the admin role."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class NotEligibleError(BackofficeError):
    """Order exists but is not in a state that allows a review."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_eligible"


class AlreadyReviewedError(BackofficeError):
    """Review flag was already set on the order."""

    error_code = "already_reviewed"
