"""Domain exceptions shared by every service of the choir backend.

Each exception carries the HTTP status code the API layer answers with, so
services raise them directly and the application factory translates them.
"""

from typing import Optional


class ChoirError(Exception):
    """Base exception for all choir backend errors."""

    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ChoirError):
    """Raised when input is missing or malformed."""

    status_code = 400


class AuthError(ChoirError):
    """Raised for bad credentials or an unusable session token."""

    status_code = 401


class ForbiddenError(ChoirError):
    """Raised when the caller is known but not allowed to proceed."""

    status_code = 403


class NotFoundError(ChoirError):
    """Raised when a requested record does not exist."""

    status_code = 404


class ConflictError(ChoirError):
    """Raised for duplicate unique keys or entities already past review."""

    status_code = 409


class DeliveryError(ChoirError):
    """Raised when an outbound collaborator (mail transport) fails."""

    status_code = 500
