"""Error types raised by services and auth dependencies.

Every error carries the HTTP status it maps to; ``main.py`` turns them into
``{"error": message, "status": code}`` responses.
"""

from typing import Optional


class ApiError(Exception):
    """Base exception for the property listing API."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    """Missing or invalid input."""

    status_code = 400


class ConflictError(ApiError):
    """A unique field (account email) is already taken."""

    status_code = 400


class AuthenticationError(ApiError):
    """Missing, invalid or expired credential, or a failed login."""

    status_code = 401


class PermissionDeniedError(ApiError):
    """Authenticated, but the role or ownership check failed."""

    status_code = 403


class NotFoundError(ApiError):
    """No matching non-deleted record."""

    status_code = 404
