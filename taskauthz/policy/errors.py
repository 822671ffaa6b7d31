"""Error types raised by the policy engine and its enforcement adapter."""

from __future__ import annotations

UNAUTHENTICATED_ERROR = "UNAUTHENTICATED_ERROR"
UNAUTHORIZED_ERROR = "UNAUTHORIZED_ERROR"
NOT_FOUND_ERROR = "NOT_FOUND_ERROR"


class AppError(Exception):
    """
    Base error carrying an HTTP-style status and a stable machine-readable code.

    Adapters behind a network boundary render ``status_code`` and ``error_code``
    directly; nothing else about the failed check is exposed.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(AppError):
    """No principal is attached to the request."""

    status_code = 401
    error_code = UNAUTHENTICATED_ERROR
    default_message = "Authentication is required"


class UnauthorizedError(AppError):
    """A principal is present but no rule allowed the operation."""

    status_code = 403
    error_code = UNAUTHORIZED_ERROR
    default_message = "You are not authorized to perform this action"


class NotFoundError(AppError):
    status_code = 404
    error_code = NOT_FOUND_ERROR
    default_message = "Resource not found"


class MatrixConfigError(ValueError):
    """Raised when the authorization matrix source is invalid."""
