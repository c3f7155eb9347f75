"""Ledger error taxonomy and API error response helpers."""

from typing import Any, Dict

from fastapi import HTTPException, status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or inconsistent input (allocation, payment update, ...).

    The message names the invariant that failed so a form can highlight it.
    """

    def __init__(self, message: str):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST)


class NotFoundError(AppError):
    """Reference to a record that does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """Write rejected by a uniqueness rule (duplicate username, membership)."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, "conflict", status.HTTP_409_CONFLICT)


class InternalError(AppError):
    """Unexpected ledger store failure. Never retried."""

    def __init__(self, message: str = "Internal ledger error"):
        super().__init__(message, "internal_error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


def raise_app_error(error: AppError) -> None:
    """Raise an HTTPException from an AppError."""
    raise HTTPException(
        status_code=error.http_status,
        detail=error_response(error),
    ) from error


__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "error_response",
    "raise_app_error",
]
