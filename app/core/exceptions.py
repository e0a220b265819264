"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single place where unexpected failures become generic 500 responses

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Referenced resource does not exist
    └── ConflictError - State conflicts (duplicates)

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError(
        "Message 42 does not exist",
        error_code="UNKNOWN_MESSAGE",
        details={"message_id": 42},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, parsing, etc.).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, ids, etc.)
        status_code: HTTP status used when the error reaches the API layer
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Author 99 does not exist",
                "error_code": "UNKNOWN_AUTHOR",
                "details": {"author_id": 99}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails outside of a DRF serializer.

    Example:
        raise ValidationError(
            "Validation failed",
            details={"limit": ["Must be a positive integer"]},
        )
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a referenced resource does not exist.

    Referential failures on writes are client errors in this service,
    so the status stays 400 rather than 404.
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current state.

    Example:
        raise ConflictError(
            "Username already taken",
            error_code="DUPLICATE_USERNAME",
            details={"username": "Mozzy"},
        )
    """

    default_error_code: str = "CONFLICT"
    status_code: int = status.HTTP_409_CONFLICT


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    DRF exception handler with consistent error format.

    - DRF's own exceptions (parse errors, serializer validation) keep
      their default handling.
    - BaseApplicationError subclasses map to their status_code.
    - Anything else is logged and reported as a generic 500 without
      leaking internal state.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    view = context.get("view")
    logger.exception(
        f"Unhandled API error in {view.__class__.__name__ if view else 'unknown view'}: "
        f"{type(exc).__name__}"
    )
    return Response(
        {"error": "Internal server error", "error_code": "SERVER_ERROR"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
