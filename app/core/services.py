"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and state.
    Views handle HTTP concerns, the store holds data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, referential checks)
    - Exceptions: Use for unexpected failures (bugs, broken invariants)

Usage:
    from core.services import BaseService, ServiceResult

    class UserService(BaseService):
        def register(self, username: str) -> ServiceResult[User]:
            try:
                with self.atomic():
                    user = self.store.create_user(username)
            except ConflictError as exc:
                return ServiceResult.from_error(exc)

            self.get_logger().info(f"Registered user {user.id}")
            return ServiceResult.success(user)

    # In view
    result = service.register(username)
    if result.success:
        return Response(UserSerializer(result.data).data, status=201)
    return failure_response(result)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator

    from core.exceptions import BaseApplicationError

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, unknown references).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        status_code: HTTP status a view should use for this failure

    Usage:
        result = MessageService.post_message(...)
        if result.success:
            message = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    status_code: int = 400

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        status_code: int = 400,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            status_code: HTTP status for the view layer

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
            status_code=status_code,
        )

    @classmethod
    def from_error(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from a domain exception.

        The exception's error code and status code are carried over so
        views do not need to know the exception hierarchy. Field errors are
        kept only for ValidationError; other details stay server-side.
        """
        errors = (exc.details or None) if isinstance(exc, ValidationError) else None
        return cls.failure(
            exc.message,
            error_code=exc.error_code,
            errors=errors,
            status_code=exc.status_code,
        )


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - A serialization boundary shared by every service touching the same state

    Usage:
        class ReactionService(BaseService):
            def add(self, ...):
                with self.atomic():
                    # mutation and the broadcast describing it happen together
                    ...

    Design Notes:
        - Services that share state must share the same lock
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    def __init__(self, lock: threading.RLock | None = None):
        self._lock = lock or threading.RLock()

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """
        Execute operations inside the service's serialization boundary.

        Every mutation performed in this block, and any broadcast issued
        from it, is observed by other callers as a single step.
        """
        with self._lock:
            yield

    @classmethod
    def validate_required(cls, **kwargs) -> ServiceResult | None:
        """
        Validate that required fields are provided.

        Returns a failure result if any required field is None or empty.
        Returns None if all fields are valid.

        Example:
            validation = cls.validate_required(content=content)
            if validation is not None:
                return validation
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.from_error(
                ValidationError("Required fields missing", details=errors)
            )
        return None
