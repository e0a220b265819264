"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the domain apps:

- Generic, reusable base classes (no domain-specific logic)
- Clear extension points for domain apps
- Infrastructure concerns separated from business logic

Services (import from core.services):
    - BaseService: Base class for service layer (logger, lock, validation)
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError: Input validation failures
    - NotFoundError: Referenced resource does not exist
    - ConflictError: State conflicts (duplicates, etc.)
    - api_exception_handler: DRF exception handler

Views (import from core.views):
    - health_check: Liveness endpoint with per-app probes

Usage:
    from core.services import BaseService, ServiceResult
    from core.exceptions import NotFoundError

    class UnknownMessage(NotFoundError):
        default_error_code = "UNKNOWN_MESSAGE"

    class ReactionService(BaseService):
        def add(self, message_id: int) -> ServiceResult[dict]:
            try:
                ...
            except UnknownMessage as exc:
                return ServiceResult.from_error(exc)

Note:
    Business logic should NOT go here. Extend core classes in your domain apps.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no app registry dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
]
