"""
Chat-specific exceptions.

Exception Hierarchy:
    NotFoundError (core)
    ├── UnknownAuthor - Message author id has no user
    ├── UnknownMessage - Reaction target message does not exist
    └── UnknownUser - Referenced user does not exist

    ConflictError (core)
    └── DuplicateUsername - Username already registered

All of them carry a machine-readable error code that the API returns
verbatim, e.g. {"error": "...", "error_code": "UNKNOWN_AUTHOR"}.
"""

from core.exceptions import ConflictError, NotFoundError


class UnknownAuthor(NotFoundError):
    """Raised when a message is posted by an author id with no user."""

    default_error_code: str = "UNKNOWN_AUTHOR"


class UnknownMessage(NotFoundError):
    """Raised when a reaction references a message that does not exist."""

    default_error_code: str = "UNKNOWN_MESSAGE"


class UnknownUser(NotFoundError):
    """Raised when an operation references a user that does not exist."""

    default_error_code: str = "UNKNOWN_USER"


class DuplicateUsername(ConflictError):
    """Raised when registering a username that is already taken."""

    default_error_code: str = "DUPLICATE_USERNAME"
