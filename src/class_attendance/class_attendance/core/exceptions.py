from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(ValidationError):
    """Raised when a referenced entity (lesson, student) does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class SourceUnavailable(DomainError):
    """A schedule source could not be fetched.

    Only used for recoverable sources: the aggregator reports it as a warning
    and treats the source as empty.
    """

    def __init__(self, source: str, group_id: Optional[int] = None):
        self.source = source
        self.group_id = group_id
        label = f"{source} (group {group_id})" if group_id is not None else source
        super().__init__(f"Schedule source unavailable: {label}")


class PersistenceError(DomainError):
    """Raised when attendance could not be saved."""
