"""
Custom application exceptions.
"""
from typing import Optional


class BrigadeAppException(Exception):
    """Base exception for the journal service."""
    pass


class UserNotFoundError(BrigadeAppException):
    """Raised when a user is not found."""
    pass


class EntryNotFoundError(BrigadeAppException):
    """Raised when a journal entry is not found."""
    pass


class UnauthorizedError(BrigadeAppException):
    """Raised when the caller cannot be authenticated."""
    pass


class InsufficientTierError(BrigadeAppException):
    """Raised when the caller's membership tier is below the required one."""

    def __init__(self, required_tier: str, current_tier: Optional[str]):
        super().__init__(
            f"This content requires {required_tier.upper()} membership "
            f"(current tier: {(current_tier or 'free').upper()})"
        )
        self.required_tier = required_tier
        self.current_tier = current_tier


class ValidationError(BrigadeAppException):
    """Raised when validation fails."""
    pass


class PromptListEmptyError(BrigadeAppException):
    """Raised when a daily prompt is requested from an empty prompt list."""
    pass


class RecordStoreError(BrigadeAppException):
    """Raised when the remote record store cannot complete an operation."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Record store {operation} failed: {type(cause).__name__}: {cause}")
        self.operation = operation
        self.cause = cause
