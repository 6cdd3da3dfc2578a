from __future__ import annotations

from typing import Any, Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced member, payment or admin does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with a unique constraint."""


class BusinessRuleError(DomainError):
    """Raised when a request is well-formed but the gym's rules refuse it."""

    def __init__(self, reason: RejectionReason, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.reason = reason
        self.details = details or {}


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class RateLimitExceeded(DomainError):
    """Raised when a client exceeds its request budget."""
