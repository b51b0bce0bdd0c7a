"""Shared domain components.

This module exports shared exceptions and time helpers used across
domain boundaries.
"""

from lemon.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from lemon.domain.shared.time import ensure_tz_aware, utc_now

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "BusinessRuleViolation",
    "EntityNotFoundError",
    "ConflictError",
    "PermissionDeniedError",
    "RateLimitExceededError",
    # Utilities
    "ensure_tz_aware",
    "utc_now",
]
