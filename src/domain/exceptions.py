"""
Domain exceptions - Semantic error types for email verification.

This module defines domain-specific exceptions that communicate
business rule violations and infrastructure failures without leaking
adapter details to callers.
"""


class VerificationError(Exception):
    """Base class for verification domain errors."""

    pass


class ValidationError(VerificationError):
    """Email is empty or cannot be stored as a single record."""

    pass


class ConflictError(VerificationError):
    """Email is already verified."""

    pass


class DispatchError(VerificationError):
    """Verification email could not be handed to the mail relay."""

    pass


class StorageError(VerificationError):
    """Verification store could not be read or written."""

    pass
