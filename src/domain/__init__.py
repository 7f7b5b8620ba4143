"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the email verification
workflow. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    ConflictError,
    DispatchError,
    StorageError,
    ValidationError,
    VerificationError,
)
from .ports import InsertResult, NotificationDispatcher, VerificationStore
from .verification import VerificationService

__all__ = [
    "ConflictError",
    "DispatchError",
    "InsertResult",
    "NotificationDispatcher",
    "StorageError",
    "ValidationError",
    "VerificationError",
    "VerificationService",
    "VerificationStore",
]
