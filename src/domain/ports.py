"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol


class InsertResult(Enum):
    """
    Result of an insert-if-absent on the verification store.

    Used by confirm_verification() to tell a fresh record apart from one
    committed by a concurrent caller.
    """

    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"


class VerificationStore(Protocol):
    """Port interface for the durable set of verified email addresses."""

    def contains(self, email: str) -> bool:
        """
        Check whether a verification record exists for an email.

        Reflects every insert() that returned before this call,
        including inserts made by other threads.

        Args:
            email: Email address, compared by exact match

        Returns:
            True if the email has been verified

        Raises:
            StorageError: If the store cannot be read
        """
        ...

    def insert(self, email: str) -> InsertResult:
        """
        Atomically add a verification record if none exists.

        Membership check and write happen as one indivisible operation,
        so concurrent callers can never produce two records for one email.

        Args:
            email: Email address to record as verified

        Returns:
            INSERTED if the record was written, ALREADY_PRESENT otherwise

        Raises:
            StorageError: If the store cannot be read or written
        """
        ...

    def ping(self) -> None:
        """
        Check that the store is reachable.

        Raises:
            StorageError: If the store cannot be accessed
        """
        ...


class NotificationDispatcher(Protocol):
    """Port interface for verification email delivery."""

    def send(self, email: str, link: str) -> None:
        """
        Send a single verification email containing the link.

        At most one delivery attempt is made; there is no retry.

        Args:
            email: Recipient email address
            link: Verification link to embed in the message

        Raises:
            DispatchError: If credentials are missing or delivery fails
        """
        ...
