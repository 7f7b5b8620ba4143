"""
Verification domain service - email verification state machine.

This module contains the core business logic for email verification,
coordinating the verification store with outbound notification.

Verification State Machine
==========================

States:
- UNVERIFIED: Initial, implicit state (no record in the store)
- VERIFIED: Terminal state (record present in the store)

Valid Transitions:
    UNVERIFIED -> VERIFIED   (successful confirm_verification)

Sending a verification link does not change state; there is no
persisted pending state. A second request can be issued freely.

Idempotency boundary: confirming an already-verified email raises
ConflictError instead of being silently accepted. The atomic
insert-if-absent of the store resolves concurrent confirmations,
so exactly one of them succeeds.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from .exceptions import ConflictError, ValidationError
from .ports import InsertResult, NotificationDispatcher, VerificationStore

logger = logging.getLogger(__name__)


@dataclass
class VerificationService:
    """
    Domain service for email verification.

    Orchestrates the three external actions against the store and
    the dispatcher: request a link, confirm, and query status.
    """

    store: VerificationStore
    dispatcher: NotificationDispatcher
    base_url: str = "http://localhost:8080"

    def request_verification(self, email: str) -> str:
        """
        Send a verification link to an unverified email address.

        Args:
            email: Email address to verify

        Returns:
            The verification link that was sent

        Raises:
            ValidationError: If email is empty or contains a line break or NUL
            ConflictError: If email is already verified
            DispatchError: If the email could not be sent (store untouched)
            StorageError: If the store cannot be read
        """
        self._validate_email(email)
        if self.store.contains(email):
            raise ConflictError(email)

        link = self.build_link(email)
        self.dispatcher.send(email, link)
        logger.info("Sent verification email to %s", email)
        return link

    def confirm_verification(self, email: str) -> None:
        """
        Record an email address as verified.

        Args:
            email: Email address from the verification link

        Raises:
            ValidationError: If email is empty or contains a line break or NUL
            ConflictError: If email is already verified
            StorageError: If the store cannot be read or written
        """
        self._validate_email(email)
        if self.store.contains(email):
            raise ConflictError(email)

        # Another confirmation may have won between contains() and insert()
        if self.store.insert(email) == InsertResult.ALREADY_PRESENT:
            raise ConflictError(email)
        logger.info("Email verified: %s", email)

    def query_status(self, email: str) -> bool:
        """
        Report whether an email address has been verified.

        Raises:
            ValidationError: If email is empty or contains a line break or NUL
            StorageError: If the store cannot be read
        """
        self._validate_email(email)
        return self.store.contains(email)

    def build_link(self, email: str) -> str:
        """Build the verification link, URL-encoding the email."""
        return f"{self.base_url.rstrip('/')}/verify?{urlencode({'email': email})}"

    def _validate_email(self, email: str) -> None:
        """
        Reject input that cannot be a verification key.

        Emails are compared by exact match; no normalization is applied.
        """
        if not email:
            raise ValidationError("Email is required")
        # Any str.splitlines() boundary (\n, \r, \x0b, \x85, \u2028, ...)
        if email.splitlines() != [email]:
            raise ValidationError("Email must not contain line breaks")
        if "\x00" in email:
            raise ValidationError("Email must not contain NUL characters")
