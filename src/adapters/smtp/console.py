"""
Console dispatcher adapter - Implements NotificationDispatcher protocol.

This module provides a console-based implementation of the domain's
dispatcher port, logging verification links instead of sending mail.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationDispatcher:
    """
    Implements NotificationDispatcher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For local development - selected with DISPATCHER_BACKEND=console.
    """

    def send(self, email: str, link: str) -> None:
        """
        Log verification link to console (simulates email delivery).

        The link is logged at INFO level to be visible in server logs.

        Args:
            email: Recipient email address
            link: Verification link
        """
        logger.info("[VERIFICATION] Email: %s Link: %s", email, link)
