"""SMTP adapters - Verification email dispatchers."""

from .console import ConsoleNotificationDispatcher
from .relay import SmtpNotificationDispatcher

__all__ = ["ConsoleNotificationDispatcher", "SmtpNotificationDispatcher"]
