"""
SMTP relay dispatcher adapter - Implements NotificationDispatcher protocol.

Sends the verification email through an authenticated SMTP relay.
Missing credentials are reported per call as DispatchError rather than
failing application startup.
"""

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import getaddresses

from src.domain.exceptions import DispatchError

logger = logging.getLogger(__name__)

_HTML_TEMPLATE = (
    "<html><body>"
    "<h1>{subject}</h1>"
    "<p>Click the link below to verify your email:</p>"
    '<a href="{link}">Verify Email</a>'
    "</body></html>"
)


class SmtpNotificationDispatcher:
    """
    Implements NotificationDispatcher protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Upgrades the connection with STARTTLS when the relay advertises it.
    """

    def __init__(
        self,
        host: str | None,
        port: int | None,
        username: str | None,
        password: str | None,
        from_address: str | None = None,
        subject: str = "Email Verification",
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from_address = from_address
        self._subject = subject
        self._timeout = timeout

    def send(self, email: str, link: str) -> None:
        """
        Send one verification email. No retry is attempted.

        Raises:
            DispatchError: If a credential is unset, the address is not a
                single mailbox, or if composing, connecting,
                authenticating or transmitting fails (including timeout)
        """
        missing = [
            name
            for name, value in (
                ("SMTP_HOST", self._host),
                ("SMTP_PORT", self._port),
                ("SMTP_USER", self._username),
                ("SMTP_PASSWORD", self._password),
            )
            if not value
        ]
        if missing:
            raise DispatchError(f"SMTP settings are not set: {', '.join(missing)}")

        try:
            # One recipient only: the To header must not smuggle in extra addresses
            addresses = getaddresses([email])
            if len(addresses) != 1 or addresses[0][1] != email:
                raise DispatchError(f"Not a single email address: {email!r}")
            message = self.compose(email, link)
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
                client.ehlo()
                if client.has_extn("starttls"):
                    client.starttls(context=ssl.create_default_context())
                    client.ehlo()
                client.login(self._username, self._password)
                client.send_message(message, to_addrs=[email])
        except (ValueError, IndexError) as e:
            # Raised by the address and header parsers for values they cannot handle
            raise DispatchError(f"Cannot compose verification email to {email!r}: {e}") from e
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(f"SMTP delivery to {email} failed: {e}") from e

        logger.debug("Relayed verification email to %s via %s", email, self._host)

    def compose(self, email: str, link: str) -> EmailMessage:
        """Build the HTML message with a plain-text fallback."""
        message = EmailMessage()
        message["From"] = self._from_address or self._username
        message["To"] = email
        message["Subject"] = self._subject
        message.set_content(f"Open the link below to verify your email:\n\n{link}\n")
        message.add_alternative(
            _HTML_TEMPLATE.format(
                subject=html.escape(self._subject),
                link=html.escape(link, quote=True),
            ),
            subtype="html",
        )
        return message
