"""Outgoing email over async SMTP.

Unlike a best-effort notification channel, :meth:`Mailer.send` raises on any
transport failure so callers can roll back whatever depended on the email
being delivered.
"""

import logging
from email.mime.text import MIMEText

import aiosmtplib
from fastapi import Request

from authflow.core.config import AuthConfig

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP transport rejects or fails to deliver a message."""


class Mailer:
    def __init__(self, config: AuthConfig) -> None:
        self._config = config

    def build_message(self, email: str, subject: str, message: str) -> MIMEText:
        mime = MIMEText(message, "plain", "utf-8")
        mime["From"] = self._config.email_from
        mime["To"] = email
        mime["Subject"] = subject
        return mime

    async def send(self, email: str, subject: str, message: str) -> None:
        """Send a plain text email.

        Args:
            email: Recipient address.
            subject: Subject line.
            message: Plain text body.

        Raises:
            EmailDeliveryError: If the SMTP server cannot be reached or refuses the message.
        """
        mime = self.build_message(email, subject, message)
        try:
            await aiosmtplib.send(
                mime,
                hostname=self._config.email_host,
                port=self._config.email_port,
                username=self._config.email_username or None,
                password=self._config.email_password or None,
                start_tls=self._config.email_use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Could not send email to {email}") from exc

        logger.info("Email sent to %s: %s", email, subject)


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
