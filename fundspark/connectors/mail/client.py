"""FundSpark — SMTP Pass-through Client.

Hands one message to the configured relay. No templating, queueing or retry.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from fundspark.config import settings
from fundspark.core.logging import get_logger

logger = get_logger("mail.client")


class MailDeliveryError(Exception):
    """Raised when the SMTP relay rejects or cannot take a message."""


class MailClient:
    """Thin wrapper over ``smtplib`` for the configured relay."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.user = user or settings.smtp_user
        self.password = password or settings.smtp_password
        self.sender = sender or settings.smtp_from or self.user

    def is_available(self) -> bool:
        return bool(self.host and self.sender)

    def _build(self, to: str, subject: str, text: Optional[str], html: Optional[str]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text or "")
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(message)

    async def send(
        self, to: str, subject: str, text: Optional[str] = None, html: Optional[str] = None
    ) -> None:
        if not self.is_available():
            raise MailDeliveryError("SMTP relay is not configured")
        message = self._build(to, subject, text, html)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email delivery failed: {e}")
            raise MailDeliveryError(str(e)) from e
        logger.info(f"Email sent to {to}")
