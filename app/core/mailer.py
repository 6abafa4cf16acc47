

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional, Protocol

from app.core.config import Settings


logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """Anything able to deliver one HTML email."""

    async def send(self, sender: str, recipient: str, subject: str, html: str) -> Optional[str]:
        ...


class SmtpMailTransport:
    """
    SMTP relay transport.

    Port 465 uses implicit TLS; any other port connects in plain text and
    upgrades with STARTTLS when the server offers it.
    """

    def __init__(self, host: str, port: int, user: str, password: str, timeout: float = 30.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["SmtpMailTransport"]:
        """
        Build a transport from settings.

        Returns:
            Optional[SmtpMailTransport]: None unless host, port, user and
            password are all configured.
        """
        if not settings.smtp_configured:
            return None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_pass,
            timeout=settings.smtp_timeout,
        )

    @property
    def secure(self) -> bool:
        return self.port == 465

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def _deliver(self, message: EmailMessage) -> None:
        with self._connect() as server:
            if not self.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(self.user, self.password)
            server.send_message(message)

    async def send(self, sender: str, recipient: str, subject: str, html: str) -> Optional[str]:
        """
        Send an HTML email.

        Args:
            sender: From address.
            recipient: To address.
            subject: Subject line.
            html: HTML body.

        Returns:
            Optional[str]: Message-ID of the sent message.

        Raises:
            smtplib.SMTPException, OSError: If the relay cannot be reached or
            refuses the message.
        """
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = sender
        message["To"] = recipient
        message["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] or None)
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(html, subtype="html")

        await asyncio.to_thread(self._deliver, message)
        logger.info(f"Sent email to {recipient} via {self.host}:{self.port}")
        return message["Message-ID"]
