# backend/yuthukama/services/mailer.py
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class SMTPConfig:
    host: str
    port: int = 587
    user: str | None = None
    password: str | None = None
    use_tls: bool = True
    sender: str | None = None
    timeout: float = 30.0

    @property
    def from_address(self) -> str:
        return self.sender or self.user or "no-reply@localhost"


class EmailDispatcher:
    """Sends transactional HTML email over SMTP."""

    def __init__(self, config: SMTPConfig):
        self.config = config

    def build(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.config.from_address
        msg["To"] = to
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid()
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, html: str) -> str:
        """Send one email and return its Message-ID."""
        msg = self.build(to, subject, html)
        try:
            with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout) as smtp:
                if self.config.use_tls:
                    smtp.starttls()
                if self.config.user and self.config.password:
                    smtp.login(self.config.user, self.config.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to, e)
            raise EmailDeliveryError("Email could not be sent") from e

        logger.info("Email sent successfully: %s", msg["Message-ID"])
        return msg["Message-ID"]
