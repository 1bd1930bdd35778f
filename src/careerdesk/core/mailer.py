from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from careerdesk.config import Settings, get_settings
from careerdesk.core.errors import DeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, body: str) -> None: ...


class SmtpMailer:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def send(self, *, to: str, subject: str, body: str) -> None:
        if not self.settings.smtp_enabled:
            raise DeliveryError("SMTP is not configured")

        message = EmailMessage()
        message["From"] = self.settings.mail_sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as client:
                if self.settings.smtp_use_tls:
                    client.starttls()
                if self.settings.smtp_username:
                    client.login(self.settings.smtp_username, self.settings.smtp_password)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Mail delivery to %s failed: %s", to, exc)
            raise DeliveryError(str(exc)) from exc
        logger.info("Mail delivered to %s subject=%r", to, subject)
