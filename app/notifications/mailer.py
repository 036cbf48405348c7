"""
app/notifications/mailer.py

SMTP mail transport (STARTTLS, HTML bodies).
"""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from app.config import MailSettings
from app.notifications.base import NotificationError

logger = logging.getLogger(__name__)


class SMTPMailer:
    """
    Sends HTML email through one SMTP connection per message.
    """

    def __init__(self, settings: MailSettings) -> None:
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def send(self, recipient: str, subject: str, body: str) -> bool:
        if not self._settings.is_configured:
            logger.warning("SMTP mailer not configured; dropping email to=%s subject=%s", recipient, subject)
            return False
        if not recipient:
            raise NotificationError("Recipient email address is empty.")

        message = self._build_message(recipient, subject, body)
        try:
            with smtplib.SMTP(
                self._settings.host,
                self._settings.port,
                timeout=self._settings.timeout_seconds,
            ) as server:
                server.starttls()
                server.login(self._settings.username or "", self._settings.password or "")
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP send to {recipient} failed: {exc}") from exc

        logger.info("Email sent to=%s subject=%s", recipient, subject)
        return True

    def _build_message(self, recipient: str, subject: str, body: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self._settings.from_name, self._settings.username or ""))
        message["To"] = recipient
        message["Subject"] = subject
        message.attach(MIMEText(body, "html", "utf-8"))
        return message
