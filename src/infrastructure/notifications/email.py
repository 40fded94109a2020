# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email over the SES SMTP relay.

Messages are sent with aiosmtplib as multipart plain text plus HTML.
Sending happens in FastAPI background tasks, so a delivery failure is
logged and reported through the returned status instead of raised.

Example:
    sender = EmailSender(get_settings().mail)
    await sender.send_welcome_email("ada@example.com", "Ada")
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum
from functools import lru_cache
from html import escape

import aiosmtplib

from src.core.config import get_settings
from src.core.config.settings import MailSettings

logger = logging.getLogger(__name__)

BRAND = "SkillUp"


class DeliveryStatus(str, Enum):
    """Outcome of a send attempt."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class EmailSender:
    """Async SMTP sender for platform emails.

    Attributes:
        _settings: Mail relay configuration.
    """

    def __init__(self, settings: MailSettings) -> None:
        self._settings = settings

    @property
    def enabled(self) -> bool:
        """Whether mail is switched on and the relay has credentials."""
        return bool(self._settings.enabled and self._settings.host and self._settings.user)

    async def send(self, to: str, subject: str, text: str, html: str) -> DeliveryStatus:
        """Send one message.

        Args:
            to: Recipient address.
            subject: Subject line.
            text: Plain text body.
            html: HTML body.

        Returns:
            SENT on success, SKIPPED when mail is disabled, FAILED on SMTP errors.
        """
        if not self.enabled:
            logger.info("Email disabled, dropping '%s' to %s", subject, to)
            return DeliveryStatus.SKIPPED

        message = self._build_message(to, subject, text, html)

        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.user,
                password=self._settings.password.get_secret_value(),
                use_tls=self._settings.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, str(e), exc_info=True)
            return DeliveryStatus.FAILED

        logger.info("Email sent to %s: %s", to, subject)
        return DeliveryStatus.SENT

    async def send_welcome_email(self, email: str, name: str) -> DeliveryStatus:
        """Greet a user an admin has just created."""
        subject = f"Welcome to {BRAND}!"
        text = (
            f"Hi {name},\n\n"
            f"Welcome to {BRAND}. Your learning journey starts here.\n"
            "Browse the course catalogue and enroll in your first course.\n\n"
            f"The {BRAND} Team"
        )
        body = (
            f"<p>Welcome to {BRAND}, your journey to mastering new skills starts here!</p>"
            "<p>Browse the course catalogue and enroll in your first course.</p>"
        )
        return await self.send(email, subject, text, self._render(subject, name, body))

    async def send_enrollment_confirmation(
        self,
        email: str,
        name: str,
        course_title: str,
    ) -> DeliveryStatus:
        """Confirm a student's new enrollment."""
        subject = f"You're enrolled in {course_title}"
        text = (
            f"Hi {name},\n\n"
            f"You are now enrolled in {course_title}.\n"
            "Your course materials and schedule are available in your dashboard.\n\n"
            f"The {BRAND} Team"
        )
        body = (
            f"<p>You are now enrolled in <strong>{escape(course_title)}</strong>.</p>"
            "<p>Your course materials and schedule are available in your dashboard.</p>"
        )
        return await self.send(email, subject, text, self._render(subject, name, body))

    def _build_message(self, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = f"{self._settings.from_name} <{self._settings.from_address}>"
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))
        return message

    def _render(self, title: str, name: str, body: str) -> str:
        """Wrap a body fragment in the common layout."""
        html = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(title)}</title></head>
<body style="font-family: Arial, sans-serif; color: #1F2937; background-color: #F3F4F6;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background-color: white; border-radius: 8px; padding: 32px;">
            <h1 style="color: #4F46E5; font-size: 24px;">{escape(title)}</h1>
            <p>Hi {escape(name)},</p>
            {body}
            <p style="font-size: 12px; color: #9CA3AF;">The {BRAND} Team</p>
        </div>
    </div>
</body>
</html>
        """
        return html.strip()


@lru_cache
def get_email_sender() -> EmailSender:
    """Get the process-wide sender built from settings."""
    return EmailSender(get_settings().mail)
