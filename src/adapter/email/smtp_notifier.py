"""SMTP implementation of NotificationPort.

Uses aiosmtplib for asynchronous email sending via SMTP.
"""

import html
import logging
import os
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Our Platform!"


class SMTPSettings(BaseModel):
    """Configuration settings for the SMTP sender."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False
    sender_email: str = "no-reply@localhost"
    sender_name: str = "The Team"
    timeout: int = 10

    @classmethod
    def from_env(cls) -> Optional["SMTPSettings"]:
        """Build settings from SMTP_* variables. None when SMTP_HOST is unset."""
        host = os.getenv("SMTP_HOST")
        if not host:
            return None
        return cls(
            host=host,
            port=int(os.getenv("SMTP_PORT", "587")),
            username=os.getenv("SMTP_USERNAME") or None,
            password=os.getenv("SMTP_PASSWORD") or None,
            use_tls=os.getenv("SMTP_USE_TLS", "true").lower() == "true",
            use_ssl=os.getenv("SMTP_USE_SSL", "false").lower() == "true",
            sender_email=os.getenv("SMTP_SENDER_EMAIL", "no-reply@localhost"),
            sender_name=os.getenv("SMTP_SENDER_NAME", "The Team"),
            timeout=int(os.getenv("SMTP_TIMEOUT", "10")),
        )


def build_welcome_message(settings: SMTPSettings, to_email: str, display_name: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["Subject"] = WELCOME_SUBJECT
    message["From"] = f"{settings.sender_name} <{settings.sender_email}>"
    message["To"] = f"{display_name} <{to_email}>"

    text_body = (
        f"Welcome, {display_name}!\n\n"
        "Thank you for registering with us. We are excited to have you on board!\n"
        "If you have any questions, feel free to reply to this email.\n\n"
        "Best regards,\nThe Team\n"
    )
    safe_name = html.escape(display_name)
    html_body = (
        f"<h1>Welcome, {safe_name}!</h1>"
        "<p>Thank you for registering with us. We are excited to have you on board!</p>"
        "<p>If you have any questions, feel free to reply to this email.</p>"
        "<br/><p>Best regards,<br/>The Team</p>"
    )

    message.attach(MIMEText(text_body, "plain"))
    message.attach(MIMEText(html_body, "html"))
    return message


class SmtpWelcomeNotifier:
    """Sends the welcome email over SMTP.

    Errors are logged and re-raised; the caller decides whether they matter.
    """

    def __init__(self, settings: SMTPSettings):
        self.settings = settings

    async def send_welcome(self, email: str, display_name: str) -> None:
        message = build_welcome_message(self.settings, email, display_name)

        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.host,
                port=self.settings.port,
                use_tls=self.settings.use_ssl,  # aiosmtplib uses use_tls for SSL/TLS on connection
                start_tls=False,
                timeout=self.settings.timeout,
            ) as smtp:
                if self.settings.use_tls and not self.settings.use_ssl:
                    await smtp.starttls()

                if self.settings.username:
                    await smtp.login(self.settings.username, self.settings.password or "")
                await smtp.send_message(message)
        except aiosmtplib.SMTPException as e:
            logger.error("Failed to send welcome email", extra={
                "email": email, "host": self.settings.host, "error": str(e),
            })
            raise

        logger.info("Welcome email sent", extra={"email": email})
