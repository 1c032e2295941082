# app/services/email_service.py
# SMTP email service for delivering password reset tokens

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from app.config import SmtpConfig

logger = logging.getLogger(__name__)


class EmailService:
    """Sends reset emails over SMTP, or only logs when SMTP is not configured."""

    def __init__(self, smtp: SmtpConfig, frontend_url: str = "http://localhost:8080"):
        self.smtp = smtp
        self.frontend_url = frontend_url.rstrip("/")

    def send_email(self, to_email: str, subject: str, body: str) -> bool:
        """Send a plain-text email via SMTP."""
        if not self.smtp.enabled:
            logger.info(f"SMTP not configured, skipping email to {to_email}")
            return False
        try:
            msg = EmailMessage()
            msg["From"] = self.smtp.sender
            msg["To"] = to_email
            msg["Subject"] = subject
            msg.set_content(body)

            context = ssl.create_default_context()
            with smtplib.SMTP(self.smtp.host, self.smtp.port) as server:
                server.starttls(context=context)
                if self.smtp.user:
                    server.login(self.smtp.user, self.smtp.password)
                server.send_message(msg)
            logger.info(f"Email sent to {to_email}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    def send_password_reset_email(self, to_email: Optional[str], token: str, expire_hours: int = 24) -> bool:
        """Deliver a reset link. Accounts registered with a contact number only get nothing."""
        if not to_email:
            logger.warning("Password reset requested for an account without email, token not delivered")
            return False

        reset_url = f"{self.frontend_url}/reset-password?token={token}"
        body = f"""
Hello,

A password reset was requested for your account. Use the link below to choose a new password:

{reset_url}

This link will expire in {expire_hours} hours and can only be used once.

If you didn't request a password reset, please ignore this email.

Best regards,
The Yowyob Feedback Team
        """
        return self.send_email(to_email, "Reset your password", body.strip())
