# backend/drivigo/services/email.py
"""
Email Service for the Drivigo platform

Sends notification emails through Resend, or logs them when the console
provider is selected (local development and tests).
"""

import html
import logging
import re
from typing import Any, Dict, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)

_EMAIL_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #3B82F6; color: white; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; background: #f9f9f9; }}
    .footer {{ padding: 20px; text-align: center; font-size: 12px; color: #666; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{brand}</h1>
    </div>
    <div class="content">
      <h2>Hi {name},</h2>
      <p>{message}</p>
      <p>Best regards,<br>Team {brand}</p>
    </div>
    <div class="footer">
      <p>This is an automated message from {brand}. Please do not reply to this email.</p>
    </div>
  </div>
</body>
</html>
"""


def render_notification_email(message: str, user_name: Optional[str] = None) -> str:
    """Wrap a notification message in the branded HTML layout."""
    return _EMAIL_TEMPLATE.format(
        brand=BRAND_NAME,
        name=html.escape(user_name or "User"),
        message=html.escape(message),
    )


class EmailService(BaseService):
    """
    Service for sending emails.

    ``EMAIL_PROVIDER=resend`` uses the Resend API; ``console`` only logs.
    """

    def __init__(self, db: Session, provider: Optional[str] = None):
        super().__init__(db)
        self.provider = (provider or settings.email_provider).lower()
        self.from_email = settings.from_email

        if self.provider == "resend":
            if settings.resend_api_key:
                resend.api_key = settings.resend_api_key
            else:
                self.logger.info("Email delivery disabled - Resend API key not configured")

    @property
    def enabled(self) -> bool:
        return self.provider == "console" or bool(settings.resend_api_key)

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability."""
        text = re.sub(r"<style.*?</style>", "", html_content, flags=re.S)
        text = re.sub(r"<br\s*/?>", "\n", text)
        text = re.sub(r"<[^>]+>", "", text)
        text = re.sub(r"[ \t]+", " ", text)
        text = re.sub(r"\n\s*\n+", "\n\n", text)
        return html.unescape(text.strip())

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email.

        Raises:
            ServiceException: If the provider is not configured or rejects the send
        """
        if not self.enabled:
            raise ServiceException("Email delivery not configured")

        if not text_content:
            text_content = self._html_to_text(html_content)

        if self.provider == "console":
            self.logger.info(
                "Console email to %s - Subject: %s\n%s", to_email, subject, text_content
            )
            return {"id": None, "provider": "console"}

        try:
            response = resend.Emails.send(
                {
                    "from": self.from_email,
                    "to": to_email,
                    "subject": subject,
                    "html": html_content,
                    "text": text_content,
                }
            )
        except Exception as e:
            self.logger.error("Failed to send email to %s: %s", to_email, e)
            self.log_operation("email_failed", to_email=to_email, subject=subject, error=str(e))
            raise ServiceException(f"Email sending failed: {e}") from e

        self.logger.info("Email sent successfully to %s - Subject: %s", to_email, subject)
        self.log_operation("email_sent", to_email=to_email, subject=subject)
        if isinstance(response, dict):
            return dict(response)
        return {"id": getattr(response, "id", None)}

    @BaseService.measure_operation("send_notification_email")
    def send_notification_email(
        self, to_email: str, subject: str, message: str, user_name: Optional[str] = None
    ) -> Dict[str, Any]:
        return self.send_email(
            to_email=to_email,
            subject=subject,
            html_content=render_notification_email(message, user_name),
            text_content=(
                f"Hi {user_name or 'User'},\n\n{message}\n\nBest regards,\nTeam {BRAND_NAME}"
            ),
        )
