# sponsoring/core/email.py
"""
Outbound email for sponsor notifications.

Services depend on the `EmailService` interface only, so a missing Resend
configuration simply means no email service is injected.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import resend

from sponsoring.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str


class EmailService(ABC):
    """Sends a single message and reports the outcome as a result dict."""

    @abstractmethod
    def send(self, message: EmailMessage) -> Dict[str, Any]:
        """
        Send an email.

        Returns:
            {"success": True, "id": ...} or {"success": False, "error": "..."}
        """
        pass


class ResendEmailService(EmailService):
    """Email service backed by the Resend API."""

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    def send(self, message: EmailMessage) -> Dict[str, Any]:
        resend.api_key = self.api_key

        params: Dict[str, Any] = {
            "from": self.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }

        try:
            response = resend.Emails.send(params)
            logger.info(f"Email sent to {message.to}: {message.subject}")
            return {"success": True, "id": response.get("id")}
        except Exception as e:
            logger.error(f"Failed to send email to {message.to}: {e}")
            return {"success": False, "error": str(e)}


def get_email_service() -> Optional[EmailService]:
    """Build the configured email service, or None when email is disabled."""
    if not settings.EMAIL_ENABLED:
        return None
    return ResendEmailService(
        api_key=settings.RESEND_API_KEY,
        from_address=f"{settings.EMAIL_FROM_NAME} <noreply@{settings.RESEND_FROM_DOMAIN}>",
    )
