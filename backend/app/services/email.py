# backend/app/services/email.py
"""
Resend-backed email sender.

Satisfies the ``send(to, subject, body)`` contract NotificationService
expects. Construction fails with ``ServiceException`` when no API key is
set, so a misconfigured deployment is caught when senders are wired.
"""

import logging
import re
from typing import Any, Dict, Optional

import resend

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    """Crude plain-text alternative: strip tags and collapse whitespace."""
    return _WHITESPACE.sub(" ", _TAG.sub("", html)).strip()


class EmailService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.logger = logging.getLogger(self.__class__.__name__)

        if not self.settings.resend_api_key:
            raise ServiceException("Resend API key not configured")

        resend.api_key = self.settings.resend_api_key
        self.from_email = self.settings.from_email

    @BaseService.measure_operation("send_email")
    def send(self, to: str, subject: str, body: str) -> Dict[str, Any]:
        """
        Deliver ``body`` as HTML with a text alternative.

        Returns the Resend response. Provider failures are logged and
        re-raised as ``ServiceException``.
        """
        message = {
            "from": self.from_email,
            "to": to,
            "subject": subject,
            "html": body,
            "text": html_to_text(body),
        }
        try:
            response = resend.Emails.send(message)
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            self.logger.error(
                "Resend rejected email to %s: %s",
                to,
                reason,
                extra={"error_type": type(exc).__name__, "subject": subject},
            )
            raise ServiceException(f"Email sending failed: {reason}") from exc

        self.logger.info("Sent '%s' to %s", subject, to)
        return response
