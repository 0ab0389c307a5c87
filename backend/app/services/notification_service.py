# backend/app/services/notification_service.py
"""
Notification Service for the GymBook platform

Composes client-facing notifications from Jinja2 templates and hands them
to a sender implementing ``send(to, subject, body)``. Every failure,
whether a missing address, a template problem or a delivery error, is
raised as ``NotificationException``; callers that treat notifications as
best effort catch that one type.
"""

import logging
from typing import Optional, Protocol

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import NotificationException
from .base import BaseService
from .email_console import ConsoleEmailService
from .email_subjects import EmailSubject
from .template_registry import TemplateRegistry
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, to: str, subject: str, body: str) -> object:
        ...


def build_email_sender(settings: Optional[Settings] = None) -> NotificationSender:
    """
    Pick the configured email sender.

    Resend is used only when selected and an API key is present; otherwise
    emails are logged by the console sender.
    """
    settings = settings or default_settings
    if settings.email_provider == "resend" and settings.resend_api_key:
        from .email import EmailService

        return EmailService(settings=settings)
    if settings.email_provider == "resend":
        logger.warning("EMAIL_PROVIDER=resend but RESEND_API_KEY is missing; using console sender")
    return ConsoleEmailService()


class NotificationService:
    """
    Central notification service for workout session events.

    Uses dependency injection for the sender and the TemplateService.
    """

    def __init__(
        self,
        sender: Optional[NotificationSender] = None,
        template_service: Optional[TemplateService] = None,
    ) -> None:
        """
        Initialize the notification service.

        Args:
            sender: Optional sender (defaults to the configured email sender)
            template_service: Optional TemplateService instance
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.sender = sender or build_email_sender()
        self.template_service = template_service or TemplateService()

    @BaseService.measure_operation("notify_session_cancelled")
    def notify_session_cancelled(
        self,
        email: Optional[str],
        name: str,
        notes: str,
        session_date: str,
        session_time: str,
        reason: Optional[str] = None,
    ) -> None:
        """
        Tell a client their session was cancelled by the gym.

        Args:
            email: Client address
            name: Client display name
            notes: Session notes shown as the session title
            session_date: Preformatted date in gym time
            session_time: Preformatted time range in gym time
            reason: Optional cancellation reason

        Raises:
            NotificationException: If the email cannot be composed or delivered
        """
        if not email:
            raise NotificationException("Cannot notify client without an email address")

        try:
            body = self.template_service.render_template(
                TemplateRegistry.SESSION_CANCELLED_BY_ADMIN,
                context={
                    "user_name": name,
                    "session_notes": notes,
                    "session_date": session_date,
                    "session_time": session_time,
                    "reason": reason,
                },
            )
            self.sender.send(email, EmailSubject.session_cancelled(), body)
        except Exception as exc:
            self.logger.error(f"Failed to send session cancellation email to {email}: {exc}")
            raise NotificationException(f"Session cancellation email failed: {exc}") from exc

        self.logger.info(f"Session cancellation email sent to {email}")
