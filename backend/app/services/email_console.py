import logging

logger = logging.getLogger(__name__)


class ConsoleEmailService:
    """Email sender that only logs; used when no real provider is configured."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def send(self, to: str, subject: str, body: str) -> bool:
        self.logger.info(
            f"[console email] to={to} subject={subject}",
            extra={"to_email": to, "subject": subject, "body_length": len(body)},
        )
        return True
