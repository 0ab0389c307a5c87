"""Shared test helpers: frozen instant, UTC constructor, member password, recording sender."""

from datetime import datetime, timezone

# Wednesday; the current gym week started Monday 2025-03-03
FROZEN_NOW = datetime(2025, 3, 5, 10, 0, tzinfo=timezone.utc)

# Sign-in password of every user built by the make_user fixture
MEMBER_PASSWORD = "GymPass123!"


def at(day: int, hour: int, minute: int = 0, month: int = 3) -> datetime:
    """UTC instant in 2025; tests run with the gym timezone set to UTC."""
    return datetime(2025, month, day, hour, minute, tzinfo=timezone.utc)


class RecordingSender:
    """Notification sender that remembers every message; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "body": body})
        if self.fail:
            raise RuntimeError("mail relay unavailable")
        return True
