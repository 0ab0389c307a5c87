"""Subject lines for outgoing notification emails; bodies live in templates."""

from app.core.constants import BRAND_NAME


class EmailSubject:
    @staticmethod
    def session_cancelled() -> str:
        return f"Workout Session Cancelled - {BRAND_NAME}"
