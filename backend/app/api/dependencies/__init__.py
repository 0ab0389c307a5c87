"""FastAPI dependencies used by the v1 routers."""

from ...database import get_db
from .auth import get_current_user, require_admin, require_approved_user
from .services import (
    get_notification_service,
    get_user_service,
    get_workout_session_service,
)

__all__ = [
    "get_current_user",
    "get_db",
    "get_notification_service",
    "get_user_service",
    "get_workout_session_service",
    "require_admin",
    "require_approved_user",
]
