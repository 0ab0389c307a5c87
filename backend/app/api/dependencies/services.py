# backend/app/api/dependencies/services.py
"""Per-request service construction for the v1 routers."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.notification_service import NotificationService
from ...services.user_service import UserService
from ...services.workout_session_service import WorkoutSessionService


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Process-wide notification service; it holds no per-request state."""
    return NotificationService()


def get_workout_session_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> WorkoutSessionService:
    """Booking service bound to this request's session."""
    return WorkoutSessionService(db, notification_service=notification_service)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
