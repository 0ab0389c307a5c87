"""
Database models for the GymBook platform.

- User: members and administrators
- WorkoutSession: reservations of gym time
"""

from .user import User
from .workout_session import TERMINAL_STATUSES, WorkoutSession, WorkoutSessionStatus

__all__ = [
    "User",
    "WorkoutSession",
    "WorkoutSessionStatus",
    "TERMINAL_STATUSES",
]
