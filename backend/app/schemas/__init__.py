"""Pydantic request and response schemas."""

from .user import (
    AuthResponse,
    PaginatedUsers,
    SignInRequest,
    SignUpRequest,
    UserDeleteResponse,
    UserResponse,
    UserStatusUpdate,
)
from .workout_session import (
    PaginatedWorkoutSessions,
    WorkoutSessionCancelResponse,
    WorkoutSessionCreate,
    WorkoutSessionListQuery,
    WorkoutSessionResponse,
    WorkoutSessionUpdate,
)

__all__ = [
    "AuthResponse",
    "PaginatedUsers",
    "PaginatedWorkoutSessions",
    "SignInRequest",
    "SignUpRequest",
    "UserDeleteResponse",
    "UserResponse",
    "UserStatusUpdate",
    "WorkoutSessionCancelResponse",
    "WorkoutSessionCreate",
    "WorkoutSessionListQuery",
    "WorkoutSessionResponse",
    "WorkoutSessionUpdate",
]
