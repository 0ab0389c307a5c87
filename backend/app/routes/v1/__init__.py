"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import auth, health, users, workout_sessions

__all__ = ["auth", "health", "users", "workout_sessions"]
