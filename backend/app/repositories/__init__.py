# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the GymBook platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- WorkoutSessionRepository: Filtered, ordered and paginated session queries
- UserRepository: User directory lookups and batched name resolution

Usage:
    from app.repositories import RepositoryFactory

    repository = RepositoryFactory.create_workout_session_repository(db)
    sessions = repository.find(SessionFilter(client_id=client_id))
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .user_repository import UserRepository
from .workout_session_repository import SessionFilter, WorkoutSessionRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "SessionFilter",
    "UserRepository",
    "WorkoutSessionRepository",
]
