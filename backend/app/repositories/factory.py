# backend/app/repositories/factory.py
"""Single place services go to for repository instances."""

from typing import TYPE_CHECKING, Type

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

if TYPE_CHECKING:
    from .user_repository import UserRepository
    from .workout_session_repository import WorkoutSessionRepository


class RepositoryFactory:
    @staticmethod
    def create_base_repository(db: Session, model: Type) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_workout_session_repository(db: Session) -> "WorkoutSessionRepository":
        # Deferred import; the concrete repositories import models at module load.
        from .workout_session_repository import WorkoutSessionRepository

        return WorkoutSessionRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)
