# backend/app/repositories/user_repository.py
"""
User Repository for the GymBook platform

User directory lookups: single user by id or email, batched display-name
resolution for listings, approval-queue queries and the admin directory.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def find_by_id(self, user_id: str) -> Optional[User]:
        """Non-deleted user by id."""
        query = self._build_query().filter(User.id == user_id, User.is_deleted.is_(False))
        return self._execute_first(query)

    def get_by_email(self, email: str) -> Optional[User]:
        """Any user with this address, deleted or not. Addresses are stored lowercase."""
        return self._execute_first(self._build_query().filter(User.email == email.strip().lower()))

    def get_names_by_ids(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """
        Resolve display names for many users with a single query.

        Args:
            user_ids: Ids to resolve; duplicates are ignored

        Returns:
            Mapping of id to name for users that exist
        """
        unique_ids = sorted({uid for uid in user_ids if uid})
        if not unique_ids:
            return {}
        try:
            rows = self.db.query(User.id, User.name).filter(User.id.in_(unique_ids)).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error resolving user names: {str(e)}")
            raise RepositoryException(f"Failed to resolve user names: {str(e)}") from e
        return {row.id: row.name for row in rows}

    def list_by_status(self, status: str) -> List[User]:
        """Non-deleted users with the given approval status, oldest first."""
        query = (
            self._build_query()
            .filter(User.status == status, User.is_deleted.is_(False))
            .order_by(User.created_at.asc(), User.id.asc())
        )
        return self._execute_query(query)

    def _directory_query(self, status: Optional[str]) -> Query:
        query = self._build_query().filter(User.is_deleted.is_(False))
        if status:
            query = query.filter(User.status == status)
        return query

    def list_users(
        self, status: Optional[str] = None, skip: int = 0, limit: Optional[int] = None
    ) -> List[User]:
        """Non-deleted users, newest first, optionally narrowed to one status."""
        query = self._directory_query(status).order_by(User.created_at.desc(), User.id.desc())
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return self._execute_query(query)

    def count_users(self, status: Optional[str] = None) -> int:
        return self._execute_count(self._directory_query(status))
