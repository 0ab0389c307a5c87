# backend/app/repositories/base_repository.py
"""
Generic data access for GymBook models.

Repositories own queries, never transactions: writes are flushed so
generated columns are visible, and the calling service commits. Any
SQLAlchemy failure is logged against the model's logger and surfaced as
``RepositoryException``.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """Shared CRUD helpers bound to one model class."""

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def _guard(self, action: str, rollback: bool = False) -> Iterator[None]:
        """Log and convert store errors raised while performing ``action``."""
        name = self.model.__name__
        try:
            yield
        except IntegrityError as exc:
            self.logger.error("Constraint violation while trying to %s %s: %s", action, name, exc)
            if rollback:
                self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as exc:
            self.logger.error("Could not %s %s: %s", action, name, exc)
            if rollback:
                self.db.rollback()
            raise RepositoryException(f"Failed to {action} {name}: {exc}") from exc

    def get_by_id(self, id: str) -> Optional[T]:
        with self._guard("load"):
            return self.db.query(self.model).filter(self.model.id == id).first()

    def create(self, **kwargs: Any) -> T:
        """Add a new row and flush it. The caller commits."""
        entity = self.model(**kwargs)
        with self._guard("create", rollback=True):
            self.db.add(entity)
            self.db.flush()
        return entity

    def save(self, entity: T) -> T:
        with self._guard("save", rollback=True):
            self.db.add(entity)
            self.db.flush()
        return entity

    # Subclass helpers

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        with self._guard("query"):
            return query.all()

    def _execute_first(self, query: Query) -> Optional[T]:
        with self._guard("query"):
            return query.first()

    def _execute_count(self, query: Query) -> int:
        with self._guard("count"):
            return int(query.count())
