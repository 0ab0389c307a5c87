# backend/app/repositories/workout_session_repository.py
"""
Workout Session Repository for the GymBook platform

All session queries go through ``SessionFilter`` so the service layer
expresses *what* it wants (owner, status, time range, overlap) and this
module owns *how* it is turned into SQL.

Soft-deleted rows are excluded unless ``include_deleted`` is set.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import List, Literal, Optional, Tuple

from sqlalchemy.orm import Query, Session

from ..models.workout_session import WorkoutSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SortOrder = Literal["asc", "desc"]


@dataclass
class SessionFilter:
    """
    Predicates over workout sessions; unset fields are ignored.

    Attributes:
        session_id: Exact id match
        client_id: Owner match
        status: Exact status match
        status_not: Exclude a status (e.g. CANCELLED for active-only counts)
        exclude_id: Skip one session (the one being updated)
        start_from: ``start_time >= start_from``
        start_to: ``start_time < start_to`` when ``start_to_inclusive`` is False,
            ``start_time <= start_to`` otherwise
        overlaps: ``(start, end)`` interval; keeps sessions with
            ``start_time < end and end_time > start``
        include_deleted: Also return soft-deleted rows
    """

    session_id: Optional[str] = None
    client_id: Optional[str] = None
    status: Optional[str] = None
    status_not: Optional[str] = None
    exclude_id: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    start_to_inclusive: bool = False
    overlaps: Optional[Tuple[datetime, datetime]] = None
    include_deleted: bool = False


class WorkoutSessionRepository(BaseRepository[WorkoutSession]):
    """Repository for workout session data access."""

    def __init__(self, db: Session):
        """Initialize with WorkoutSession model."""
        super().__init__(db, WorkoutSession)
        self.logger = logging.getLogger(__name__)

    def _apply_filter(self, query: Query, filter: SessionFilter) -> Query:
        if not filter.include_deleted:
            query = query.filter(WorkoutSession.is_deleted.is_(False))
        if filter.session_id is not None:
            query = query.filter(WorkoutSession.id == filter.session_id)
        if filter.client_id is not None:
            query = query.filter(WorkoutSession.client_id == filter.client_id)
        if filter.status is not None:
            query = query.filter(WorkoutSession.status == filter.status)
        if filter.status_not is not None:
            query = query.filter(WorkoutSession.status != filter.status_not)
        if filter.exclude_id is not None:
            query = query.filter(WorkoutSession.id != filter.exclude_id)
        if filter.start_from is not None:
            query = query.filter(WorkoutSession.start_time >= filter.start_from)
        if filter.start_to is not None:
            if filter.start_to_inclusive:
                query = query.filter(WorkoutSession.start_time <= filter.start_to)
            else:
                query = query.filter(WorkoutSession.start_time < filter.start_to)
        if filter.overlaps is not None:
            start, end = filter.overlaps
            # Half-open intervals: touching endpoints do not overlap
            query = query.filter(WorkoutSession.start_time < end, WorkoutSession.end_time > start)
        return query

    def find(
        self,
        filter: SessionFilter,
        order_by: SortOrder = "asc",
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[WorkoutSession]:
        """
        Find sessions matching ``filter`` ordered by ``start_time``.

        Args:
            filter: Predicates to apply
            order_by: ``asc`` or ``desc`` on start_time
            skip: Rows to skip
            limit: Maximum rows to return (None for all)
        """
        query = self._apply_filter(self._build_query(), filter)
        ordering = (
            WorkoutSession.start_time.desc() if order_by == "desc" else WorkoutSession.start_time.asc()
        )
        query = query.order_by(ordering, WorkoutSession.id.asc())
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return self._execute_query(query)

    def find_one(self, filter: SessionFilter) -> Optional[WorkoutSession]:
        """First session matching ``filter`` or None."""
        return self._execute_first(self._apply_filter(self._build_query(), filter))

    def count(self, filter: SessionFilter) -> int:
        """Number of sessions matching ``filter``."""
        return self._execute_count(self._apply_filter(self._build_query(), filter))
