# backend/app/services/capacity_checker.py
"""
Capacity Checker Service for the GymBook platform

Handles the ledger-wide constraints on workout sessions:
- Per-client daily limit (gym-timezone calendar day of the start time)
- Gym capacity: how many active sessions may overlap any instant

Only active sessions count: soft-deleted and cancelled rows are ignored.
Updates pass ``exclude_session_id`` so a session never conflicts with itself.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, system_clock
from ..core.config import Settings, settings as default_settings
from ..core.exceptions import CapacityExceededException, DailyLimitExceededException
from ..core.timezone_utils import get_gym_timezone, gym_day_bounds, to_gym_time
from ..models.workout_session import WorkoutSessionStatus
from ..repositories import RepositoryFactory
from ..repositories.workout_session_repository import SessionFilter, WorkoutSessionRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def sessions_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval overlap; sessions that only touch do not overlap."""
    return a_start < b_end and b_start < a_end


class CapacityChecker(BaseService):
    """
    Service for checking daily limits and concurrent capacity.

    Both checks read the current ledger; they are not atomic with the write
    that follows unless the caller holds a slot lease.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[WorkoutSessionRepository] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize capacity checker service.

        Args:
            db: Database session
            repository: Optional WorkoutSessionRepository instance
            clock: Optional clock (defaults to system UTC clock)
            settings: Optional settings override for limits and timezone
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_workout_session_repository(db)
        self.clock = clock or system_clock
        self.settings = settings or default_settings

    @BaseService.measure_operation("check_daily_limit")
    def check_daily_limit(
        self,
        client_id: str,
        start: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> int:
        """
        Enforce the per-client daily session limit.

        Returns:
            Number of active sessions the client already has that day

        Raises:
            DailyLimitExceededException: If the client is at the limit
        """
        tz = get_gym_timezone(self.settings.gym_timezone)
        day_start, day_end = gym_day_bounds(start, tz)
        existing = self.repository.count(
            SessionFilter(
                client_id=client_id,
                status_not=WorkoutSessionStatus.CANCELLED.value,
                exclude_id=exclude_session_id,
                start_from=day_start,
                start_to=day_end,
            )
        )
        limit = self.settings.daily_session_limit
        if existing >= limit:
            day = to_gym_time(start, tz).date().isoformat()
            self.logger.info(
                f"Daily limit reached for client {client_id} on {day}",
                extra={"client_id": client_id, "day": day, "existing": existing},
            )
            raise DailyLimitExceededException(day=day, limit=limit)
        return existing

    @BaseService.measure_operation("count_overlapping")
    def count_overlapping(
        self,
        start: datetime,
        end: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> int:
        """Number of active sessions overlapping ``[start, end)``."""
        return self.repository.count(
            SessionFilter(
                status_not=WorkoutSessionStatus.CANCELLED.value,
                exclude_id=exclude_session_id,
                overlaps=(start, end),
            )
        )

    @BaseService.measure_operation("check_overlap_capacity")
    def check_overlap_capacity(
        self,
        start: datetime,
        end: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> int:
        """
        Enforce the gym capacity ceiling for ``[start, end)``.

        Counts every active session overlapping the interval at any point,
        so the check is conservative for long sessions.

        Returns:
            Number of overlapping active sessions

        Raises:
            CapacityExceededException: If the count is at the ceiling
        """
        overlapping = self.count_overlapping(start, end, exclude_session_id)
        capacity = self.settings.gym_capacity
        if overlapping >= capacity:
            self.logger.warning(
                f"Gym capacity reached: {overlapping} sessions overlap "
                f"{start.isoformat()}-{end.isoformat()}"
            )
            raise CapacityExceededException(capacity=capacity, overlapping=overlapping)
        return overlapping
