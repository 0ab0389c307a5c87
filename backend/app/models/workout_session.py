# backend/app/models/workout_session.py
"""
Workout session model for the GymBook platform.

A session is a client's reservation of gym time over the half-open
interval ``[start_time, end_time)``. Times are stored in UTC; day and
week rules are evaluated in the gym timezone by the services.

Cancelled sessions are soft deleted and never returned by listings.
"""

from enum import Enum
import logging

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import DEFAULT_SESSION_NOTES, MAX_NOTES_LENGTH
from ..database import Base
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)


class WorkoutSessionStatus(str, Enum):
    """Workout session lifecycle statuses."""

    SCHEDULED = "SCHEDULED"  # Default on creation
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"  # Terminal
    CANCELLED = "CANCELLED"  # Terminal


TERMINAL_STATUSES = frozenset({WorkoutSessionStatus.COMPLETED, WorkoutSessionStatus.CANCELLED})


class WorkoutSession(TimestampMixin, Base):
    """Reservation of gym time by one client."""

    __tablename__ = "workout_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    client_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    notes = Column(String(MAX_NOTES_LENGTH), nullable=False, default=DEFAULT_SESSION_NOTES)
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    status = Column(
        String(20), nullable=False, default=WorkoutSessionStatus.SCHEDULED.value, index=True
    )
    is_deleted = Column(Boolean, nullable=False, default=False)

    client = relationship("User", foreign_keys=[client_id], backref="workout_sessions")

    __table_args__ = (
        CheckConstraint(
            "status IN ('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')",
            name="ck_workout_sessions_status",
        ),
        CheckConstraint("end_time > start_time", name="check_session_time_order"),
        Index("ix_workout_sessions_start_end", "start_time", "end_time"),
        Index("ix_workout_sessions_client_start", "client_id", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<WorkoutSession {self.id}: client={self.client_id}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}

    def cancel(self) -> None:
        """Cancel and soft delete this session."""
        self.status = WorkoutSessionStatus.CANCELLED.value
        self.is_deleted = True
        logger.info(f"Workout session {self.id} cancelled")
