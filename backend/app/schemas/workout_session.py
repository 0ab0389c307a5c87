"""
Workout session schemas for the GymBook platform.

Request payloads carry timestamps as ISO-8601 strings; the service layer
parses them so malformed values surface as domain validation errors with a
stable code instead of framework validation noise. Naive timestamps are
read in the gym timezone.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, StrictStr, field_validator

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..models.workout_session import WorkoutSessionStatus
from .base import StandardizedModel, StrictRequestModel

# JSON strings only; numbers and other scalars are rejected before parsing.
TimestampInput = StrictStr


class WorkoutSessionCreate(StrictRequestModel):
    """Book a workout session over ``[start_time, end_time)``."""

    start_time: TimestampInput = Field(..., description="ISO-8601 start timestamp")
    end_time: TimestampInput = Field(..., description="ISO-8601 end timestamp")
    notes: Optional[str] = Field(None, description="Optional note, up to 200 characters")


class WorkoutSessionUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their stored value."""

    start_time: Optional[TimestampInput] = None
    end_time: Optional[TimestampInput] = None
    notes: Optional[str] = None

    @property
    def changes_interval(self) -> bool:
        return self.start_time is not None or self.end_time is not None


class WorkoutSessionResponse(StandardizedModel):
    """Session projection with the owner's display name resolved."""

    id: str
    client_id: str
    client_name: str
    notes: str
    start_time: datetime
    end_time: datetime
    status: WorkoutSessionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkoutSessionListQuery(StrictRequestModel):
    """Admin listing filters and pagination."""

    start_date: Optional[str] = Field(None, description="Earliest start (ISO date or datetime)")
    end_date: Optional[str] = Field(
        None, description="Latest start; a bare date includes that whole day"
    )
    client_id: Optional[str] = None
    status: Optional[WorkoutSessionStatus] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort: Literal["asc", "desc"] = "asc"

    @field_validator("start_date", "end_date", "client_id")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class PaginatedWorkoutSessions(StandardizedModel):
    sessions: List[WorkoutSessionResponse]
    total: int
    page: int
    total_pages: int


class WorkoutSessionCancelResponse(StandardizedModel):
    message: str
    session: WorkoutSessionResponse
