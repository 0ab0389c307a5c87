# backend/app/services/workout_session_service.py
"""
Workout Session Service for the GymBook platform

Handles the workout session lifecycle:
- Creating sessions after duration, booking-window, daily-limit and
  capacity checks (in that order; the first failure wins)
- Owner updates that re-run the full check pipeline
- Owner and administrator cancellation
- Listings with batched client-name resolution

State machine: SCHEDULED -> IN_PROGRESS -> COMPLETED, and any non-terminal
state -> CANCELLED. Cancelled sessions are also soft deleted.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
import logging
import math
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.clock import Clock, system_clock
from ..core.config import Settings, settings as default_settings
from ..core.constants import (
    DEFAULT_ADMIN_CANCELLATION_REASON,
    DEFAULT_SESSION_NOTES,
    MAX_NOTES_LENGTH,
    UNKNOWN_CLIENT_NAME,
)
from ..core.enums import RoleName
from ..core.exceptions import (
    AlreadyStartedException,
    ForbiddenException,
    InvalidInputException,
    InvalidStateException,
    NotFoundException,
    NotFoundOrUnauthorizedException,
)
from ..core.slot_lock import NullSlotLock, SlotLock, build_slot_lock
from ..core.timezone_utils import (
    format_session_date,
    format_session_time,
    get_gym_timezone,
    gym_days_touched,
)
from ..core.ulid_helper import is_valid_ulid
from ..models.user import User
from ..models.workout_session import WorkoutSession, WorkoutSessionStatus
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..repositories.workout_session_repository import (
    SessionFilter,
    WorkoutSessionRepository,
)
from ..schemas.workout_session import (
    PaginatedWorkoutSessions,
    WorkoutSessionCreate,
    WorkoutSessionListQuery,
    WorkoutSessionResponse,
    WorkoutSessionUpdate,
)
from .base import BaseService
from .capacity_checker import CapacityChecker
from .notification_service import NotificationService
from .session_rules import parse_timestamp, validate_session_interval

logger = logging.getLogger(__name__)


class WorkoutSessionService(BaseService):
    """
    Service layer for workout session operations.

    Collaborators are injectable so tests can supply a frozen clock, a
    recording notification sender or per-instance settings.
    """

    repository: WorkoutSessionRepository
    user_repository: UserRepository
    capacity_checker: CapacityChecker
    notification_service: NotificationService

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        repository: Optional[WorkoutSessionRepository] = None,
        user_repository: Optional[UserRepository] = None,
        capacity_checker: Optional[CapacityChecker] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
        slot_lock: Optional[SlotLock | NullSlotLock] = None,
    ):
        """
        Initialize workout session service.

        Args:
            db: Database session
            notification_service: Optional notification service instance
            repository: Optional WorkoutSessionRepository instance
            user_repository: Optional UserRepository instance
            capacity_checker: Optional CapacityChecker instance
            clock: Optional clock (defaults to system UTC clock)
            settings: Optional settings override
            slot_lock: Optional per-day lease (defaults from settings)
        """
        super().__init__(db)
        self.settings = settings or default_settings
        self.clock = clock or system_clock
        self.repository = repository or RepositoryFactory.create_workout_session_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.capacity_checker = capacity_checker or CapacityChecker(
            db, repository=self.repository, clock=self.clock, settings=self.settings
        )
        self.notification_service = notification_service or NotificationService()
        self.slot_lock = slot_lock or build_slot_lock(self.settings)
        self.tz = get_gym_timezone(self.settings.gym_timezone)

    # ==========================================
    # Create / update
    # ==========================================

    @BaseService.measure_operation("create_session")
    def create_session(self, client_id: str, data: WorkoutSessionCreate) -> WorkoutSessionResponse:
        """
        Book a new workout session for ``client_id``.

        Raises:
            InvalidInputException: Malformed id, timestamp or notes
            DurationExceededException: Session too long
            OutOfBookingWindowException: Start outside the bookable weeks
            DailyLimitExceededException: Client already booked that day
            CapacityExceededException: Gym full for the interval
            DependencyFailureException: Store failure
        """
        self._require_ulid(client_id, "client_id")
        start = parse_timestamp(data.start_time, "start_time", self.tz)
        end = parse_timestamp(data.end_time, "end_time", self.tz)
        notes = self._normalize_notes(data.notes)

        self.log_operation(
            "create_session",
            client_id=client_id,
            start_time=start.isoformat(),
            end_time=end.isoformat(),
        )

        validate_session_interval(start, end, self.clock.now(), self.settings)

        with self.slot_lock.hold(gym_days_touched(start, end, self.tz)):
            with self.transaction():
                self.capacity_checker.check_daily_limit(client_id, start)
                self.capacity_checker.check_overlap_capacity(start, end)
                session = self.repository.create(
                    client_id=client_id,
                    notes=notes,
                    start_time=start,
                    end_time=end,
                    status=WorkoutSessionStatus.SCHEDULED.value,
                    is_deleted=False,
                )

        self.logger.info(f"Workout session {session.id} created for client {client_id}")
        return self._hydrate([session])[0]

    @BaseService.measure_operation("update_session")
    def update_session(
        self, session_id: str, client_id: str, data: WorkoutSessionUpdate
    ) -> WorkoutSessionResponse:
        """
        Owner update of notes and/or interval.

        When the interval changes the full check pipeline runs against the
        merged interval, excluding this session from daily and capacity counts.

        Raises:
            NotFoundOrUnauthorizedException: Missing, deleted or not owned
            InvalidStateException: Session is completed or cancelled
        """
        self._require_ulid(session_id, "session_id")
        self._require_ulid(client_id, "client_id")

        session = self._load_owned(session_id, client_id, "update_session")
        if session.is_terminal:
            raise InvalidStateException(
                f"Cannot update a {session.status.lower()} workout session",
                current_status=session.status,
            )

        updates: Dict[str, object] = {}
        if data.notes is not None:
            updates["notes"] = self._normalize_notes(data.notes)

        interval: Optional[Tuple[datetime, datetime]] = None
        if data.changes_interval:
            start = (
                parse_timestamp(data.start_time, "start_time", self.tz)
                if data.start_time is not None
                else session.start_time
            )
            end = (
                parse_timestamp(data.end_time, "end_time", self.tz)
                if data.end_time is not None
                else session.end_time
            )
            validate_session_interval(start, end, self.clock.now(), self.settings)
            interval = (start, end)
            updates["start_time"] = start
            updates["end_time"] = end

        self.log_operation("update_session", session_id=session_id, fields=sorted(updates))

        days = gym_days_touched(*interval, self.tz) if interval else []
        with self.slot_lock.hold(days):
            with self.transaction():
                if interval:
                    self.capacity_checker.check_daily_limit(
                        client_id, interval[0], exclude_session_id=session_id
                    )
                    self.capacity_checker.check_overlap_capacity(
                        interval[0], interval[1], exclude_session_id=session_id
                    )
                for field, value in updates.items():
                    setattr(session, field, value)
                self.repository.save(session)

        return self._hydrate([session])[0]

    # ==========================================
    # Cancellation
    # ==========================================

    @BaseService.measure_operation("cancel_as_owner")
    def cancel_as_owner(self, session_id: str, client_id: str) -> WorkoutSessionResponse:
        """
        Client cancels their own session before it starts.

        Raises:
            NotFoundOrUnauthorizedException: Missing, deleted or not owned
            InvalidStateException: Status is not SCHEDULED
            AlreadyStartedException: Start time is now or in the past
        """
        self._require_ulid(session_id, "session_id")
        self._require_ulid(client_id, "client_id")

        with self.transaction():
            session = self.repository.find_one(
                SessionFilter(session_id=session_id, client_id=client_id)
            )
            if not session:
                raise NotFoundOrUnauthorizedException()
            if session.status != WorkoutSessionStatus.SCHEDULED.value:
                raise InvalidStateException(
                    "Only scheduled workout sessions can be deleted",
                    current_status=session.status,
                )
            if session.start_time <= self.clock.now():
                raise AlreadyStartedException()

            session.cancel()
            self.repository.save(session)

        self.log_operation("cancel_as_owner", session_id=session_id, client_id=client_id)
        return self._hydrate([session])[0]

    @BaseService.measure_operation("cancel_as_admin")
    def cancel_as_admin(
        self, session_id: str, reason: Optional[str] = DEFAULT_ADMIN_CANCELLATION_REASON
    ) -> WorkoutSessionResponse:
        """
        Administrator cancels any session and the client is emailed.

        The cancellation is committed before the notification is attempted;
        notification failures are logged and never undo or fail the call.

        Raises:
            NotFoundException: Missing or already deleted
        """
        self._require_ulid(session_id, "session_id")

        with self.transaction():
            session = self.repository.find_one(SessionFilter(session_id=session_id))
            if not session:
                raise NotFoundException("Workout session not found", code="SESSION_NOT_FOUND")
            session.cancel()
            self.repository.save(session)

        self.log_operation("cancel_as_admin", session_id=session_id, client_id=session.client_id)
        client = self._notify_cancellation(session, reason)

        name = client.name if client else UNKNOWN_CLIENT_NAME
        return self._to_response(session, {session.client_id: name} if client else {})

    def cancel_session(self, session_id: str, actor: User) -> WorkoutSessionResponse:
        """Dispatch cancellation on the actor's role."""
        handlers: Dict[RoleName, Callable[[], WorkoutSessionResponse]] = {
            RoleName.ADMIN: lambda: self.cancel_as_admin(session_id),
            RoleName.CLIENT: lambda: self.cancel_as_owner(session_id, actor.id),
        }
        try:
            role = RoleName(actor.role)
        except ValueError:
            raise ForbiddenException(
                f"Role {actor.role!r} cannot cancel workout sessions"
            ) from None
        return handlers[role]()

    def _notify_cancellation(self, session: WorkoutSession, reason: Optional[str]) -> Optional[User]:
        client: Optional[User] = None
        try:
            client = self.user_repository.find_by_id(session.client_id)
        except Exception as e:
            logger.error(f"Failed to load client {session.client_id} for cancellation email: {str(e)}")

        try:
            self.notification_service.notify_session_cancelled(
                email=client.email if client else None,
                name=client.name if client else UNKNOWN_CLIENT_NAME,
                notes=session.notes,
                session_date=format_session_date(session.start_time, self.tz),
                session_time=(
                    f"{format_session_time(session.start_time, self.tz)} - "
                    f"{format_session_time(session.end_time, self.tz)}"
                ),
                reason=reason,
            )
        except Exception as e:
            logger.error(
                f"Failed to send cancellation notification for session {session.id}: {str(e)}",
                extra={"session_id": session.id, "client_id": session.client_id},
            )
        return client

    # ==========================================
    # Queries
    # ==========================================

    @BaseService.measure_operation("list_active")
    def list_active(self, filters: WorkoutSessionListQuery) -> PaginatedWorkoutSessions:
        """Filtered, paginated listing of non-deleted sessions for admins."""
        if filters.client_id:
            self._require_ulid(filters.client_id, "client_id")

        start_from, _ = self._parse_range_bound(filters.start_date, "start_date", is_end=False)
        start_to, inclusive = self._parse_range_bound(filters.end_date, "end_date", is_end=True)
        session_filter = SessionFilter(
            client_id=filters.client_id,
            status=filters.status.value if filters.status else None,
            start_from=start_from,
            start_to=start_to,
            start_to_inclusive=inclusive,
        )

        skip = (filters.page - 1) * filters.limit
        with self.store_access("list_active"):
            total = self.repository.count(session_filter)
            sessions = self.repository.find(
                session_filter, order_by=filters.sort, skip=skip, limit=filters.limit
            )

        return PaginatedWorkoutSessions(
            sessions=self._hydrate(sessions),
            total=total,
            page=filters.page,
            total_pages=math.ceil(total / filters.limit),
        )

    @BaseService.measure_operation("list_for_client")
    def list_for_client(self, client_id: str) -> List[WorkoutSessionResponse]:
        """A client's non-deleted sessions, earliest first."""
        self._require_ulid(client_id, "client_id")
        with self.store_access("list_for_client"):
            sessions = self.repository.find(SessionFilter(client_id=client_id), order_by="asc")
        return self._hydrate(sessions)

    @BaseService.measure_operation("list_all_for_admin")
    def list_all_for_admin(self) -> List[WorkoutSessionResponse]:
        """Every non-deleted session, latest start first."""
        with self.store_access("list_all_for_admin"):
            sessions = self.repository.find(SessionFilter(), order_by="desc")
        return self._hydrate(sessions)

    @BaseService.measure_operation("get_session")
    def get_session(
        self, session_id: str, client_id: Optional[str] = None
    ) -> WorkoutSessionResponse:
        """
        Single non-deleted session.

        Args:
            session_id: Session to load
            client_id: When given, only that client's session is visible

        Raises:
            NotFoundException: Missing or deleted
            NotFoundOrUnauthorizedException: Scoped lookup found nothing
        """
        self._require_ulid(session_id, "session_id")
        if client_id is not None:
            return self._hydrate([self._load_owned(session_id, client_id, "get_session")])[0]

        with self.store_access("get_session"):
            session = self.repository.find_one(SessionFilter(session_id=session_id))
        if not session:
            raise NotFoundException("Workout session not found", code="SESSION_NOT_FOUND")
        return self._hydrate([session])[0]

    # ==========================================
    # Helpers
    # ==========================================

    def _load_owned(self, session_id: str, client_id: str, operation: str) -> WorkoutSession:
        with self.store_access(operation):
            session = self.repository.find_one(
                SessionFilter(session_id=session_id, client_id=client_id)
            )
        if not session:
            raise NotFoundOrUnauthorizedException()
        return session

    def _hydrate(self, sessions: Iterable[WorkoutSession]) -> List[WorkoutSessionResponse]:
        """Project sessions with client names resolved in one directory query."""
        sessions = list(sessions)
        if not sessions:
            return []
        with self.store_access("resolve_client_names"):
            names = self.user_repository.get_names_by_ids(s.client_id for s in sessions)
        return [self._to_response(s, names) for s in sessions]

    @staticmethod
    def _to_response(session: WorkoutSession, names: Dict[str, str]) -> WorkoutSessionResponse:
        return WorkoutSessionResponse(
            id=session.id,
            client_id=session.client_id,
            client_name=names.get(session.client_id, UNKNOWN_CLIENT_NAME),
            notes=session.notes,
            start_time=session.start_time,
            end_time=session.end_time,
            status=session.status,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )

    @staticmethod
    def _require_ulid(value: Optional[str], field: str) -> None:
        if not value or not is_valid_ulid(value):
            raise InvalidInputException(f"Invalid {field}", details={"field": field})

    @staticmethod
    def _normalize_notes(notes: Optional[str]) -> str:
        if notes is None:
            return DEFAULT_SESSION_NOTES
        if not isinstance(notes, str):
            raise InvalidInputException("Notes must be text", details={"field": "notes"})
        cleaned = notes.strip()
        if not cleaned:
            return DEFAULT_SESSION_NOTES
        if len(cleaned) > MAX_NOTES_LENGTH:
            raise InvalidInputException(
                f"Notes cannot exceed {MAX_NOTES_LENGTH} characters",
                details={"field": "notes", "max_length": MAX_NOTES_LENGTH},
            )
        return cleaned

    def _parse_range_bound(
        self, value: Optional[str], field: str, *, is_end: bool
    ) -> Tuple[Optional[datetime], bool]:
        """
        Listing bound from an ISO date or datetime.

        A bare date as an end bound covers that whole gym day, so it becomes
        an exclusive bound at the next local midnight. Datetime end bounds
        are inclusive.
        """
        if value is None:
            return None, False
        text = value.strip()
        if len(text) == 10:
            try:
                day = datetime.strptime(text, "%Y-%m-%d").date()
            except ValueError as exc:
                raise InvalidInputException(
                    f"Invalid {field}: expected YYYY-MM-DD", details={"field": field}
                ) from exc
            if is_end:
                day = day + timedelta(days=1)
            local_midnight = self.tz.localize(datetime.combine(day, time.min))
            return parse_timestamp(local_midnight, field, self.tz), False
        return parse_timestamp(text, field, self.tz), is_end
