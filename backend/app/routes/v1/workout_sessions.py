# backend/app/routes/v1/workout_sessions.py
"""
Workout session routes - API v1

Versioned workout session endpoints under /api/v1/workout-sessions.
All business logic delegated to WorkoutSessionService.

Endpoints:
    POST / - Book a session for the current user
    GET / - Admin listing with filters and pagination
    GET /all - Admin listing of every active session
    GET /my - Current user's sessions
    GET /client/{client_id} - Admin view of one client's sessions
    GET /{session_id} - Session details (owner or admin)
    PUT /{session_id} - Owner update of notes and/or time
    DELETE /{session_id} - Cancel (owner before start, admin any time)
"""

import asyncio
import logging
from typing import List, Literal, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_workout_session_service,
    require_admin,
    require_approved_user,
)
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.enums import RoleName
from ...core.exceptions import DomainException
from ...models.user import User
from ...models.workout_session import WorkoutSessionStatus
from ...schemas.workout_session import (
    PaginatedWorkoutSessions,
    WorkoutSessionCancelResponse,
    WorkoutSessionCreate,
    WorkoutSessionListQuery,
    WorkoutSessionResponse,
    WorkoutSessionUpdate,
)
from ...services.workout_session_service import WorkoutSessionService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["workout-sessions-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.post(
    "/",
    response_model=WorkoutSessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid interval, outside booking window, daily limit or gym full"},
        403: {"description": "Account not approved"},
        409: {"description": "Another booking for the same day is in progress"},
    },
)
async def create_workout_session(
    data: WorkoutSessionCreate = Body(...),
    current_user: User = Depends(require_approved_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> WorkoutSessionResponse:
    """Book a workout session for the current user."""
    try:
        return await asyncio.to_thread(service.create_session, current_user.id, data)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/", response_model=PaginatedWorkoutSessions)
async def list_workout_sessions(
    start_date: Optional[str] = Query(None, description="Earliest start (ISO date or datetime)"),
    end_date: Optional[str] = Query(None, description="Latest start (ISO date or datetime)"),
    client_id: Optional[str] = Query(None),
    session_status: Optional[WorkoutSessionStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: Literal["asc", "desc"] = Query("asc"),
    _: User = Depends(require_admin),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> PaginatedWorkoutSessions:
    """Admin listing with filters and pagination."""
    filters = WorkoutSessionListQuery(
        start_date=start_date,
        end_date=end_date,
        client_id=client_id,
        status=session_status,
        page=page,
        limit=limit,
        sort=sort,
    )
    try:
        return await asyncio.to_thread(service.list_active, filters)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/all", response_model=List[WorkoutSessionResponse])
async def list_all_workout_sessions(
    _: User = Depends(require_admin),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> List[WorkoutSessionResponse]:
    """Every active session, latest first."""
    try:
        return await asyncio.to_thread(service.list_all_for_admin)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/my", response_model=List[WorkoutSessionResponse])
async def list_my_workout_sessions(
    current_user: User = Depends(require_approved_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> List[WorkoutSessionResponse]:
    try:
        return await asyncio.to_thread(service.list_for_client, current_user.id)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get("/client/{client_id}", response_model=List[WorkoutSessionResponse])
async def list_client_workout_sessions(
    client_id: str,
    _: User = Depends(require_admin),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> List[WorkoutSessionResponse]:
    """Admin view of one client's sessions."""
    try:
        return await asyncio.to_thread(service.list_for_client, client_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{session_id}",
    response_model=WorkoutSessionResponse,
    responses={404: {"description": "Session not found"}},
)
async def get_workout_session(
    session_id: str,
    current_user: User = Depends(require_approved_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> WorkoutSessionResponse:
    """Admins see any session; clients only their own."""
    owner_scope = None if current_user.role == RoleName.ADMIN.value else current_user.id
    try:
        return await asyncio.to_thread(service.get_session, session_id, owner_scope)
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/{session_id}",
    response_model=WorkoutSessionResponse,
    responses={
        404: {"description": "Session not found or not owned"},
        422: {"description": "Session is completed or cancelled"},
    },
)
async def update_workout_session(
    session_id: str,
    data: WorkoutSessionUpdate = Body(...),
    current_user: User = Depends(require_approved_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> WorkoutSessionResponse:
    if data.notes is None and not data.changes_interval:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "No changes provided", "code": "INVALID_INPUT"},
        )
    try:
        return await asyncio.to_thread(service.update_session, session_id, current_user.id, data)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/{session_id}",
    response_model=WorkoutSessionCancelResponse,
    responses={
        404: {"description": "Session not found"},
        422: {"description": "Session already started or not scheduled"},
    },
)
async def cancel_workout_session(
    session_id: str,
    current_user: User = Depends(require_approved_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
) -> WorkoutSessionCancelResponse:
    """Owners cancel before the start; admins cancel any session and the client is emailed."""
    try:
        session = await asyncio.to_thread(service.cancel_session, session_id, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return WorkoutSessionCancelResponse(
        message="Workout session cancelled successfully", session=session
    )
