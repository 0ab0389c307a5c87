# backend/app/routes/v1/users.py
"""
User routes - API v1

Endpoints:
    GET / - Directory of accounts with status filter and pagination (admin)
    GET /me - The caller's own account, whatever its approval status
    GET /pending - Accounts waiting for approval (admin)
    PATCH /{user_id}/status - Approve, reject or suspend a client account (admin)
    DELETE /{user_id} - Soft delete a client account (admin)
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...api.dependencies import get_current_user, get_user_service, require_admin
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.enums import UserStatus
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.user import PaginatedUsers, UserDeleteResponse, UserResponse, UserStatusUpdate
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    raise exc.to_http_exception()


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("/", response_model=PaginatedUsers)
async def list_users(
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> PaginatedUsers:
    try:
        return await asyncio.to_thread(service.list_users, user_status, page, limit)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.get("/pending", response_model=List[UserResponse])
async def list_pending_users(
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    try:
        users = await asyncio.to_thread(service.list_by_status, UserStatus.PENDING)
    except DomainException as e:
        handle_domain_exception(e)
    return [UserResponse.model_validate(user) for user in users]


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate = Body(...),
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(service.update_status, user_id, payload.status)
    except DomainException as e:
        handle_domain_exception(e)
    logger.info(f"Admin {admin.id} set user {user_id} status to {payload.status.value}")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserDeleteResponse)
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserDeleteResponse:
    try:
        user = await asyncio.to_thread(service.delete_user, user_id)
    except DomainException as e:
        handle_domain_exception(e)
    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return UserDeleteResponse(
        message="User deleted successfully", user=UserResponse.model_validate(user)
    )
