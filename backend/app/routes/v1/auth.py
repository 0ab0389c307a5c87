# backend/app/routes/v1/auth.py
"""
Account authentication routes - API v1

Endpoints:
    POST /sign-up - Register a pending client account and receive a token
    POST /sign-in - Exchange email and password for a token
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_user_service
from ...auth import create_access_token
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.user import AuthResponse, SignInRequest, SignUpRequest, UserResponse
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    raise exc.to_http_exception()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        access_token=create_access_token({"sub": user.id}),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/sign-up",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
async def sign_up(
    payload: SignUpRequest = Body(...),
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """New accounts are pending; the token only reaches approval-free endpoints."""
    try:
        user = await asyncio.to_thread(service.sign_up, payload)
    except DomainException as e:
        handle_domain_exception(e)
    return _auth_response(user)


@router.post(
    "/sign-in",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid credentials or deactivated account"},
        403: {"description": "Account not approved"},
    },
)
async def sign_in(
    payload: SignInRequest = Body(...),
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    try:
        user = await asyncio.to_thread(service.sign_in, payload)
    except DomainException as e:
        handle_domain_exception(e)
    return _auth_response(user)
