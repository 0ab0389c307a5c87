# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

``get_current_user`` resolves the bearer token to a user row.
``require_approved_user`` gates booking endpoints on account approval and
``require_admin`` additionally requires the admin role.
"""

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_user_id
from ...core.enums import RoleName, UserStatus
from ...core.exceptions import AccountNotApprovedException
from ...database import get_db
from ...models.user import User
from ...repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the authenticated user.

    Raises:
        HTTPException: 401 if the user no longer exists or is deleted
    """
    user = RepositoryFactory.create_user_repository(db).find_by_id(user_id)
    if not user:
        logger.warning(f"Token subject {user_id} does not match an active user")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_approved_user(current_user: User = Depends(get_current_user)) -> User:
    """Only approved accounts may use booking endpoints."""
    if current_user.status != UserStatus.APPROVED.value:
        raise AccountNotApprovedException(current_user.status).to_http_exception()
    return current_user


def require_admin(current_user: User = Depends(require_approved_user)) -> User:
    if current_user.role != RoleName.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user
