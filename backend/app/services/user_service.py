# backend/app/services/user_service.py
"""
User Service for the GymBook platform

Account lifecycle: member sign-up and sign-in, the admin directory,
approval decisions and soft deletion. Admin accounts are managed outside
the API and cannot be moderated through it.
"""

import logging
import math
from typing import List, Optional

from sqlalchemy.orm import Session

from ..auth import burn_password_check, get_password_hash, verify_password
from ..core.enums import RoleName, UserStatus
from ..core.exceptions import (
    AccountDeactivatedException,
    AccountNotApprovedException,
    AdminAccountProtectedException,
    EmailAlreadyRegisteredException,
    InvalidCredentialsException,
    InvalidInputException,
    NotFoundException,
)
from ..core.ulid_helper import is_valid_ulid
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.user import PaginatedUsers, SignInRequest, SignUpRequest, UserResponse
from .base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Service layer for member accounts."""

    def __init__(self, db: Session, repository=None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_user_repository(db)

    # Self-service

    @BaseService.measure_operation("sign_up")
    def sign_up(self, data: SignUpRequest) -> User:
        """
        Register a new client account awaiting approval.

        Raises:
            EmailAlreadyRegisteredException: Address already used, even by a deleted account
        """
        with self.transaction():
            if self.repository.get_by_email(data.email) is not None:
                raise EmailAlreadyRegisteredException()
            user = self.repository.create(
                name=data.name,
                email=data.email,
                hashed_password=get_password_hash(data.password),
                role=RoleName.CLIENT.value,
                status=UserStatus.PENDING.value,
            )

        self.log_operation("sign_up", user_id=user.id)
        return user

    @BaseService.measure_operation("sign_in")
    def sign_in(self, data: SignInRequest) -> User:
        """
        Check credentials and account state.

        Raises:
            InvalidCredentialsException: Unknown email or wrong password
            AccountDeactivatedException: Account was soft deleted
            AccountNotApprovedException: Client account is not approved
        """
        with self.store_access("sign_in"):
            user = self.repository.get_by_email(data.email)

        if user is None:
            burn_password_check(data.password)
            raise InvalidCredentialsException()
        if not verify_password(data.password, user.hashed_password):
            logger.info("Failed sign-in for user %s", user.id)
            raise InvalidCredentialsException()
        if user.is_deleted:
            raise AccountDeactivatedException()
        if not user.is_admin and not user.is_approved:
            raise AccountNotApprovedException(user.status)

        self.log_operation("sign_in", user_id=user.id)
        return user

    # Admin directory

    @BaseService.measure_operation("list_users_by_status")
    def list_by_status(self, status: UserStatus) -> List[User]:
        with self.store_access("list_users_by_status"):
            return self.repository.list_by_status(status.value)

    @BaseService.measure_operation("list_users")
    def list_users(
        self, status: Optional[UserStatus] = None, page: int = 1, limit: int = 20
    ) -> PaginatedUsers:
        """Non-deleted users, newest first."""
        status_value = status.value if status else None
        with self.store_access("list_users"):
            total = self.repository.count_users(status_value)
            users = self.repository.list_users(
                status_value, skip=(page - 1) * limit, limit=limit
            )
        return PaginatedUsers(
            users=[UserResponse.model_validate(user) for user in users],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    @BaseService.measure_operation("update_user_status")
    def update_status(self, user_id: str, status: UserStatus) -> User:
        """
        Set a user's approval status.

        Raises:
            InvalidInputException: Malformed user id
            NotFoundException: No such user
            AdminAccountProtectedException: Target is an admin
        """
        with self.transaction():
            user = self._load_member(user_id)
            if user.is_admin:
                raise AdminAccountProtectedException("update admin status")
            previous = user.status
            user.status = status.value
            self.repository.save(user)

        self.log_operation(
            "update_user_status", user_id=user_id, previous=previous, status=status.value
        )
        return user

    @BaseService.measure_operation("delete_user")
    def delete_user(self, user_id: str) -> User:
        """
        Soft delete a member. Their sessions are kept for the record.

        Raises:
            InvalidInputException: Malformed user id
            NotFoundException: No such user, or already deleted
            AdminAccountProtectedException: Target is an admin
        """
        with self.transaction():
            user = self._load_member(user_id)
            if user.is_admin:
                raise AdminAccountProtectedException("delete admin account")
            user.is_deleted = True
            self.repository.save(user)

        self.log_operation("delete_user", user_id=user_id)
        return user

    def _load_member(self, user_id: str) -> User:
        if not is_valid_ulid(user_id):
            raise InvalidInputException("Invalid user_id", details={"field": "user_id"})
        user = self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")
        return user
