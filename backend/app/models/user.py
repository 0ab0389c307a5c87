# backend/app/models/user.py
"""
User model for the GymBook platform.

Members and staff share one table. ``role`` decides capabilities,
``status`` gates access to booking: only approved users may book.
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, String
import ulid

from ..core.enums import RoleName, UserStatus
from ..database import Base
from .types import TimestampMixin

logger = logging.getLogger(__name__)


class User(TimestampMixin, Base):
    """
    Gym member or administrator.

    Attributes:
        id: ULID primary key
        name: Display name used in listings and emails
        email: Unique contact address, stored lowercase
        hashed_password: bcrypt hash of the sign-in password
        role: ``client`` or ``admin``
        status: Approval lifecycle (pending, approved, rejected, suspended)
        is_deleted: Soft delete flag
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.CLIENT.value)
    status = Column(String(20), nullable=False, default=UserStatus.PENDING.value, index=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("role IN ('client', 'admin')", name="ck_users_role"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'suspended')",
            name="ck_users_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role} status={self.status}>"

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED.value
