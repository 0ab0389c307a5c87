from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BeforeValidator, EmailStr, Field, field_validator

from ..core.enums import RoleName, UserStatus
from .base import StandardizedModel, StrictRequestModel


def _normalize_email(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


# Addresses are matched and stored lowercase
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class UserResponse(StandardizedModel):
    id: str
    name: str
    email: EmailStr
    role: RoleName
    status: UserStatus
    created_at: Optional[datetime] = None


class UserStatusUpdate(StrictRequestModel):
    """Admin decision on an account."""

    status: UserStatus


class SignUpRequest(StrictRequestModel):
    """New member registration. Accounts start as ``pending`` clients."""

    name: str = Field(..., min_length=1, max_length=100)
    email: NormalizedEmail
    # bcrypt only reads the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class SignInRequest(StrictRequestModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1, max_length=72)


class AuthResponse(StandardizedModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserResponse


class PaginatedUsers(StandardizedModel):
    users: List[UserResponse]
    total: int
    page: int
    total_pages: int


class UserDeleteResponse(StandardizedModel):
    message: str
    user: UserResponse
