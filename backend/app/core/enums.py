"""Enums shared across models, schemas and services."""

from enum import Enum


class RoleName(str, Enum):
    """Roles a user can hold."""

    CLIENT = "client"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account approval lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
