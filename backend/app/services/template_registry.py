"""Known email templates, addressed by enum member instead of path string."""

from enum import Enum


class TemplateRegistry(str, Enum):
    SESSION_CANCELLED_BY_ADMIN = "email/session/cancelled_by_admin.html"
