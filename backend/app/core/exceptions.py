# backend/app/core/exceptions.py
"""
Exceptions raised by GymBook services.

Each domain error knows its HTTP status and carries a stable ``code``
(``DURATION_EXCEEDED``, ``SLOT_BUSY``...) so clients never have to match on
message text. Routes convert them with ``to_http_exception``.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .enums import UserStatus

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An error occurred processing your request"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or type(self).__name__
        self.details = details or {}

    def to_http_exception(self) -> HTTPException:
        payload = {
            "message": self.message or self.default_message,
            "code": self.code,
            "details": self.details,
        }
        return HTTPException(status_code=self.status_code, detail=payload)


# Status families


class ValidationException(DomainException):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Well-formed request the current state does not allow."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Infrastructure or collaborator failure; always a 500."""


# Account exceptions

ACCOUNT_STATUS_MESSAGES = {
    UserStatus.PENDING.value: "Your account is pending admin approval",
    UserStatus.REJECTED.value: "Your account has been rejected",
    UserStatus.SUSPENDED.value: "Your account has been suspended",
}


class EmailAlreadyRegisteredException(ConflictException):
    def __init__(self) -> None:
        super().__init__(message="Email already exists", code="EMAIL_ALREADY_REGISTERED")


class InvalidCredentialsException(UnauthorizedException):
    """Unknown email or wrong password; the two are not distinguished."""

    def __init__(self) -> None:
        super().__init__(message="Invalid email or password", code="INVALID_CREDENTIALS")


class AccountDeactivatedException(UnauthorizedException):
    def __init__(self) -> None:
        super().__init__(message="Account has been deactivated", code="ACCOUNT_DEACTIVATED")


class AccountNotApprovedException(ForbiddenException):
    """Account exists but its approval status does not allow access."""

    def __init__(self, account_status: str):
        super().__init__(
            message=ACCOUNT_STATUS_MESSAGES.get(
                account_status,
                "Your account needs to be approved by admin before accessing this resource",
            ),
            code="ACCOUNT_NOT_APPROVED",
            details={"status": account_status},
        )


class AdminAccountProtectedException(ForbiddenException):
    """Admin accounts cannot be moderated through the admin endpoints."""

    def __init__(self, action: str):
        super().__init__(message=f"Cannot {action}", code="ADMIN_ACCOUNT_PROTECTED")


# Workout session exceptions


class InvalidInputException(ValidationException):
    """Malformed identifiers, timestamps or field values."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_INPUT", details=details)


class DurationExceededException(ValidationException):
    """Raised when a session is longer than the configured maximum."""

    def __init__(self, max_minutes: int, requested_minutes: float):
        hours = max_minutes / 60
        limit = f"{hours:g} hours" if max_minutes % 60 == 0 else f"{max_minutes} minutes"
        super().__init__(
            message=f"Workout session cannot exceed {limit}",
            code="DURATION_EXCEEDED",
            details={
                "max_minutes": max_minutes,
                "requested_minutes": requested_minutes,
            },
        )


class OutOfBookingWindowException(ValidationException):
    """Raised when a session starts outside the current and next week."""

    def __init__(self, window_start: str, window_end: str):
        super().__init__(
            message="You can only book sessions within the current and next week",
            code="OUT_OF_BOOKING_WINDOW",
            details={"window_start": window_start, "window_end": window_end},
        )


class DailyLimitExceededException(ValidationException):
    """Raised when a client already has their allowance of sessions that day."""

    def __init__(self, day: str, limit: int):
        if limit == 1:
            message = "You cannot have more than one workout session per day"
        else:
            message = f"You cannot have more than {limit} workout sessions per day"
        super().__init__(
            message=message,
            code="DAILY_LIMIT_EXCEEDED",
            details={"date": day, "limit": limit},
        )


class CapacityExceededException(ValidationException):
    """Raised when the gym is full for the requested interval."""

    def __init__(self, capacity: int, overlapping: int):
        super().__init__(
            message=(
                f"Maximum {capacity} concurrent workout sessions allowed. "
                "Please choose a different time slot."
            ),
            code="CAPACITY_EXCEEDED",
            details={"capacity": capacity, "overlapping": overlapping},
        )


class NotFoundOrUnauthorizedException(NotFoundException):
    """
    Session is missing or owned by somebody else.

    Both cases share one error so non-owners cannot learn whether a session exists.
    """

    def __init__(self, message: str = "Workout session not found or unauthorized"):
        super().__init__(message=message, code="NOT_FOUND_OR_UNAUTHORIZED")


class InvalidStateException(BusinessRuleException):
    """Operation not permitted in the session's current lifecycle state."""

    def __init__(self, message: str, *, current_status: Optional[str] = None):
        super().__init__(
            message=message,
            code="INVALID_STATE",
            details={"current_status": current_status} if current_status else {},
        )


class AlreadyStartedException(BusinessRuleException):
    """Owner cancellation attempted at or after the session start."""

    def __init__(self) -> None:
        super().__init__(
            message="Cannot delete sessions that have already started or ended",
            code="ALREADY_STARTED",
        )


class SlotBusyException(ConflictException):
    """Another booking for the same day is being written right now."""

    def __init__(self, day: str):
        super().__init__(
            message="Another booking for this day is in progress. Please retry.",
            code="SLOT_BUSY",
            details={"date": day},
        )


class DependencyFailureException(ServiceException):
    """Store or collaborator failure that is not otherwise classified."""

    def __init__(self, message: str = "A required service failed", *, operation: Optional[str] = None):
        super().__init__(
            message=message,
            code="DEPENDENCY_FAILURE",
            details={"operation": operation} if operation else {},
        )


class NotificationException(ServiceException):
    """Notification could not be composed or delivered."""

    def __init__(self, message: str):
        super().__init__(message=message, code="NOTIFICATION_FAILED")


class RepositoryException(Exception):
    """Data access failure. Services translate it to DependencyFailureException."""
