import pytest

from app.core.exceptions import (
    AccountDeactivatedException,
    AccountNotApprovedException,
    AdminAccountProtectedException,
    AlreadyStartedException,
    CapacityExceededException,
    DailyLimitExceededException,
    DependencyFailureException,
    DomainException,
    DurationExceededException,
    EmailAlreadyRegisteredException,
    InvalidCredentialsException,
    InvalidInputException,
    InvalidStateException,
    NotFoundException,
    NotFoundOrUnauthorizedException,
    NotificationException,
    OutOfBookingWindowException,
    SlotBusyException,
)


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (InvalidInputException("bad"), 400, "INVALID_INPUT"),
        (DurationExceededException(180, 181), 400, "DURATION_EXCEEDED"),
        (OutOfBookingWindowException("a", "b"), 400, "OUT_OF_BOOKING_WINDOW"),
        (DailyLimitExceededException("2025-03-06", 1), 400, "DAILY_LIMIT_EXCEEDED"),
        (CapacityExceededException(8, 8), 400, "CAPACITY_EXCEEDED"),
        (NotFoundOrUnauthorizedException(), 404, "NOT_FOUND_OR_UNAUTHORIZED"),
        (NotFoundException("gone", code="SESSION_NOT_FOUND"), 404, "SESSION_NOT_FOUND"),
        (InvalidStateException("nope", current_status="COMPLETED"), 422, "INVALID_STATE"),
        (AlreadyStartedException(), 422, "ALREADY_STARTED"),
        (SlotBusyException("2025-03-06"), 409, "SLOT_BUSY"),
        (DependencyFailureException("db down", operation="create"), 500, "DEPENDENCY_FAILURE"),
        (NotificationException("smtp"), 500, "NOTIFICATION_FAILED"),
        (EmailAlreadyRegisteredException(), 409, "EMAIL_ALREADY_REGISTERED"),
        (InvalidCredentialsException(), 401, "INVALID_CREDENTIALS"),
        (AccountDeactivatedException(), 401, "ACCOUNT_DEACTIVATED"),
        (AccountNotApprovedException("pending"), 403, "ACCOUNT_NOT_APPROVED"),
        (AdminAccountProtectedException("delete admin account"), 403, "ADMIN_ACCOUNT_PROTECTED"),
    ],
)
def test_http_mapping(exc, status_code, code):
    assert isinstance(exc, DomainException)
    http_exc = exc.to_http_exception()
    assert http_exc.status_code == status_code
    assert http_exc.detail["code"] == code
    assert http_exc.detail["message"] == exc.message


def test_duration_message_uses_hours_for_whole_hours():
    assert DurationExceededException(180, 200).message == "Workout session cannot exceed 3 hours"
    assert DurationExceededException(90, 100).message == "Workout session cannot exceed 90 minutes"


def test_daily_limit_message_for_single_session():
    exc = DailyLimitExceededException("2025-03-06", 1)
    assert exc.message == "You cannot have more than one workout session per day"
    assert exc.details == {"date": "2025-03-06", "limit": 1}


def test_capacity_message_names_the_ceiling():
    exc = CapacityExceededException(capacity=8, overlapping=8)
    assert exc.message.startswith("Maximum 8 concurrent workout sessions allowed")


def test_invalid_state_omits_status_when_unknown():
    assert InvalidStateException("nope").details == {}


def test_unapproved_account_messages_follow_status():
    assert AccountNotApprovedException("rejected").message == "Your account has been rejected"
    assert AccountNotApprovedException("mystery").message.startswith("Your account needs")
