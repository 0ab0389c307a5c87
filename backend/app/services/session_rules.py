# backend/app/services/session_rules.py
"""
Time-window rules for workout sessions.

Pure functions with no I/O. Each check raises its own domain exception at
the first violation so callers can report exactly which rule failed.
Create and update run the same checks against the prospective interval.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

import pytz

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    DurationExceededException,
    InvalidInputException,
    OutOfBookingWindowException,
)
from ..core.timezone_utils import (
    ensure_utc,
    get_gym_timezone,
    gym_week_start,
    local_midnight_utc,
)

DEFAULT_MAX_DURATION = timedelta(minutes=default_settings.max_session_duration_minutes)

# Last bookable start is one millisecond before the window end (Sunday 23:59:59.999).
WINDOW_RESOLUTION = timedelta(milliseconds=1)


def parse_timestamp(
    value: Union[datetime, str], field: str, tz: Optional[pytz.BaseTzInfo] = None
) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are wall-clock times in the gym timezone.

    Raises:
        InvalidInputException: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidInputException(
                f"Invalid {field}: expected an ISO-8601 timestamp",
                details={"field": field, "value": value},
            ) from exc
    else:
        raise InvalidInputException(f"{field} is required", details={"field": field})

    if parsed.tzinfo is None:
        tz = tz or get_gym_timezone()
        parsed = tz.localize(parsed)
    return ensure_utc(parsed)


def validate_duration(
    start: datetime, end: datetime, max_duration: timedelta = DEFAULT_MAX_DURATION
) -> timedelta:
    """
    Check that ``end`` is after ``start`` and the session is not too long.

    Returns:
        The session duration

    Raises:
        InvalidInputException: If end is not after start
        DurationExceededException: If duration exceeds ``max_duration``
    """
    duration = end - start
    if duration <= timedelta(0):
        raise InvalidInputException(
            "End time must be after start time",
            details={"start_time": start.isoformat(), "end_time": end.isoformat()},
        )
    if duration > max_duration:
        raise DurationExceededException(
            max_minutes=int(max_duration.total_seconds() // 60),
            requested_minutes=duration.total_seconds() / 60,
        )
    return duration


def booking_window(
    now: datetime, tz: Optional[pytz.BaseTzInfo] = None, weeks: int = 2
) -> Tuple[datetime, datetime]:
    """
    Bookable range relative to ``now``.

    Starts at Monday 00:00 of the current gym week and ends (exclusive) at
    Monday 00:00 ``weeks`` weeks later, i.e. after Sunday of next week for
    the default of two weeks. Both bounds are returned in UTC.
    """
    tz = tz or get_gym_timezone()
    monday = gym_week_start(now, tz)
    return (
        local_midnight_utc(monday, tz),
        local_midnight_utc(monday + timedelta(weeks=weeks), tz),
    )


def validate_booking_window(
    start: datetime,
    now: datetime,
    tz: Optional[pytz.BaseTzInfo] = None,
    weeks: int = 2,
) -> None:
    """
    Reject sessions starting outside the bookable range.

    Raises:
        OutOfBookingWindowException: If ``start`` is before the current week
            or later than the final millisecond of the last bookable Sunday
    """
    window_start, window_end = booking_window(now, tz, weeks)
    if start < window_start or start > window_end - WINDOW_RESOLUTION:
        raise OutOfBookingWindowException(
            window_start=window_start.isoformat(),
            window_end=window_end.isoformat(),
        )


def validate_session_interval(
    start: datetime,
    end: datetime,
    now: datetime,
    settings: Optional[Settings] = None,
) -> None:
    """Run duration then booking-window checks with values from ``settings``."""
    settings = settings or default_settings
    validate_duration(start, end, timedelta(minutes=settings.max_session_duration_minutes))
    validate_booking_window(
        start,
        now,
        get_gym_timezone(settings.gym_timezone),
        settings.booking_window_weeks,
    )
