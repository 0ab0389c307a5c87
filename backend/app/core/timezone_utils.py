"""
Timezone utilities for the GymBook platform.

All timestamps are stored in UTC. Calendar concepts (a "day", a "week")
are evaluated in the gym's local timezone, which comes from settings.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from .config import settings


def get_gym_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the gym's timezone.

    Args:
        tz_name: Optional override (defaults to ``settings.gym_timezone``)

    Returns:
        pytz timezone object
    """
    return pytz.timezone(tz_name or settings.gym_timezone)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def to_gym_time(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Convert a datetime to the gym's local time."""
    tz = tz or get_gym_timezone()
    return ensure_utc(dt).astimezone(tz)


def local_midnight_utc(day: date, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """UTC instant of 00:00 local time on ``day``."""
    tz = tz or get_gym_timezone()
    return tz.localize(datetime.combine(day, time.min)).astimezone(pytz.UTC)


def gym_day_bounds(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> Tuple[datetime, datetime]:
    """
    Half-open UTC bounds of the gym calendar day containing ``dt``.

    Returns:
        (start_of_day, start_of_next_day) both in UTC
    """
    tz = tz or get_gym_timezone()
    local_day = to_gym_time(dt, tz).date()
    return local_midnight_utc(local_day, tz), local_midnight_utc(local_day + timedelta(days=1), tz)


def gym_week_start(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Monday of the gym calendar week containing ``dt``."""
    local_day = to_gym_time(dt, tz).date()
    return local_day - timedelta(days=local_day.weekday())


def gym_days_touched(
    start: datetime, end: datetime, tz: Optional[pytz.BaseTzInfo] = None
) -> list[date]:
    """Gym calendar days that the interval ``[start, end)`` touches, in order."""
    tz = tz or get_gym_timezone()
    first = to_gym_time(start, tz).date()
    last_instant = end - timedelta(microseconds=1) if end > start else start
    last = to_gym_time(last_instant, tz).date()
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def format_session_date(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> str:
    """Human readable date in gym time, e.g. ``Monday, March 3, 2025``."""
    local = to_gym_time(dt, tz)
    return f"{local.strftime('%A, %B')} {local.day}, {local.year}"


def format_session_time(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> str:
    """24-hour wall-clock time in gym time, e.g. ``09:30``."""
    return to_gym_time(dt, tz).strftime("%H:%M")
