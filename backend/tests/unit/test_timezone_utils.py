from datetime import date, datetime, timezone

import pytz

from app.core.timezone_utils import (
    ensure_utc,
    format_session_date,
    format_session_time,
    gym_day_bounds,
    gym_days_touched,
    gym_week_start,
    local_midnight_utc,
    to_gym_time,
)
from tests.helpers import at

NEW_YORK = pytz.timezone("America/New_York")


def test_ensure_utc_tags_naive_values_as_utc():
    assert ensure_utc(datetime(2025, 3, 6, 9, 0)) == at(6, 9)


def test_ensure_utc_converts_offsets():
    value = NEW_YORK.localize(datetime(2025, 3, 6, 9, 0))
    assert ensure_utc(value) == at(6, 14)


def test_to_gym_time_uses_given_zone():
    local = to_gym_time(at(6, 14), NEW_YORK)
    assert (local.hour, local.day) == (9, 6)


def test_local_midnight_utc_honours_offset():
    assert local_midnight_utc(date(2025, 3, 6), NEW_YORK) == at(6, 5)


def test_gym_day_bounds_are_half_open_local_day():
    start, end = gym_day_bounds(at(6, 3), NEW_YORK)
    # 03:00 UTC on the 6th is still the 5th in New York
    assert start == at(5, 5)
    assert end == at(6, 5)


def test_gym_day_bounds_across_dst_change():
    # 2025-03-09 is 23 hours long in New York
    start, end = gym_day_bounds(at(9, 12), NEW_YORK)
    assert (end - start).total_seconds() == 23 * 3600


def test_gym_week_start_is_monday():
    assert gym_week_start(at(5, 10), pytz.UTC) == date(2025, 3, 3)
    assert gym_week_start(at(9, 23), pytz.UTC) == date(2025, 3, 3)
    assert gym_week_start(at(10, 0), pytz.UTC) == date(2025, 3, 10)


def test_gym_days_touched_single_day():
    assert gym_days_touched(at(6, 9), at(6, 10), pytz.UTC) == [date(2025, 3, 6)]


def test_gym_days_touched_ending_at_midnight_stays_on_one_day():
    assert gym_days_touched(at(6, 22), at(7, 0), pytz.UTC) == [date(2025, 3, 6)]


def test_gym_days_touched_across_midnight():
    assert gym_days_touched(at(6, 23), at(7, 1), pytz.UTC) == [
        date(2025, 3, 6),
        date(2025, 3, 7),
    ]


def test_formatting_in_gym_time():
    start = datetime(2025, 3, 3, 14, 30, tzinfo=timezone.utc)
    assert format_session_date(start, pytz.UTC) == "Monday, March 3, 2025"
    assert format_session_time(start, NEW_YORK) == "09:30"
