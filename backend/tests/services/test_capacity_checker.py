from datetime import datetime

import pytest

from app.core.config import Settings
from app.core.exceptions import CapacityExceededException, DailyLimitExceededException
from app.models.workout_session import WorkoutSession, WorkoutSessionStatus
from app.services.capacity_checker import CapacityChecker, sessions_overlap
from tests.helpers import at


def _add_session(db, user, start: datetime, end: datetime, **fields) -> WorkoutSession:
    session = WorkoutSession(client_id=user.id, start_time=start, end_time=end, **fields)
    db.add(session)
    db.commit()
    return session


@pytest.fixture
def checker(db, clock, test_settings) -> CapacityChecker:
    return CapacityChecker(db, clock=clock, settings=test_settings)


class TestSessionsOverlap:
    def test_touching_intervals_do_not_overlap(self):
        assert not sessions_overlap(at(6, 9), at(6, 10), at(6, 10), at(6, 11))
        assert not sessions_overlap(at(6, 10), at(6, 11), at(6, 9), at(6, 10))

    def test_partial_and_contained_intervals_overlap(self):
        assert sessions_overlap(at(6, 9), at(6, 11), at(6, 10), at(6, 12))
        assert sessions_overlap(at(6, 9), at(6, 12), at(6, 10), at(6, 11))


class TestDailyLimit:
    def test_first_session_of_the_day_passes(self, checker, client_user):
        assert checker.check_daily_limit(client_user.id, at(6, 9)) == 0

    def test_second_session_same_day_rejected(self, db, checker, client_user):
        _add_session(db, client_user, at(6, 7), at(6, 8))
        with pytest.raises(DailyLimitExceededException) as exc_info:
            checker.check_daily_limit(client_user.id, at(6, 18))
        assert exc_info.value.details == {"date": "2025-03-06", "limit": 1}

    def test_next_day_is_independent(self, db, checker, client_user):
        _add_session(db, client_user, at(6, 7), at(6, 8))
        assert checker.check_daily_limit(client_user.id, at(7, 7)) == 0

    def test_other_clients_do_not_count(self, db, checker, client_user, other_client):
        _add_session(db, other_client, at(6, 7), at(6, 8))
        assert checker.check_daily_limit(client_user.id, at(6, 9)) == 0

    def test_cancelled_sessions_do_not_count(self, db, checker, client_user):
        _add_session(
            db,
            client_user,
            at(6, 7),
            at(6, 8),
            status=WorkoutSessionStatus.CANCELLED.value,
            is_deleted=True,
        )
        assert checker.check_daily_limit(client_user.id, at(6, 9)) == 0

    def test_excluded_session_does_not_count(self, db, checker, client_user):
        existing = _add_session(db, client_user, at(6, 7), at(6, 8))
        assert checker.check_daily_limit(client_user.id, at(6, 9), exclude_session_id=existing.id) == 0

    def test_day_is_evaluated_in_gym_timezone(self, db, clock, client_user):
        settings = Settings(gym_timezone="America/New_York")
        checker = CapacityChecker(db, clock=clock, settings=settings)
        # 23:00 New York on the 5th
        _add_session(db, client_user, at(6, 4), at(6, 5))
        # 10:00 New York on the 6th: a different gym day
        assert checker.check_daily_limit(client_user.id, at(6, 15)) == 0
        # 20:00 New York on the 5th: same gym day as the first booking
        with pytest.raises(DailyLimitExceededException):
            checker.check_daily_limit(client_user.id, at(6, 1))

    def test_configurable_limit(self, db, clock, client_user):
        checker = CapacityChecker(db, clock=clock, settings=Settings(daily_session_limit=2))
        _add_session(db, client_user, at(6, 7), at(6, 8))
        assert checker.check_daily_limit(client_user.id, at(6, 9)) == 1


class TestOverlapCapacity:
    def _fill(self, db, make_user, start, end, n):
        for _ in range(n):
            _add_session(db, make_user(), start, end)

    def test_seven_overlapping_leaves_room(self, db, checker, make_user):
        self._fill(db, make_user, at(6, 9), at(6, 10), 7)
        assert checker.check_overlap_capacity(at(6, 9, 30), at(6, 10, 30)) == 7

    def test_eight_overlapping_is_full(self, db, checker, make_user):
        self._fill(db, make_user, at(6, 9), at(6, 10), 8)
        with pytest.raises(CapacityExceededException) as exc_info:
            checker.check_overlap_capacity(at(6, 9, 30), at(6, 10, 30))
        assert exc_info.value.details == {"capacity": 8, "overlapping": 8}

    def test_touching_interval_is_not_counted(self, db, checker, make_user):
        self._fill(db, make_user, at(6, 9), at(6, 10), 8)
        assert checker.check_overlap_capacity(at(6, 10), at(6, 11)) == 0

    def test_cancelled_sessions_free_capacity(self, db, checker, make_user):
        self._fill(db, make_user, at(6, 9), at(6, 10), 7)
        _add_session(
            db,
            make_user(),
            at(6, 9),
            at(6, 10),
            status=WorkoutSessionStatus.CANCELLED.value,
            is_deleted=True,
        )
        assert checker.count_overlapping(at(6, 9), at(6, 10)) == 7

    def test_excluded_session_is_not_counted(self, db, checker, make_user):
        self._fill(db, make_user, at(6, 9), at(6, 10), 7)
        mine = _add_session(db, make_user(), at(6, 9), at(6, 10))
        assert checker.check_overlap_capacity(at(6, 9), at(6, 10), exclude_session_id=mine.id) == 7
