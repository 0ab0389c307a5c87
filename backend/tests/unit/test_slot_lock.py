from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from app.core.config import Settings
from app.core.exceptions import SlotBusyException
from app.core.slot_lock import (
    FAIL_OPEN_TOKEN,
    RELEASE_LUA,
    NullSlotLock,
    SlotLock,
    build_slot_lock,
)

MON = date(2025, 3, 3)
TUE = date(2025, 3, 4)
MON_KEY = "gymbook:lock:workout-slot:2025-03-03:mutex"
TUE_KEY = "gymbook:lock:workout-slot:2025-03-04:mutex"


def _redis(held=()):
    """Redis double whose SET NX fails for keys containing any ``held`` day."""
    client = MagicMock()

    def _set(key, value, nx, ex):
        return not any(day.isoformat() in key for day in held)

    client.set.side_effect = _set
    client.eval.return_value = 1
    return client


def _released(client):
    """(key, token) pairs passed to the compare-and-delete script, in call order."""
    pairs = []
    for call in client.eval.call_args_list:
        script, numkeys, key, token = call.args
        assert script == RELEASE_LUA
        assert numkeys == 1
        pairs.append((key, token))
    return pairs


def test_hold_acquires_in_order_and_releases_in_reverse():
    client = _redis()
    lock = SlotLock(client=client, ttl_s=15)

    with lock.hold([TUE, MON, TUE]):
        pass

    taken = [(call.args[0], call.args[1]) for call in client.set.call_args_list]
    assert [key for key, _ in taken] == [MON_KEY, TUE_KEY]
    assert all(call.kwargs == {"nx": True, "ex": 15} for call in client.set.call_args_list)
    assert _released(client) == list(reversed(taken))
    client.delete.assert_not_called()


def test_each_lease_gets_its_own_token():
    client = _redis()
    lock = SlotLock(client=client)

    first = lock.acquire(MON)
    second = lock.acquire(MON)

    assert first and second and first != second


def test_release_only_deletes_own_lease():
    client = _redis()
    lock = SlotLock(client=client)

    lock.release(MON, "01JNKZ0000000000000000TOKN")

    assert _released(client) == [(MON_KEY, "01JNKZ0000000000000000TOKN")]
    client.delete.assert_not_called()


def test_expired_lease_is_logged_not_raised(caplog):
    client = _redis()
    client.eval.return_value = 0
    lock = SlotLock(client=client)

    with lock.hold([MON]):
        pass

    assert "slot_lock_expired_before_release" in caplog.text


def test_busy_day_raises_and_releases_what_was_taken():
    client = _redis(held=[TUE])
    lock = SlotLock(client=client)

    with pytest.raises(SlotBusyException) as exc_info:
        with lock.hold([MON, TUE]):
            pytest.fail("body must not run while a day is busy")

    assert exc_info.value.details == {"date": "2025-03-04"}
    assert [key for key, _ in _released(client)] == [MON_KEY]


def test_release_happens_when_body_raises():
    client = _redis()
    lock = SlotLock(client=client)

    with pytest.raises(RuntimeError):
        with lock.hold([MON]):
            raise RuntimeError("boom")

    client.eval.assert_called_once()


def test_redis_errors_fail_open():
    client = MagicMock()
    client.set.side_effect = ConnectionError("redis down")
    lock = SlotLock(client=client)

    assert lock.acquire(MON) == FAIL_OPEN_TOKEN
    with lock.hold([MON]):
        pass
    client.eval.assert_not_called()


def test_unavailable_redis_fails_open():
    with patch("app.core.slot_lock._get_sync_redis", return_value=None):
        lock = SlotLock()
        entered = False
        with lock.hold([MON]):
            entered = True
    assert entered


def test_null_lock_never_blocks():
    with NullSlotLock().hold([MON, TUE]):
        pass


def test_build_slot_lock_follows_settings():
    assert isinstance(build_slot_lock(Settings(booking_serialization_enabled=False)), NullSlotLock)
    lock = build_slot_lock(Settings(booking_serialization_enabled=True, slot_lock_ttl_seconds=5))
    assert isinstance(lock, SlotLock)
    assert lock.ttl_s == 5
