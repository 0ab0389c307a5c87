"""
Per-day booking leases backed by Redis.

Capacity and daily-limit checks read the ledger and then write to it. Two
concurrent bookings for the same gym day can both pass the read. When
``booking_serialization_enabled`` is on, mutations take a short lease for
every gym day their interval touches so check-then-write runs one at a time
per day. Redis being unreachable never blocks bookings; the lease fails open.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
import threading
from typing import Iterable, Iterator, Optional

from redis import Redis

from app.core.config import Settings, settings
from app.core.exceptions import SlotBusyException
from app.core.ulid_helper import generate_ulid

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

# Delete the lease only while it still carries our token.
# KEYS[1] = lease key, ARGV[1] = holder token. Returns 1 when deleted.
RELEASE_LUA = r"""
if redis.call('GET', KEYS[1]) == ARGV[1] then
  return redis.call('DEL', KEYS[1])
end
return 0
"""

# Token handed out when Redis cannot be reached; nothing is stored for it.
FAIL_OPEN_TOKEN = ""


def _lock_key(day: date) -> str:
    return f"workout-slot:{day.isoformat()}:mutex"


def _namespaced_key(key: str) -> str:
    return f"{settings.redis_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("slot_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


class SlotLock:
    """
    Acquire and release day leases.

    A Redis client can be injected; otherwise the process-wide client built
    from ``settings.redis_url`` is used.
    """

    def __init__(self, client: Optional[Redis] = None, ttl_s: Optional[int] = None):
        self._client = client
        self.ttl_s = ttl_s or settings.slot_lock_ttl_seconds

    def _redis(self) -> Optional[Redis]:
        return self._client if self._client is not None else _get_sync_redis()

    def acquire(self, day: date) -> Optional[str]:
        """
        Take the lease for ``day``.

        Returns the holder token, or ``None`` when another request holds the
        day. Redis failures return ``FAIL_OPEN_TOKEN``.
        """
        client = self._redis()
        if client is None:
            logger.warning("slot_lock_redis_unavailable", extra={"day": day.isoformat()})
            return FAIL_OPEN_TOKEN
        token = generate_ulid()
        try:
            acquired = client.set(_namespaced_key(_lock_key(day)), token, nx=True, ex=self.ttl_s)
        except Exception as exc:
            logger.warning(
                "slot_lock_acquire_failed",
                extra={
                    "day": day.isoformat(),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return FAIL_OPEN_TOKEN
        return token if acquired else None

    def release(self, day: date, token: str) -> None:
        """Drop the lease for ``day`` if ``token`` still owns it."""
        if token == FAIL_OPEN_TOKEN:
            return
        client = self._redis()
        if client is None:
            return
        try:
            deleted = client.eval(RELEASE_LUA, 1, _namespaced_key(_lock_key(day)), token)
        except Exception as exc:
            logger.warning(
                "slot_lock_release_failed",
                extra={
                    "day": day.isoformat(),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return
        if not deleted:
            logger.warning("slot_lock_expired_before_release", extra={"day": day.isoformat()})

    @contextmanager
    def hold(self, days: Iterable[date]) -> Iterator[None]:
        """
        Hold leases for all ``days``, acquired in ascending order.

        Raises:
            SlotBusyException: If another request holds one of the days
        """
        held: list[tuple[date, str]] = []
        try:
            for day in sorted(set(days)):
                token = self.acquire(day)
                if token is None:
                    raise SlotBusyException(day.isoformat())
                held.append((day, token))
            yield
        finally:
            for day, token in reversed(held):
                self.release(day, token)


class NullSlotLock:
    """Lease that never blocks; used when serialization is disabled."""

    @contextmanager
    def hold(self, days: Iterable[date]) -> Iterator[None]:
        yield


def build_slot_lock(app_settings: Optional[Settings] = None) -> SlotLock | NullSlotLock:
    """Real Redis lease when serialization is enabled, no-op otherwise."""
    app_settings = app_settings or settings
    if app_settings.booking_serialization_enabled:
        return SlotLock(ttl_s=app_settings.slot_lock_ttl_seconds)
    return NullSlotLock()
