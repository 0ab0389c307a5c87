"""
Clock abstraction for the GymBook platform.

Services never call ``datetime.now`` directly; they ask an injected clock so
booking-window and "already started" rules can be exercised with a fixed
instant in tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current instant."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant.astimezone(timezone.utc)

    def advance(self, **delta: float) -> None:
        self._instant = self._instant + timedelta(**delta)


system_clock = SystemClock()
