# backend/app/core/clock.py
# Time source for expiry checks. Services take a clock so tests can move time.
from datetime import datetime, timezone


class Clock:
    """Abstract interface for reading the current time."""

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
