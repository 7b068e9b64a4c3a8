# app/core/clock.py
"""Injectable wall clock so slot generation and booking can be tested at a fixed instant"""
from datetime import datetime, timezone


class SystemClock:
    """Server clock, always timezone-aware UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant"""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._instant


_system_clock = SystemClock()


def get_clock() -> SystemClock:
    """Clock dependency for FastAPI"""
    return _system_clock
