"""Injectable clocks so services never call ``datetime.now()`` directly."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


class SystemClock:
    """Production clock returning timezone-aware UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Test clock that only moves when told to."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2024, 12, 31, 9, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def advance(self, seconds: int = 1) -> datetime:
        self._time += timedelta(seconds=seconds)
        return self._time
