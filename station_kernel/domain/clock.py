"""
Injectable time source.

Services take a ``Clock`` instead of calling ``date.today()`` so the default
record date, the default summary day and the current stock month are all
controllable in tests.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Clock frozen at a fixed instant (default 2024-01-15 12:00 UTC).

    Time moves only through ``advance`` and ``set_time``.
    """

    DEFAULT_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)

    def __init__(self, fixed_time: datetime | None = None):
        self._time = fixed_time or self.DEFAULT_TIME

    def now(self) -> datetime:
        return self._time

    def set_time(self, time: datetime) -> None:
        self._time = time

    def advance(self, seconds: int = 1) -> None:
        self._time += timedelta(seconds=seconds)
