"""
Clock -- Injectable source of "now".

Responsibility:
    Services take the current time from a ``Clock`` instead of calling
    ``datetime.now()``, so shift open/close timestamps and the hours
    derived from them are reproducible in tests.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the only place the kernel reads
    the real time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

_DEFAULT_TEST_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Returns timezone-aware datetimes."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock that only moves when told to.

    ``now()`` returns the same value until ``advance``, ``advance_hours``
    or ``set_time`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or _DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_hours(self, hours: float) -> None:
        """Move forward by ``hours``; fractions are kept to the second."""
        self._current += timedelta(seconds=round(hours * 3600))
