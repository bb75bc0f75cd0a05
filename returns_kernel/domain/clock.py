"""
Clock -- injectable time source for authorship stamps.

The editor and its collaborators never call ``datetime.now()`` directly;
every ``updated_at`` / ``completed_at`` / payment ``created_at`` they write
comes from the ``Clock`` they were built with.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware UTC timestamps."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Repeated ``now()`` calls return the same instant, so a single editor
    operation and the assertions made about it agree on the stamp.
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set_time(self, time: datetime) -> None:
        self._now = time

    def advance(self, seconds: float = 1) -> None:
        self._now += timedelta(seconds=seconds)
