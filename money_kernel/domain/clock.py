"""
Clock -- injectable source of "now" for the tracker.

Services never call ``datetime.now()`` or ``date.today()``.  Three things
depend on the current time and all of them take a Clock:

    - the dashboard's current month,
    - the year embedded in generated invoice/quotation numbers,
    - the ``last_updated_at`` stamp written by the price refresh sweep.

SystemClock is the only implementation that touches the real wall clock.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, time, timedelta


class Clock(ABC):
    """Time as seen by the tracker.  ``now()`` is always timezone-aware."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()

    def current_month(self) -> tuple[int, int]:
        """(year, month) of ``today()``."""
        today = self.today()
        return today.year, today.month


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant, for tests and reproducible seeding.

    Accepts either a datetime (naive values are taken as UTC) or a plain
    date, which is pinned to midday UTC so ``today()`` never drifts across
    a date boundary.
    """

    DEFAULT = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __init__(self, fixed: datetime | date | None = None):
        self._now = self._coerce(fixed) if fixed is not None else self.DEFAULT

    @staticmethod
    def _coerce(value: datetime | date) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return datetime.combine(value, time(12, 0), tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def set_time(self, value: datetime | date) -> None:
        self._now = self._coerce(value)

    def advance(self, seconds: int = 0, *, days: int = 0) -> None:
        self._now += timedelta(days=days, seconds=seconds)
