"""
Module: money_engines.budget_period
Responsibility:
    Turn a "YYYY-MM" month key into the date window a budget month covers,
    and provide the calendar helpers (leap years, month lengths, month
    iteration) the other engines window by.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - The window runs from the first to the last calendar day of the month.
    - Gregorian leap rule: divisible by 4 and not by 100, unless divisible
      by 400.
    - salary_date is accepted and validated but does not shift the window.

Failure modes:
    - InvalidMonthError for month keys that are not YYYY-MM with a month in
      1..12.
    - InvalidRecordError for salary_date outside 1..31.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date
from typing import Iterator

from money_kernel.exceptions import InvalidMonthError, InvalidRecordError
from money_engines.tracer import traced_engine

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass(frozen=True)
class BudgetPeriod:
    month: str
    start_date: date
    end_date: date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def parse_month(month: str) -> tuple[int, int]:
    """Split "YYYY-MM" into (year, month), validating both parts."""
    match = _MONTH_KEY.match(month or "")
    if match is None:
        raise InvalidMonthError(month)
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12 or year < 1:
        raise InvalidMonthError(month)
    return year, mon


def check_year(year: int) -> int:
    """Reject years the calendar cannot represent (and booleans)."""
    if isinstance(year, bool) or not isinstance(year, int) or not MINYEAR <= year <= MAXYEAR:
        raise InvalidRecordError("report", "year", f"must be a whole year {MINYEAR}..{MAXYEAR}")
    return year


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def months_of_year(year: int) -> Iterator[tuple[str, date, date]]:
    """Yield (key, first day, last day) for January..December."""
    for month in range(1, 13):
        start, end = month_bounds(year, month)
        yield month_key(year, month), start, end


class BudgetPeriodCalculator:
    """
    Budget month windows.

    Contract:
        period_for(month, salary_date) -> BudgetPeriod spanning the calendar
        month.  salary_date is validated but ignored, as recorded.
    """

    @traced_engine("budget_period", "1.0", fingerprint_fields=("month", "salary_date"))
    def period_for(self, *, month: str, salary_date: int = 1) -> BudgetPeriod:
        if salary_date is None:
            salary_date = 1
        if not 1 <= salary_date <= 31:
            raise InvalidRecordError("budget_settings", "salary_date", "must be 1..31")
        year, mon = parse_month(month)
        start, end = month_bounds(year, mon)
        return BudgetPeriod(month=month_key(year, mon), start_date=start, end_date=end)
