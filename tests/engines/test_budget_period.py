"""
Tests for budget month windows and calendar helpers.

Covers:
- Gregorian leap-year rule (4 / 100 / 400)
- Month windows spanning the calendar month
- salary_date validation (accepted, not used to shift the window)
- Malformed month keys
"""

from datetime import date

import pytest

from money_engines.budget_period import (
    BudgetPeriodCalculator,
    days_in_month,
    is_leap_year,
    month_bounds,
    months_of_year,
    parse_month,
)
from money_kernel.exceptions import InvalidMonthError, InvalidRecordError


class TestLeapYears:

    @pytest.mark.parametrize(
        "year,expected",
        [(2024, True), (2023, False), (2000, True), (1900, False), (2100, False), (2400, True)],
    )
    def test_gregorian_rule(self, year, expected):
        assert is_leap_year(year) is expected

    def test_days_in_february(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28

    def test_days_in_other_months(self):
        assert days_in_month(2023, 4) == 30
        assert days_in_month(2023, 12) == 31


class TestPeriodFor:
    """period_for returns the calendar month whatever the salary date."""

    def setup_method(self):
        self.calculator = BudgetPeriodCalculator()

    @pytest.mark.parametrize(
        "month,end",
        [
            ("2024-02", date(2024, 2, 29)),
            ("2023-02", date(2023, 2, 28)),
            ("2000-02", date(2000, 2, 29)),
            ("1900-02", date(1900, 2, 28)),
        ],
    )
    def test_february_boundaries(self, month, end):
        period = self.calculator.period_for(month=month, salary_date=1)

        assert period.start_date == end.replace(day=1)
        assert period.end_date == end

    def test_salary_date_does_not_shift_window(self):
        anchored = self.calculator.period_for(month="2024-05", salary_date=25)

        assert anchored.start_date == date(2024, 5, 1)
        assert anchored.end_date == date(2024, 5, 31)

    def test_period_contains_its_bounds(self):
        period = self.calculator.period_for(month="2024-11", salary_date=1)

        assert period.contains(date(2024, 11, 1))
        assert period.contains(date(2024, 11, 30))
        assert not period.contains(date(2024, 12, 1))

    @pytest.mark.parametrize("salary_date", [0, 32, -1])
    def test_salary_date_out_of_range_rejected(self, salary_date):
        with pytest.raises(InvalidRecordError):
            self.calculator.period_for(month="2024-01", salary_date=salary_date)

    @pytest.mark.parametrize("month", ["2024-13", "2024-00", "24-01", "2024/01", "", "abcd-ef"])
    def test_malformed_month_rejected(self, month):
        with pytest.raises(InvalidMonthError):
            self.calculator.period_for(month=month, salary_date=1)


class TestMonthHelpers:

    def test_parse_month(self):
        assert parse_month("2024-07") == (2024, 7)

    def test_month_bounds(self):
        assert month_bounds(2023, 9) == (date(2023, 9, 1), date(2023, 9, 30))

    def test_months_of_year_yields_twelve_contiguous_months(self):
        months = list(months_of_year(2024))

        assert [key for key, _, _ in months][0] == "2024-01"
        assert [key for key, _, _ in months][-1] == "2024-12"
        assert len(months) == 12
        for (_, _, end), (_, next_start, _) in zip(months, months[1:]):
            assert (next_start - end).days == 1
