"""
Tests for deadline-based project income recognition.

Covers:
- Expected income recognised from the deadline month onwards
- prior / monthly / cumulative receipts
- Outstanding balance, including overpayment
- Relevance filter and month totals
- Projects without a deadline or expected amount
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from money_engines.recognition import IncomeRecognitionEngine
from money_kernel.domain.records import Direction, ProjectInfo, TransactionRecord


def _project(expected="10000", end=date(2024, 5, 20), name="Website"):
    return ProjectInfo(
        id=uuid4(),
        name=name,
        expected_amount=Decimal(expected) if expected is not None else None,
        end_date=end,
    )


def _income(project, amount, on, direction=Direction.INCOME):
    return TransactionRecord(
        id=uuid4(),
        date=on,
        amount=Decimal(amount),
        direction=direction,
        category_id=uuid4(),
        project_id=project.id if project is not None else None,
    )


def _month(report, key):
    return next(m for m in report if m.month == key)


class TestDeadlineRecognition:
    """Expected 10000, deadline in May, 4000 before and 3000 during May."""

    def setup_method(self):
        self.engine = IncomeRecognitionEngine()
        self.project = _project()
        self.report = self.engine.project_income_report(
            year=2024,
            projects=[self.project],
            income=[
                _income(self.project, "4000", date(2024, 3, 10)),
                _income(self.project, "3000", date(2024, 5, 2)),
            ],
        )

    def test_twelve_months_returned(self):
        assert [m.month for m in self.report] == [f"2024-{m:02d}" for m in range(1, 13)]

    def test_deadline_month_figures(self):
        may = _month(self.report, "2024-05")
        detail = may.projects[0]

        assert detail.is_deadline_month
        assert not detail.is_past_deadline
        assert detail.prior_actual == Decimal("4000")
        assert detail.monthly_actual == Decimal("3000")
        assert detail.cumulative_actual == Decimal("7000")
        assert detail.current_expected == Decimal("6000")
        assert detail.outstanding_balance == Decimal("3000")

    def test_before_deadline_nothing_is_expected(self):
        march = _month(self.report, "2024-03")
        detail = march.projects[0]

        assert detail.current_expected == Decimal("0")
        assert detail.monthly_actual == Decimal("4000")
        assert march.actual_income == Decimal("4000")
        assert march.expected_income == Decimal("0")

    def test_past_deadline_keeps_recognising_remainder(self):
        june = _month(self.report, "2024-06")
        detail = june.projects[0]

        assert detail.is_past_deadline
        assert detail.prior_actual == Decimal("7000")
        assert detail.current_expected == Decimal("3000")
        assert june.expected_income == Decimal("3000")

    def test_month_totals_sum_kept_rows(self):
        may = _month(self.report, "2024-05")

        assert may.actual_income == Decimal("3000")
        assert may.expected_income == Decimal("6000")


class TestEdgeCases:

    def setup_method(self):
        self.engine = IncomeRecognitionEngine()

    def test_settled_project_drops_out_after_deadline(self):
        project = _project(expected="5000", end=date(2024, 2, 15))
        report = self.engine.project_income_report(
            year=2024,
            projects=[project],
            income=[_income(project, "5000", date(2024, 2, 1))],
        )

        assert _month(report, "2024-02").projects[0].outstanding_balance == Decimal("0")
        assert _month(report, "2024-03").projects == ()

    def test_overpayment_gives_negative_outstanding(self):
        project = _project(expected="1000", end=date(2024, 1, 31))
        report = self.engine.project_income_report(
            year=2024,
            projects=[project],
            income=[_income(project, "1500", date(2024, 1, 5))],
        )

        january = _month(report, "2024-01").projects[0]
        february = _month(report, "2024-02").projects[0]
        assert january.outstanding_balance == Decimal("-500")
        assert february.current_expected == Decimal("0")
        assert february.outstanding_balance == Decimal("-500")

    def test_project_without_deadline_never_recognises(self):
        project = _project(end=None)
        report = self.engine.project_income_report(year=2024, projects=[project], income=[])

        assert all(m.expected_income == Decimal("0") for m in report)
        # outstanding 10000 keeps the row visible
        assert all(len(m.projects) == 1 for m in report)

    def test_missing_expected_amount_counts_as_zero(self):
        project = _project(expected=None)
        report = self.engine.project_income_report(year=2024, projects=[project], income=[])

        assert all(m.projects == () for m in report)

    def test_receipts_from_earlier_years_count_as_prior(self):
        project = _project(expected="8000", end=date(2024, 1, 31))
        report = self.engine.project_income_report(
            year=2024,
            projects=[project],
            income=[_income(project, "2000", date(2023, 11, 30))],
        )

        detail = _month(report, "2024-01").projects[0]
        assert detail.prior_actual == Decimal("2000")
        assert detail.current_expected == Decimal("6000")

    def test_non_income_and_unlinked_transactions_skipped(self):
        project = _project(expected="1000", end=date(2024, 3, 31))
        report = self.engine.project_income_report(
            year=2024,
            projects=[project],
            income=[
                _income(project, "400", date(2024, 3, 1), direction=Direction.EXPENSE),
                _income(None, "900", date(2024, 3, 1)),
            ],
        )

        detail = _month(report, "2024-03").projects[0]
        assert detail.monthly_actual == Decimal("0")
        assert detail.current_expected == Decimal("1000")

    def test_no_projects_yields_twelve_empty_months(self):
        report = self.engine.project_income_report(year=2023, projects=[], income=[])

        assert len(report) == 12
        assert all(m.projects == () and m.actual_income == Decimal("0") for m in report)
