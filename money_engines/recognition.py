"""
Module: money_engines.recognition
Responsibility:
    Per project, per month of a year, compare income received against
    income expected, recognising a project's outstanding expected amount
    once its deadline (end_date) month arrives or has passed.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import money_kernel/domain and money_engines helpers.

Invariants enforced:
    - monthly_actual sums income dated inside the month.
    - prior_actual sums income dated strictly before the month, in any year.
    - cumulative_actual sums income dated on or before the month's last day.
    - current_expected = max(0, expected - prior_actual) in the deadline
      month and every later month; 0 before the deadline.  No pro-rata
      accrual.
    - outstanding_balance = expected - cumulative_actual (negative when
      overpaid).
    - A project/month row is kept iff current_expected > 0, or
      monthly_actual > 0, or outstanding_balance != 0.
    - Month totals sum the kept rows only.  All twelve months are always
      returned.
    - A missing expected_amount counts as 0; a project without an end_date
      never recognises anything.
    - Only income-direction transactions carrying a project id count.

Failure modes:
    (none -- empty inputs yield twelve empty months)
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from money_kernel.domain.records import Direction, ProjectInfo, TransactionRecord
from money_engines.budget_period import months_of_year
from money_engines.tracer import traced_engine

ZERO = Decimal("0")


@dataclass(frozen=True)
class ProjectMonthDetail:
    project_id: UUID
    project_name: str
    expected_amount: Decimal
    monthly_actual: Decimal
    prior_actual: Decimal
    cumulative_actual: Decimal
    current_expected: Decimal
    outstanding_balance: Decimal
    is_deadline_month: bool
    is_past_deadline: bool


@dataclass(frozen=True)
class MonthIncomeSummary:
    month: str
    actual_income: Decimal
    expected_income: Decimal
    projects: tuple[ProjectMonthDetail, ...]


def _is_relevant(detail: ProjectMonthDetail) -> bool:
    return (
        detail.current_expected > ZERO
        or detail.monthly_actual > ZERO
        or detail.outstanding_balance != ZERO
    )


class IncomeRecognitionEngine:
    """
    Deadline-based income recognition.

    Contract:
        project_income_report(year=..., projects=..., income=...) returns
        twelve MonthIncomeSummary rows, January first.  ``income`` may hold
        any transactions; non-income and project-less ones are skipped.
    """

    @traced_engine("recognition", "1.0", fingerprint_fields=("year", "projects", "income"))
    def project_income_report(
        self,
        *,
        year: int,
        projects: Sequence[ProjectInfo],
        income: Sequence[TransactionRecord],
    ) -> tuple[MonthIncomeSummary, ...]:
        by_project: dict[UUID, list[tuple[date, Decimal]]] = defaultdict(list)
        for txn in income:
            if txn.direction != Direction.INCOME or txn.project_id is None:
                continue
            by_project[txn.project_id].append((txn.date, txn.amount))

        months: list[MonthIncomeSummary] = []
        for key, month_start, month_end in months_of_year(year):
            details = []
            for project in projects:
                detail = self._project_month(
                    project, by_project.get(project.id, ()), month_start, month_end
                )
                if _is_relevant(detail):
                    details.append(detail)
            months.append(
                MonthIncomeSummary(
                    month=key,
                    actual_income=sum((d.monthly_actual for d in details), ZERO),
                    expected_income=sum((d.current_expected for d in details), ZERO),
                    projects=tuple(details),
                )
            )
        return tuple(months)

    @staticmethod
    def _project_month(
        project: ProjectInfo,
        receipts: Sequence[tuple[date, Decimal]],
        month_start: date,
        month_end: date,
    ) -> ProjectMonthDetail:
        expected = project.expected_amount or ZERO

        monthly_actual = ZERO
        prior_actual = ZERO
        for day, amount in receipts:
            if day < month_start:
                prior_actual += amount
            elif day <= month_end:
                monthly_actual += amount
        cumulative_actual = prior_actual + monthly_actual

        deadline = project.end_date
        is_deadline_month = deadline is not None and month_start <= deadline <= month_end
        is_past_deadline = deadline is not None and deadline < month_start

        if is_deadline_month or is_past_deadline:
            current_expected = max(ZERO, expected - prior_actual)
        else:
            current_expected = ZERO

        return ProjectMonthDetail(
            project_id=project.id,
            project_name=project.name,
            expected_amount=expected,
            monthly_actual=monthly_actual,
            prior_actual=prior_actual,
            cumulative_actual=cumulative_actual,
            current_expected=current_expected,
            outstanding_balance=expected - cumulative_actual,
            is_deadline_month=is_deadline_month,
            is_past_deadline=is_past_deadline,
        )
