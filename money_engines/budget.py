"""
Module: money_engines.budget
Responsibility:
    Compare budgeted amounts against actuals for one budget month, per
    category and in aggregate (spending, investing, savings, savings rate),
    and build the per-month rows of a yearly budget report.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The windowed sums come from money_kernel.selectors.transaction_selector;
    this module only combines them.

Invariants enforced:
    - Income categories: actual is income-direction money, remaining =
      actual - budgeted, never over budget.
    - Expense categories: actual is expense-direction money, remaining =
      budgeted - actual, over budget iff actual > budgeted and budgeted > 0.
    - Investment-flagged categories: actual is money in any direction, with
      the expense rule.  A category that is both expense-kind and
      investment-flagged appears in both lists.
    - total_budgeted = expense budgets + investment budgets.
    - savings = actual_income - total_spent - total_invested;
      savings_rate = savings / actual_income x 100, or 0 without income.

Failure modes:
    (none -- missing budgets and actuals read as 0)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence
from uuid import UUID

from money_kernel.domain.records import CategoryInfo, CategoryKind, Direction
from money_engines.ratios import percentage
from money_engines.tracer import traced_engine

ZERO = Decimal("0")


@dataclass(frozen=True)
class CategoryBudgetLine:
    category_id: UUID
    category_name: str
    category_kind: CategoryKind
    budgeted: Decimal
    actual: Decimal
    remaining: Decimal
    is_over_budget: bool


@dataclass(frozen=True)
class BudgetSummary:
    month: str
    salary_date: int
    period_start: date
    period_end: date
    expected_income: Decimal
    actual_income: Decimal
    total_budgeted: Decimal
    total_spent: Decimal
    total_invested: Decimal
    savings: Decimal
    savings_rate: Decimal
    income_categories: tuple[CategoryBudgetLine, ...]
    expense_categories: tuple[CategoryBudgetLine, ...]
    investment_categories: tuple[CategoryBudgetLine, ...]


@dataclass(frozen=True)
class BudgetReportRow:
    month: str
    income: Decimal
    expenses: Decimal
    investments: Decimal
    savings: Decimal
    savings_rate: Decimal


def income_line(category: CategoryInfo, budgeted: Decimal, actual: Decimal) -> CategoryBudgetLine:
    """Earning more than planned is never a violation."""
    return CategoryBudgetLine(
        category_id=category.id,
        category_name=category.name,
        category_kind=category.kind,
        budgeted=budgeted,
        actual=actual,
        remaining=actual - budgeted,
        is_over_budget=False,
    )


def spending_line(category: CategoryInfo, budgeted: Decimal, actual: Decimal) -> CategoryBudgetLine:
    """Zero-budget categories are never flagged."""
    return CategoryBudgetLine(
        category_id=category.id,
        category_name=category.name,
        category_kind=category.kind,
        budgeted=budgeted,
        actual=actual,
        remaining=budgeted - actual,
        is_over_budget=actual > budgeted and budgeted > ZERO,
    )


def savings_of(income: Decimal, spent: Decimal, invested: Decimal) -> tuple[Decimal, Decimal]:
    """(savings, savings_rate) for one month."""
    savings = income - spent - invested
    return savings, percentage(savings, income)


class BudgetCalculator:
    """
    Budget-versus-actual combination.

    Contract:
        summarize() receives the categories, the month's budget amounts by
        category id, and windowed actuals keyed by (category id, direction).
        Categories are listed by name.
    """

    @traced_engine(
        "budget",
        "1.0",
        fingerprint_fields=("month", "budgets", "actuals", "actual_income", "total_spent"),
    )
    def summarize(
        self,
        *,
        month: str,
        salary_date: int,
        period_start: date,
        period_end: date,
        categories: Sequence[CategoryInfo],
        budgets: Mapping[UUID, Decimal],
        actuals: Mapping[tuple[UUID, Direction], Decimal],
        expected_income: Decimal,
        actual_income: Decimal,
        total_spent: Decimal,
    ) -> BudgetSummary:
        def actual_for(category_id: UUID, direction: Direction | None = None) -> Decimal:
            if direction is not None:
                return actuals.get((category_id, direction), ZERO)
            return sum(
                (actuals.get((category_id, d), ZERO) for d in Direction),
                ZERO,
            )

        ordered = sorted(categories, key=lambda c: c.name)
        income_lines = []
        expense_lines = []
        investment_lines = []
        for category in ordered:
            budgeted = budgets.get(category.id, ZERO)
            if category.kind == CategoryKind.INCOME:
                income_lines.append(
                    income_line(category, budgeted, actual_for(category.id, Direction.INCOME))
                )
            elif category.kind == CategoryKind.EXPENSE:
                expense_lines.append(
                    spending_line(category, budgeted, actual_for(category.id, Direction.EXPENSE))
                )
            if category.is_investment:
                investment_lines.append(
                    spending_line(category, budgeted, actual_for(category.id))
                )

        total_budgeted = sum((line.budgeted for line in expense_lines), ZERO) + sum(
            (line.budgeted for line in investment_lines), ZERO
        )
        total_invested = sum((line.actual for line in investment_lines), ZERO)
        savings, savings_rate = savings_of(actual_income, total_spent, total_invested)

        return BudgetSummary(
            month=month,
            salary_date=salary_date,
            period_start=period_start,
            period_end=period_end,
            expected_income=expected_income,
            actual_income=actual_income,
            total_budgeted=total_budgeted,
            total_spent=total_spent,
            total_invested=total_invested,
            savings=savings,
            savings_rate=savings_rate,
            income_categories=tuple(income_lines),
            expense_categories=tuple(expense_lines),
            investment_categories=tuple(investment_lines),
        )

    @staticmethod
    def report_row(month: str, income: Decimal, expenses: Decimal, investments: Decimal) -> BudgetReportRow:
        savings, savings_rate = savings_of(income, expenses, investments)
        return BudgetReportRow(
            month=month,
            income=income,
            expenses=expenses,
            investments=investments,
            savings=savings,
            savings_rate=savings_rate,
        )
