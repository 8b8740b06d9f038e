"""
Service layer for budgets, expected monthly income and budget settings.

Budgets and expected income are keyed by month ("YYYY-MM"); saving for an
existing key replaces the stored amount.  Budget settings are a single row
holding the salary anchor day.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from money_kernel.domain.records import BudgetInfo, MonthlyIncomeInfo
from money_kernel.exceptions import InvalidRecordError
from money_kernel.models.budget import Budget, BudgetSettings, MonthlyIncome
from money_kernel.models.category import Category
from money_kernel.services.base import BaseService, require_id, require_non_negative
from money_engines.budget_period import parse_month


def _checked_month(month: str) -> str:
    parse_month(month)
    return month


class BudgetService(BaseService):
    """
    Budget writes.

    Guarantees:
        - At most one budget per (month, category).
        - At most one expected-income row per month.
        - salary_date is always within 1..31.
    """

    def set_budget(
        self,
        month: str,
        category_id: UUID,
        budgeted_amount: Decimal | str | int,
        notes: str | None = None,
    ) -> BudgetInfo:
        month = _checked_month(month)
        amount = require_non_negative("budget", "budgeted_amount", budgeted_amount)
        self._load(Category, category_id)

        budget = self.session.scalars(
            select(Budget)
            .where(Budget.month == month)
            .where(Budget.category_id == category_id)
        ).first()
        if budget is None:
            budget = Budget(month=month, category_id=category_id)
            self.session.add(budget)
        budget.budgeted_amount = amount
        budget.notes = notes
        self.session.flush()
        return budget.to_dto()

    def delete_budget(self, budget_id: UUID | None) -> None:
        self._delete(Budget, require_id("Budget", budget_id))

    def set_monthly_income(
        self,
        month: str,
        expected_income: Decimal | str | int,
        notes: str | None = None,
    ) -> MonthlyIncomeInfo:
        month = _checked_month(month)
        amount = require_non_negative("monthly_income", "expected_income", expected_income)

        row = self.session.scalars(
            select(MonthlyIncome).where(MonthlyIncome.month == month)
        ).first()
        if row is None:
            row = MonthlyIncome(month=month)
            self.session.add(row)
        row.expected_income = amount
        row.notes = notes
        self.session.flush()
        return row.to_dto()

    def set_salary_date(self, salary_date: int) -> int:
        if isinstance(salary_date, bool) or not isinstance(salary_date, int):
            raise InvalidRecordError("budget_settings", "salary_date", "must be an integer")
        if not 1 <= salary_date <= 31:
            raise InvalidRecordError("budget_settings", "salary_date", "must be between 1 and 31")

        settings = self.session.scalars(select(BudgetSettings).limit(1)).first()
        if settings is None:
            settings = BudgetSettings()
            self.session.add(settings)
        settings.salary_date = salary_date
        self.session.flush()
        return settings.salary_date
