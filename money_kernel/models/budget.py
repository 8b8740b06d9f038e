"""
Module: money_kernel.models.budget
Responsibility: ORM persistence for monthly category budgets, expected monthly
    income, and the single-row budget settings (salary anchor day).
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - (month, category_id) is unique (uq_budget_month_category); saving a
      budget for an existing pair replaces its amount.
    - MonthlyIncome.month is unique (uq_monthly_income_month).
    - BudgetSettings holds at most one row; salary_date is 1..31.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import BudgetInfo, MonthlyIncomeInfo


class Budget(TrackedBase):
    """Amount planned for a category in a month ("YYYY-MM")."""

    __tablename__ = "budgets"

    __table_args__ = (
        UniqueConstraint("month", "category_id", name="uq_budget_month_category"),
    )

    month: Mapped[str] = mapped_column(String(7), nullable=False)

    category_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    )

    budgeted_amount: Mapped[Decimal] = mapped_column(nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self) -> BudgetInfo:
        return BudgetInfo(
            id=self.id,
            month=self.month,
            category_id=self.category_id,
            budgeted_amount=self.budgeted_amount,
            notes=self.notes,
        )


class MonthlyIncome(TrackedBase):
    """Income expected for a month."""

    __tablename__ = "monthly_income"

    __table_args__ = (UniqueConstraint("month", name="uq_monthly_income_month"),)

    month: Mapped[str] = mapped_column(String(7), nullable=False)

    expected_income: Mapped[Decimal] = mapped_column(nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self) -> MonthlyIncomeInfo:
        return MonthlyIncomeInfo(
            id=self.id,
            month=self.month,
            expected_income=self.expected_income,
            notes=self.notes,
        )


class BudgetSettings(TrackedBase):
    """Single-row settings.  Absent row means salary_date = 1."""

    __tablename__ = "budget_settings"

    salary_date: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
