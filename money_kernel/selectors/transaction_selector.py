"""
Module: money_kernel.selectors.transaction_selector
Responsibility: Read-only grouped sums and listings over transactions -- the
    raw material for monthly, category, client and overall rollups, budget
    actuals, and project income.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.  MUST NOT import from services/ or outer
    layers.

Invariants enforced:
    - Rollups are filtered by transaction direction, never by category kind;
      investment rollups are filtered by Category.is_investment.
    - Every optional ReportFilters field narrows the same base query
      (date >= start, date <= end, client, project).
    - Missing sums read as Decimal("0"); counts as 0.
    - Months group by calendar year/month of the transaction date.

Failure modes:
    - Empty results (not errors) when nothing matches.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, desc, extract, func, select

from money_kernel.domain.records import AccountType, Direction, TransactionRecord
from money_kernel.models.account import Account
from money_kernel.models.category import Category
from money_kernel.models.project import Client
from money_kernel.models.transaction import Transaction
from money_kernel.selectors.base import ZERO, BaseSelector, as_decimal


@dataclass(frozen=True)
class ReportFilters:
    """Optional narrowing applied to every rollup."""

    start_date: date | None = None
    end_date: date | None = None
    client_id: UUID | None = None
    project_id: UUID | None = None


@dataclass(frozen=True)
class MonthlyTotals:
    month: str
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class CategoryTotal:
    category_name: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class ClientTotal:
    client_name: str
    total_income: Decimal
    transaction_count: int


@dataclass(frozen=True)
class OverallTotals:
    total_income: Decimal
    total_expense: Decimal
    total_invested: Decimal
    transaction_count: int

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expense


def _direction_sum(direction: Direction):
    return func.sum(
        case(
            (Transaction.direction == direction.value, Transaction.amount),
            else_=Decimal("0"),
        )
    )


class TransactionSelector(BaseSelector):
    """
    Grouped transaction queries.

    Guarantees:
        - All sums are Decimal.
        - Results are ordered deterministically (by month, by total desc
          then name, or by date desc then id).
    """

    @staticmethod
    def _apply_filters(query, filters: ReportFilters | None):
        if filters is None:
            return query
        if filters.start_date is not None:
            query = query.where(Transaction.date >= filters.start_date)
        if filters.end_date is not None:
            query = query.where(Transaction.date <= filters.end_date)
        if filters.client_id is not None:
            query = query.where(Transaction.client_id == filters.client_id)
        if filters.project_id is not None:
            query = query.where(Transaction.project_id == filters.project_id)
        return query

    # ------------------------------------------------------------------
    # Report rollups
    # ------------------------------------------------------------------

    def monthly_totals(self, year: int, filters: ReportFilters | None = None) -> list[MonthlyTotals]:
        """Income and expense per calendar month of ``year`` that has transactions."""
        month_col = extract("month", Transaction.date).label("month_num")
        query = (
            select(
                month_col,
                _direction_sum(Direction.INCOME).label("income"),
                _direction_sum(Direction.EXPENSE).label("expense"),
            )
            .where(Transaction.date >= date(year, 1, 1))
            .where(Transaction.date <= date(year, 12, 31))
            .group_by(month_col)
            .order_by(month_col)
        )
        query = self._apply_filters(query, filters)

        return [
            MonthlyTotals(
                month=f"{year:04d}-{int(row.month_num):02d}",
                income=as_decimal(row.income),
                expense=as_decimal(row.expense),
            )
            for row in self.session.execute(query).all()
        ]

    def category_totals(
        self,
        direction: Direction | None = None,
        filters: ReportFilters | None = None,
        investment_only: bool = False,
    ) -> list[CategoryTotal]:
        """
        Σ amount and count per category name.

        With ``direction`` the sum covers that direction only; with
        ``investment_only`` only is_investment categories are included.
        """
        total = func.sum(Transaction.amount).label("total")
        query = (
            select(Category.name, total, func.count(Transaction.id).label("txn_count"))
            .select_from(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .group_by(Category.name)
            .order_by(desc(total), Category.name)
        )
        if direction is not None:
            query = query.where(Transaction.direction == Direction(direction).value)
        if investment_only:
            query = query.where(Category.is_investment.is_(True))
        query = self._apply_filters(query, filters)

        return [
            CategoryTotal(
                category_name=row.name,
                total=as_decimal(row.total),
                count=int(row.txn_count),
            )
            for row in self.session.execute(query).all()
        ]

    def client_totals(self, filters: ReportFilters | None = None) -> list[ClientTotal]:
        """Income per client name, for income transactions carrying a client."""
        total = func.sum(Transaction.amount).label("total")
        query = (
            select(Client.name, total, func.count(Transaction.id).label("txn_count"))
            .select_from(Transaction)
            .join(Client, Transaction.client_id == Client.id)
            .where(Transaction.direction == Direction.INCOME.value)
            .where(Transaction.client_id.is_not(None))
            .group_by(Client.name)
            .order_by(desc(total), Client.name)
        )
        query = self._apply_filters(query, filters)

        return [
            ClientTotal(
                client_name=row.name,
                total_income=as_decimal(row.total),
                transaction_count=int(row.txn_count),
            )
            for row in self.session.execute(query).all()
        ]

    def overall_totals(self, filters: ReportFilters | None = None) -> OverallTotals:
        """Income, expense and count over all matching transactions."""
        query = select(
            _direction_sum(Direction.INCOME).label("income"),
            _direction_sum(Direction.EXPENSE).label("expense"),
            func.count(Transaction.id).label("txn_count"),
        ).select_from(Transaction)
        query = self._apply_filters(query, filters)
        row = self.session.execute(query).one()

        invested_query = (
            select(func.sum(Transaction.amount))
            .join(Category, Transaction.category_id == Category.id)
            .where(Category.is_investment.is_(True))
        )
        invested_query = self._apply_filters(invested_query, filters)
        invested = self.session.execute(invested_query).scalar()

        return OverallTotals(
            total_income=as_decimal(row.income),
            total_expense=as_decimal(row.expense),
            total_invested=as_decimal(invested),
            transaction_count=int(row.txn_count or 0),
        )

    # ------------------------------------------------------------------
    # Windowed sums
    # ------------------------------------------------------------------

    def direction_total(
        self,
        direction: Direction,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Decimal:
        """Σ amount of one direction inside [start_date, end_date]."""
        query = select(func.sum(Transaction.amount)).where(
            Transaction.direction == Direction(direction).value
        )
        query = self._apply_filters(query, ReportFilters(start_date, end_date))
        return as_decimal(self.session.execute(query).scalar())

    def category_direction_totals(
        self,
        start_date: date,
        end_date: date,
    ) -> dict[tuple[UUID, Direction], Decimal]:
        """Σ amount per (category, direction) inside the window."""
        query = (
            select(
                Transaction.category_id,
                Transaction.direction,
                func.sum(Transaction.amount).label("total"),
            )
            .where(Transaction.date >= start_date)
            .where(Transaction.date <= end_date)
            .group_by(Transaction.category_id, Transaction.direction)
        )
        return {
            (row.category_id, Direction(row.direction)): as_decimal(row.total)
            for row in self.session.execute(query).all()
        }

    def transfers_into_account_type(
        self,
        account_type: AccountType,
        start_date: date,
        end_date: date,
    ) -> Decimal:
        """Σ transfer amounts landing on accounts of ``account_type``."""
        query = (
            select(func.sum(Transaction.amount))
            .join(Account, Transaction.to_account_id == Account.id)
            .where(Transaction.direction == Direction.TRANSFER.value)
            .where(Account.account_type == AccountType(account_type).value)
            .where(Transaction.date >= start_date)
            .where(Transaction.date <= end_date)
        )
        return as_decimal(self.session.execute(query).scalar())

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def project_income(self, up_to: date | None = None) -> list[TransactionRecord]:
        """Income transactions that carry a project, oldest first."""
        query = (
            select(Transaction)
            .where(Transaction.direction == Direction.INCOME.value)
            .where(Transaction.project_id.is_not(None))
            .order_by(Transaction.date, Transaction.id)
        )
        if up_to is not None:
            query = query.where(Transaction.date <= up_to)
        return [txn.to_dto() for txn in self.session.scalars(query).all()]

    def list_transactions(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        direction: Direction | None = None,
    ) -> list[TransactionRecord]:
        """Transactions newest first, optionally windowed and by direction."""
        query = select(Transaction).order_by(
            Transaction.date.desc(),
            Transaction.created_at.desc(),
            Transaction.id.desc(),
        )
        query = self._apply_filters(query, ReportFilters(start_date, end_date))
        if direction is not None:
            query = query.where(Transaction.direction == Direction(direction).value)
        return [txn.to_dto() for txn in self.session.scalars(query).all()]

    def totals_by_investment(self) -> dict[UUID, dict[Direction, Decimal]]:
        """Σ amount per (investment, direction) for transactions with an investment."""
        query = (
            select(
                Transaction.investment_id,
                Transaction.direction,
                func.sum(Transaction.amount).label("total"),
            )
            .where(Transaction.investment_id.is_not(None))
            .group_by(Transaction.investment_id, Transaction.direction)
        )
        totals: dict[UUID, dict[Direction, Decimal]] = {}
        for row in self.session.execute(query).all():
            totals.setdefault(row.investment_id, {})[Direction(row.direction)] = as_decimal(row.total)
        return totals

    def totals_by_project(self) -> dict[UUID, dict[Direction, Decimal]]:
        """Σ amount per (project, direction) for transactions with a project."""
        query = (
            select(
                Transaction.project_id,
                Transaction.direction,
                func.sum(Transaction.amount).label("total"),
            )
            .where(Transaction.project_id.is_not(None))
            .group_by(Transaction.project_id, Transaction.direction)
        )
        totals: dict[UUID, dict[Direction, Decimal]] = {}
        for row in self.session.execute(query).all():
            totals.setdefault(row.project_id, {})[Direction(row.direction)] = as_decimal(row.total)
        return totals


__all__ = [
    "CategoryTotal",
    "ClientTotal",
    "MonthlyTotals",
    "OverallTotals",
    "ReportFilters",
    "TransactionSelector",
]
