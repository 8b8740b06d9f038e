"""
Reporting Service (``money_services.reporting``).

Responsibility
--------------
Produces every derived view the tracker shows -- monthly, category, client
and overall rollups, budget summaries and yearly budget reports, project
income recognition, account balances, investment valuations and the
dashboard -- by bridging the kernel selectors (``AccountLedger``,
``TransactionSelector``, ``InvestmentSelector``, ``RecordSelector``) to the
pure calculators in ``money_engines``.  This is a **read-only** service.

Architecture position
---------------------
**Services layer**.  Constructor: ``session`` + ``clock`` + ``config``.
No arithmetic beyond plain sums lives here; balances, valuations, budget
lines and recognition are computed by the engines.

Invariants enforced
-------------------
* Read-only -- no mutations.
* All monetary amounts are ``Decimal``.
* Every figure is derived from current record state on each call; two
  calls without intervening writes return equal results.
* Rollups filter by transaction direction; investment rollups by
  ``Category.is_investment``.

Failure modes
-------------
* ``InvalidMonthError`` for a malformed month, raised before any query.
* A single investment that cannot be valued is reported in
  ``BatchValuation.failures``; the others are still returned.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from money_config.schema import TrackerConfig
from money_kernel.domain.clock import Clock, SystemClock
from money_kernel.domain.records import AccountType, Direction
from money_kernel.logging_config import get_logger
from money_kernel.selectors.investment_selector import InvestmentSelector
from money_kernel.selectors.ledger_selector import AccountLedger, PeriodBalanceReport
from money_kernel.selectors.record_selector import RecordSelector
from money_kernel.selectors.transaction_selector import (
    CategoryTotal,
    ClientTotal,
    MonthlyTotals,
    OverallTotals,
    ReportFilters,
    TransactionSelector,
)
from money_engines.budget import BudgetCalculator, BudgetReportRow, BudgetSummary
from money_engines.budget_period import BudgetPeriodCalculator, month_bounds, month_key, months_of_year
from money_engines.ledger import AccountBalance, PlatformBalance
from money_engines.recognition import IncomeRecognitionEngine, MonthIncomeSummary
from money_engines.valuation import BatchValuation, InvestmentValuationEngine

logger = get_logger("services.reporting")

ZERO = Decimal("0")


@dataclass(frozen=True)
class DashboardData:
    """Headline figures for the current day."""

    as_of: date
    month: str
    total_bank_balance: Decimal
    total_cash_balance: Decimal
    total_investment_balance: Decimal
    accounts: tuple[AccountBalance, ...]
    month_income: Decimal
    month_expense: Decimal

    @property
    def month_net(self) -> Decimal:
        return self.month_income - self.month_expense

    @property
    def net_worth(self) -> Decimal:
        return sum((row.balance for row in self.accounts), ZERO)


class ReportAggregator:
    """
    Derived-view generation service.

    Contract
    --------
    * Every public method returns frozen dataclasses (or tuples/lists of
      them) carrying Decimal amounts.
    * All methods are read-only.

    Guarantees
    ----------
    * Clock is injectable for deterministic dashboards.
    * Engines receive DTOs only; no ORM row leaves the selectors.

    Non-goals
    ---------
    * Does NOT cache results; derived figures are recomputed per call.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: TrackerConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or TrackerConfig.with_defaults()
        self._ledger = AccountLedger(session)
        self._transactions = TransactionSelector(session)
        self._investments = InvestmentSelector(session)
        self._records = RecordSelector(session)
        self._periods = BudgetPeriodCalculator()
        self._budget = BudgetCalculator()
        self._valuation = InvestmentValuationEngine()
        self._recognition = IncomeRecognitionEngine()

    # =========================================================================
    # Transaction rollups
    # =========================================================================

    def monthly_summary(self, year: int, filters: ReportFilters | None = None) -> list[MonthlyTotals]:
        return self._transactions.monthly_totals(year, filters)

    def category_summary(
        self,
        direction: Direction | str,
        filters: ReportFilters | None = None,
    ) -> list[CategoryTotal]:
        return self._transactions.category_totals(Direction(direction), filters)

    def investment_category_summary(self, filters: ReportFilters | None = None) -> list[CategoryTotal]:
        return self._transactions.category_totals(None, filters, investment_only=True)

    def client_summary(self, filters: ReportFilters | None = None) -> list[ClientTotal]:
        return self._transactions.client_totals(filters)

    def overall_stats(self, filters: ReportFilters | None = None) -> OverallTotals:
        return self._transactions.overall_totals(filters)

    # =========================================================================
    # Budgets
    # =========================================================================

    def _salary_date(self) -> int:
        stored = self._records.salary_date()
        return stored if stored is not None else self._config.budget.default_salary_date

    def budget_summary(self, month: str) -> BudgetSummary:
        """
        Budget versus actuals inside the month's budget period.

        Raises:
            InvalidMonthError: If ``month`` is not YYYY-MM.
        """
        salary_date = self._salary_date()
        period = self._periods.period_for(month=month, salary_date=salary_date)

        budgets = {b.category_id: b.budgeted_amount for b in self._records.budgets_for(month)}
        expected = self._records.monthly_income(month)

        summary = self._budget.summarize(
            month=month,
            salary_date=salary_date,
            period_start=period.start_date,
            period_end=period.end_date,
            categories=self._records.categories(),
            budgets=budgets,
            actuals=self._transactions.category_direction_totals(period.start_date, period.end_date),
            expected_income=expected.expected_income if expected is not None else ZERO,
            actual_income=self._transactions.direction_total(
                Direction.INCOME, period.start_date, period.end_date
            ),
            total_spent=self._transactions.direction_total(
                Direction.EXPENSE, period.start_date, period.end_date
            ),
        )
        logger.info(
            "budget_summary_generated",
            extra={"month": month, "savings": str(summary.savings)},
        )
        return summary

    def budget_report(self, year: int) -> list[BudgetReportRow]:
        """Twelve calendar-month rows of income, expenses, investments and savings."""
        rows = []
        for key, start, end in months_of_year(year):
            rows.append(
                self._budget.report_row(
                    key,
                    income=self._transactions.direction_total(Direction.INCOME, start, end),
                    expenses=self._transactions.direction_total(Direction.EXPENSE, start, end),
                    investments=self._transactions.transfers_into_account_type(
                        AccountType.INVESTMENT, start, end
                    ),
                )
            )
        return rows

    # =========================================================================
    # Projects
    # =========================================================================

    def project_income_report(self, year: int) -> tuple[MonthIncomeSummary, ...]:
        return self._recognition.project_income_report(
            year=year,
            projects=self._records.projects(),
            income=self._transactions.project_income(up_to=date(year, 12, 31)),
        )

    # =========================================================================
    # Balances
    # =========================================================================

    def account_balances(self, as_of_date: date | None = None) -> list[AccountBalance]:
        return self._ledger.balances(as_of_date)

    def period_balances(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PeriodBalanceReport:
        return self._ledger.period_balances(start_date, end_date)

    def platform_balances(self) -> list[PlatformBalance]:
        return self._ledger.platform_balances()

    # =========================================================================
    # Investments
    # =========================================================================

    def investment_summaries(self) -> BatchValuation:
        """
        Valuation of every investment, with its account name.

        Unreadable rows and failed valuations are listed in ``failures``.
        """
        inputs, unreadable = self._investments.valuation_inputs()
        batch = self._valuation.summarize_batch(inputs)
        names = {account.id: account.name for account in self._records.accounts()}

        summaries = tuple(
            replace(summary, account_name=names.get(summary.account_id))
            for summary in batch.summaries
        )
        failures = tuple(unreadable) + batch.failures
        if failures:
            logger.warning(
                "investment_summaries_partial",
                extra={"failed": len(failures), "valued": len(summaries)},
            )
        return BatchValuation(summaries=summaries, failures=failures)

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard(self, today: date | None = None) -> DashboardData:
        today = today or self._clock.today()
        balances = self._ledger.balances()
        month_start, month_end = month_bounds(today.year, today.month)

        def total_of(account_type: AccountType) -> Decimal:
            return sum(
                (row.balance for row in balances if row.account_type == account_type),
                ZERO,
            )

        return DashboardData(
            as_of=today,
            month=month_key(today.year, today.month),
            total_bank_balance=total_of(AccountType.BANK),
            total_cash_balance=total_of(AccountType.CASH),
            total_investment_balance=total_of(AccountType.INVESTMENT),
            accounts=tuple(balances),
            month_income=self._transactions.direction_total(
                Direction.INCOME, month_start, month_end
            ),
            month_expense=self._transactions.direction_total(
                Direction.EXPENSE, month_start, month_end
            ),
        )
