"""
Command surface (``money_services.commands``).

Responsibility
--------------
One method per command the user interface can issue.  Each command runs in
its own ``session_scope()`` (one atomic unit of work under the store lock),
delegates to a kernel record service, a selector or the ReportAggregator,
and returns a ``CommandResult`` instead of raising.

Architecture position
---------------------
**Services layer** -- outermost Python seam.  The wire format that carries
commands to and from a UI is out of scope; callers receive plain frozen
dataclasses in ``CommandResult.data``.

Invariants enforced
-------------------
* Every command is atomic: a command that fails leaves no partial write.
* Exception class decides the result status:
  ValidationError -> ``validation_error``, NotFoundError -> ``not_found``,
  StoreAccessError -> ``store_error``, PriceLookupError -> ``lookup_error``.
* Every log record emitted while a command runs carries the command name
  and a fresh correlation id (``LogContext``).
* Price lookups never run inside a store scope.
* Field names passed to record commands and report years are checked
  before the store scope opens; a mismatch is a validation_error.

Failure modes
-------------
* Exceptions outside the MoneyTrackerError hierarchy (programming errors,
  an uninitialised engine) propagate unchanged.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from money_config.schema import TrackerConfig
from money_engines.budget_period import check_year, month_key
from money_engines.deposits import (
    Compounding,
    MaturityResult,
    fixed_deposit_maturity,
    recurring_deposit_maturity,
    unit_holding_value,
)
from money_kernel.db.engine import session_scope
from money_kernel.domain.clock import Clock, SystemClock
from money_kernel.domain.records import Direction, InvestmentType
from money_kernel.exceptions import (
    InvalidRecordError,
    MoneyTrackerError,
    NotFoundError,
    PriceLookupError,
    StoreAccessError,
    ValidationError,
)
from money_kernel.logging_config import LogContext, configure_logging, get_logger
from money_kernel.selectors.investment_selector import InvestmentSelector
from money_kernel.selectors.record_selector import RecordSelector
from money_kernel.selectors.transaction_selector import ReportFilters, TransactionSelector
from money_kernel.services.account_service import AccountService
from money_kernel.services.base import coerce_enum, require_non_negative
from money_kernel.services.budget_service import BudgetService
from money_kernel.services.category_service import CategoryService, TagService
from money_kernel.services.investment_service import InvestmentService
from money_kernel.services.invoice_service import InvoiceService
from money_kernel.services.project_service import ClientService, ProjectService
from money_kernel.services.quotation_service import QuotationService
from money_kernel.services.settings_service import CompanySettingsService
from money_kernel.services.transaction_service import TransactionService
from money_services.price_refresh import PriceRefreshSweep
from money_services.price_source import HttpPriceSource, PriceSource
from money_services.reporting import ReportAggregator

logger = get_logger("services.commands")


class CommandStatus:
    OK = "ok"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"
    LOOKUP_ERROR = "lookup_error"


_STATUS_BY_ERROR: tuple[tuple[type[MoneyTrackerError], str], ...] = (
    (ValidationError, CommandStatus.VALIDATION_ERROR),
    (NotFoundError, CommandStatus.NOT_FOUND),
    (StoreAccessError, CommandStatus.STORE_ERROR),
    (PriceLookupError, CommandStatus.LOOKUP_ERROR),
)


@dataclass(frozen=True)
class CommandResult:
    status: str
    data: Any = None
    error_code: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == CommandStatus.OK


def _status_for(exc: MoneyTrackerError) -> str:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return CommandStatus.STORE_ERROR


class TrackerCommands:
    """
    Command dispatcher.

    Contract:
        Every public method returns a CommandResult.  ``data`` holds the
        DTO, list of DTOs or report produced by the command; ``None`` for
        deletes.

    Non-goals:
        - Does not serialise results for a transport.
        - Does not retry; a store_error is final for that command.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: TrackerConfig | None = None,
        price_source: PriceSource | None = None,
        scope: Callable = session_scope,
    ):
        self._clock = clock or SystemClock()
        self._config = config or TrackerConfig.with_defaults()
        configure_logging(level=self._config.logging.level)
        self._price_source = price_source
        self._scope = scope

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _run(self, command: str, operation: Callable[[], Any], record_id: Any = None) -> CommandResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            command=command,
            record_id=str(record_id) if record_id is not None else None,
        ):
            try:
                data = operation()
            except MoneyTrackerError as exc:
                status = _status_for(exc)
                logger.warning(
                    "command_failed",
                    extra={"status": status, "error_code": exc.code, "error": str(exc)},
                )
                return CommandResult(status=status, error_code=exc.code, message=str(exc))
            logger.debug("command_succeeded")
            return CommandResult(status=CommandStatus.OK, data=data)

    def _execute(
        self,
        command: str,
        operation: Callable[[Session], Any],
        record_id: Any = None,
        validate: Callable[[], Any] | None = None,
    ) -> CommandResult:
        def in_scope() -> Any:
            if validate is not None:
                validate()
            with self._scope() as session:
                return operation(session)

        return self._run(command, in_scope, record_id)

    def _reports(self, session: Session) -> ReportAggregator:
        return ReportAggregator(session, self._clock, self._config)

    def _prices(self) -> PriceSource:
        if self._price_source is None:
            self._price_source = HttpPriceSource(self._config.price_source)
        return self._price_source

    # =========================================================================
    # Reports
    # =========================================================================

    def get_account_balances(self, as_of_date: date | None = None) -> CommandResult:
        return self._execute(
            "GetAccountBalances", lambda s: self._reports(s).account_balances(as_of_date)
        )

    def get_period_balances(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CommandResult:
        return self._execute(
            "GetPeriodBalances", lambda s: self._reports(s).period_balances(start_date, end_date)
        )

    def get_platform_balances(self) -> CommandResult:
        return self._execute("GetPlatformBalances", lambda s: self._reports(s).platform_balances())

    def get_investment_summaries(self) -> CommandResult:
        return self._execute(
            "GetInvestmentSummaries", lambda s: self._reports(s).investment_summaries()
        )

    def get_budget_summary(self, month: str | None = None) -> CommandResult:
        """Budget vs actual for ``month`` (YYYY-MM); the clock's month when omitted."""
        if month is None:
            month = month_key(*self._clock.current_month())
        return self._execute("GetBudgetSummary", lambda s: self._reports(s).budget_summary(month))

    def get_budget_report(self, year: int | None = None) -> CommandResult:
        year = year if year is not None else self._clock.today().year
        return self._execute(
            "GetBudgetReport",
            lambda s: self._reports(s).budget_report(year),
            validate=lambda: check_year(year),
        )

    def get_project_income_report(self, year: int | None = None) -> CommandResult:
        year = year if year is not None else self._clock.today().year
        return self._execute(
            "GetProjectIncomeReport",
            lambda s: self._reports(s).project_income_report(year),
            validate=lambda: check_year(year),
        )

    def get_monthly_summary(self, year: int, filters: ReportFilters | None = None) -> CommandResult:
        return self._execute(
            "GetMonthlySummary",
            lambda s: self._reports(s).monthly_summary(year, filters),
            validate=lambda: check_year(year),
        )

    def get_category_summary(
        self,
        direction: Direction | str,
        filters: ReportFilters | None = None,
    ) -> CommandResult:
        return self._execute(
            "GetCategorySummary",
            lambda s: self._reports(s).category_summary(_direction(direction), filters),
        )

    def get_investment_category_summary(self, filters: ReportFilters | None = None) -> CommandResult:
        return self._execute(
            "GetInvestmentCategorySummary",
            lambda s: self._reports(s).investment_category_summary(filters),
        )

    def get_client_summary(self, filters: ReportFilters | None = None) -> CommandResult:
        return self._execute("GetClientSummary", lambda s: self._reports(s).client_summary(filters))

    def get_overall_stats(self, filters: ReportFilters | None = None) -> CommandResult:
        return self._execute("GetOverallStats", lambda s: self._reports(s).overall_stats(filters))

    def get_dashboard(self, today: date | None = None) -> CommandResult:
        return self._execute("GetDashboard", lambda s: self._reports(s).dashboard(today))

    # =========================================================================
    # Listings
    # =========================================================================

    def list_accounts(self) -> CommandResult:
        return self._execute("GetAccounts", lambda s: RecordSelector(s).accounts())

    def list_categories(self) -> CommandResult:
        return self._execute("GetCategories", lambda s: RecordSelector(s).categories())

    def list_tags(self) -> CommandResult:
        return self._execute("GetTags", lambda s: RecordSelector(s).tags())

    def list_clients(self) -> CommandResult:
        return self._execute("GetClients", lambda s: RecordSelector(s).clients())

    def list_projects(self) -> CommandResult:
        return self._execute("GetProjects", lambda s: RecordSelector(s).project_overviews())

    def list_time_logs(self, project_id: UUID) -> CommandResult:
        return self._execute(
            "GetTimeLogs", lambda s: RecordSelector(s).time_logs(project_id), project_id
        )

    def list_transactions(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        direction: Direction | str | None = None,
    ) -> CommandResult:
        return self._execute(
            "GetTransactions",
            lambda s: TransactionSelector(s).list_transactions(
                start_date, end_date, _direction(direction) if direction is not None else None
            ),
        )

    def list_investments(self) -> CommandResult:
        return self._execute("GetInvestments", lambda s: InvestmentSelector(s).list_investments())

    def list_lots(self, investment_id: UUID) -> CommandResult:
        def operation(session: Session):
            selector = InvestmentSelector(session)
            selector.get(investment_id)
            return selector.lots_for(investment_id)

        return self._execute("GetInvestmentLots", operation, investment_id)

    def list_budgets(self, month: str) -> CommandResult:
        return self._execute("GetBudgets", lambda s: RecordSelector(s).budgets_for(month))

    def get_monthly_income(self, month: str) -> CommandResult:
        return self._execute("GetMonthlyIncome", lambda s: RecordSelector(s).monthly_income(month))

    def get_budget_settings(self) -> CommandResult:
        def operation(session: Session) -> int:
            stored = RecordSelector(session).salary_date()
            return stored if stored is not None else self._config.budget.default_salary_date

        return self._execute("GetBudgetSettings", operation)

    def list_investment_rates(self, investment_type: str | None = None) -> CommandResult:
        return self._execute(
            "GetInvestmentRates", lambda s: RecordSelector(s).investment_rates(investment_type)
        )

    def list_invoices(self) -> CommandResult:
        return self._execute("GetInvoices", lambda s: RecordSelector(s).invoices())

    def get_invoice(self, invoice_id: UUID) -> CommandResult:
        return self._execute(
            "GetInvoiceDetails", lambda s: RecordSelector(s).get_invoice(invoice_id), invoice_id
        )

    def list_quotations(self) -> CommandResult:
        return self._execute("GetQuotations", lambda s: RecordSelector(s).quotations())

    def get_quotation(self, quotation_id: UUID) -> CommandResult:
        return self._execute(
            "GetQuotationDetails",
            lambda s: RecordSelector(s).get_quotation(quotation_id),
            quotation_id,
        )

    def get_company_settings(self) -> CommandResult:
        return self._execute("GetCompanySettings", lambda s: RecordSelector(s).company_settings())

    # =========================================================================
    # Accounts, categories, tags
    # =========================================================================

    def create_account(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateAccount",
            lambda s: AccountService(s).create_account(**fields),
            validate=_accepts(AccountService.create_account, **fields),
        )

    def update_account(self, account_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateAccount",
            lambda s: AccountService(s).update_account(account_id, **fields),
            account_id,
            validate=_accepts(AccountService.update_account, account_id, **fields),
        )

    def delete_account(self, account_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteAccount", lambda s: AccountService(s).delete_account(account_id), account_id
        )

    def create_category(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateCategory",
            lambda s: CategoryService(s).create_category(**fields),
            validate=_accepts(CategoryService.create_category, **fields),
        )

    def update_category(self, category_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateCategory",
            lambda s: CategoryService(s).update_category(category_id, **fields),
            category_id,
            validate=_accepts(CategoryService.update_category, category_id, **fields),
        )

    def delete_category(self, category_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteCategory",
            lambda s: CategoryService(s).delete_category(category_id),
            category_id,
        )

    def create_tag(self, name: str) -> CommandResult:
        return self._execute("CreateTag", lambda s: TagService(s).create_tag(name))

    def rename_tag(self, tag_id: UUID | None, name: str) -> CommandResult:
        return self._execute("RenameTag", lambda s: TagService(s).rename_tag(tag_id, name), tag_id)

    def delete_tag(self, tag_id: UUID | None) -> CommandResult:
        return self._execute("DeleteTag", lambda s: TagService(s).delete_tag(tag_id), tag_id)

    # =========================================================================
    # Clients, projects, time logs
    # =========================================================================

    def create_client(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateClient",
            lambda s: ClientService(s).create_client(**fields),
            validate=_accepts(ClientService.create_client, **fields),
        )

    def update_client(self, client_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateClient",
            lambda s: ClientService(s).update_client(client_id, **fields),
            client_id,
            validate=_accepts(ClientService.update_client, client_id, **fields),
        )

    def delete_client(self, client_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteClient", lambda s: ClientService(s).delete_client(client_id), client_id
        )

    def create_project(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateProject",
            lambda s: ProjectService(s).create_project(**fields),
            validate=_accepts(ProjectService.create_project, **fields),
        )

    def update_project(self, project_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateProject",
            lambda s: ProjectService(s).update_project(project_id, **fields),
            project_id,
            validate=_accepts(ProjectService.update_project, project_id, **fields),
        )

    def delete_project(self, project_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteProject", lambda s: ProjectService(s).delete_project(project_id), project_id
        )

    def log_time(self, project_id: UUID, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateTimeLog",
            lambda s: ProjectService(s).log_time(project_id, **fields),
            project_id,
            validate=_accepts(ProjectService.log_time, project_id, **fields),
        )

    def delete_time_log(self, time_log_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteTimeLog", lambda s: ProjectService(s).delete_time_log(time_log_id), time_log_id
        )

    # =========================================================================
    # Transactions
    # =========================================================================

    def create_transaction(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateTransaction", lambda s: TransactionService(s).create_transaction(**fields),
            validate=_accepts(TransactionService.create_transaction, **fields),
        )

    def update_transaction(self, transaction_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateTransaction",
            lambda s: TransactionService(s).update_transaction(transaction_id, **fields),
            transaction_id,
            validate=_accepts(TransactionService.update_transaction, transaction_id, **fields),
        )

    def delete_transaction(self, transaction_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteTransaction",
            lambda s: TransactionService(s).delete_transaction(transaction_id),
            transaction_id,
        )

    # =========================================================================
    # Investments
    # =========================================================================

    def create_investment(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateInvestment", lambda s: InvestmentService(s).create_investment(**fields),
            validate=_accepts(InvestmentService.create_investment, **fields),
        )

    def update_investment(self, investment_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateInvestment",
            lambda s: InvestmentService(s).update_investment(investment_id, **fields),
            investment_id,
            validate=_accepts(InvestmentService.update_investment, investment_id, **fields),
        )

    def delete_investment(self, investment_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteInvestment",
            lambda s: InvestmentService(s).delete_investment(investment_id),
            investment_id,
        )

    def add_lot(self, investment_id: UUID, **fields: Any) -> CommandResult:
        return self._execute(
            "AddInvestmentLot",
            lambda s: InvestmentService(s).add_lot(investment_id, **fields),
            investment_id,
            validate=_accepts(InvestmentService.add_lot, investment_id, **fields),
        )

    def update_lot(self, lot_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateInvestmentLot",
            lambda s: InvestmentService(s).update_lot(lot_id, **fields),
            lot_id,
            validate=_accepts(InvestmentService.update_lot, lot_id, **fields),
        )

    def delete_lot(self, lot_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteInvestmentLot", lambda s: InvestmentService(s).delete_lot(lot_id), lot_id
        )

    def save_investment_rate(self, **fields: Any) -> CommandResult:
        return self._execute(
            "SaveInvestmentRate", lambda s: InvestmentService(s).save_rate(**fields),
            validate=_accepts(InvestmentService.save_rate, **fields),
        )

    def delete_investment_rate(self, rate_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteInvestmentRate", lambda s: InvestmentService(s).delete_rate(rate_id), rate_id
        )

    # =========================================================================
    # Budgets
    # =========================================================================

    def set_budget(self, **fields: Any) -> CommandResult:
        return self._execute(
            "SetBudget",
            lambda s: BudgetService(s).set_budget(**fields),
            validate=_accepts(BudgetService.set_budget, **fields),
        )

    def delete_budget(self, budget_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteBudget", lambda s: BudgetService(s).delete_budget(budget_id), budget_id
        )

    def set_monthly_income(self, **fields: Any) -> CommandResult:
        return self._execute(
            "SetMonthlyIncome", lambda s: BudgetService(s).set_monthly_income(**fields),
            validate=_accepts(BudgetService.set_monthly_income, **fields),
        )

    def update_budget_settings(self, salary_date: int) -> CommandResult:
        return self._execute(
            "UpdateBudgetSettings", lambda s: BudgetService(s).set_salary_date(salary_date)
        )

    # =========================================================================
    # Invoices and quotations
    # =========================================================================

    def create_invoice(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateInvoice", lambda s: InvoiceService(s, self._clock).create_invoice(**fields),
            validate=_accepts(InvoiceService.create_invoice, **fields),
        )

    def record_payment(self, invoice_id: UUID, **fields: Any) -> CommandResult:
        return self._execute(
            "AddInvoicePayment",
            lambda s: InvoiceService(s, self._clock).record_payment(invoice_id, **fields),
            invoice_id,
            validate=_accepts(InvoiceService.record_payment, invoice_id, **fields),
        )

    def delete_payment(self, payment_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteInvoicePayment",
            lambda s: InvoiceService(s, self._clock).delete_payment(payment_id),
            payment_id,
        )

    def create_quotation(self, **fields: Any) -> CommandResult:
        return self._execute(
            "CreateQuotation",
            lambda s: QuotationService(s, self._clock).create_quotation(**fields),
            validate=_accepts(QuotationService.create_quotation, **fields),
        )

    def update_quotation(self, quotation_id: UUID | None, **fields: Any) -> CommandResult:
        return self._execute(
            "UpdateQuotation",
            lambda s: QuotationService(s, self._clock).update_quotation(quotation_id, **fields),
            quotation_id,
            validate=_accepts(QuotationService.update_quotation, quotation_id, **fields),
        )

    def delete_quotation(self, quotation_id: UUID | None) -> CommandResult:
        return self._execute(
            "DeleteQuotation",
            lambda s: QuotationService(s, self._clock).delete_quotation(quotation_id),
            quotation_id,
        )

    def update_company_settings(self, settings: dict[str, str | None]) -> CommandResult:
        return self._execute(
            "UpdateCompanySettings",
            lambda s: CompanySettingsService(s).update_settings(settings),
        )

    # =========================================================================
    # Calculators
    # =========================================================================

    def calculate_fd_maturity(
        self,
        principal: Decimal | str,
        rate: Decimal | str,
        tenure_months: int,
        compounding: Compounding | str = Compounding.QUARTERLY,
    ) -> CommandResult:
        def operation() -> MaturityResult:
            return fixed_deposit_maturity(
                principal=require_non_negative("deposit", "principal", principal),
                rate=require_non_negative("deposit", "rate", rate),
                tenure_months=_tenure(tenure_months),
                compounding=coerce_enum("deposit", "compounding", Compounding, compounding),
            )

        return self._run("CalculateFdMaturity", operation)

    def calculate_rd_maturity(
        self,
        monthly_deposit: Decimal | str,
        rate: Decimal | str,
        tenure_months: int,
        compounding: Compounding | str = Compounding.QUARTERLY,
    ) -> CommandResult:
        def operation() -> MaturityResult:
            kind = coerce_enum("deposit", "compounding", Compounding, compounding)
            if kind == Compounding.YEARLY:
                raise InvalidRecordError("deposit", "compounding", "must be monthly or quarterly")
            return recurring_deposit_maturity(
                monthly_deposit=require_non_negative("deposit", "monthly_deposit", monthly_deposit),
                rate=require_non_negative("deposit", "rate", rate),
                tenure_months=_tenure(tenure_months),
                compounding=kind,
            )

        return self._run("CalculateRdMaturity", operation)

    def calculate_unit_value(
        self,
        total_units: Decimal | str,
        current_nav: Decimal | str,
        total_contributed: Decimal | str,
    ) -> CommandResult:
        return self._run(
            "CalculateUnitValue",
            lambda: unit_holding_value(
                require_non_negative("holding", "total_units", total_units),
                require_non_negative("holding", "current_nav", current_nav),
                require_non_negative("holding", "total_contributed", total_contributed),
            ),
        )

    # =========================================================================
    # Prices
    # =========================================================================

    def refresh_prices(self) -> CommandResult:
        sweep = PriceRefreshSweep(self._prices(), self._clock, self._scope)
        return self._run("RefreshPrices", sweep.run)

    def get_live_price(self, symbol: str, instrument_kind: InvestmentType | str) -> CommandResult:
        return self._run(
            "GetLivePrice", lambda: self._prices().lookup_price(symbol, instrument_kind)
        )


def _accepts(method: Callable, *leading: Any, **fields: Any) -> Callable[[], None]:
    """
    Validator for a service call: rejects field names ``method`` does not
    take and required fields that are missing, before the store is opened.
    """
    record_type = method.__qualname__.split(".")[0].removesuffix("Service").lower()

    def check() -> None:
        try:
            inspect.signature(method).bind(None, *leading, **fields)
        except TypeError as exc:
            raise InvalidRecordError(record_type, "fields", str(exc)) from None

    return check


def _direction(value: Direction | str) -> Direction:
    return coerce_enum("report", "direction", Direction, value)


def _tenure(months: int) -> int:
    if isinstance(months, bool) or not isinstance(months, int) or months < 0:
        raise InvalidRecordError("deposit", "tenure_months", "must be a whole number of months")
    return months
