"""
Money Engines - pure calculation layer.

Engines take frozen DTOs from money_kernel.domain and Decimal sums, and
return frozen dataclasses.  They never open sessions or touch the store.

Engines:
    - ledger: balance arithmetic (opening + incoming - outgoing)
    - valuation: investment units, cost basis, valuation and gains
    - budget_period: budget month windows and calendar helpers
    - recognition: deadline-based project income recognition
    - budget: budget-versus-actual lines and savings
    - invoice_status: invoice payment status
    - deposits: fixed/recurring deposit maturity
"""

from money_engines.budget import (
    BudgetCalculator,
    BudgetReportRow,
    BudgetSummary,
    CategoryBudgetLine,
)
from money_engines.budget_period import (
    BudgetPeriod,
    BudgetPeriodCalculator,
    days_in_month,
    is_leap_year,
    parse_month,
)
from money_engines.deposits import (
    Compounding,
    MaturityResult,
    fixed_deposit_maturity,
    recurring_deposit_maturity,
    unit_holding_value,
)
from money_engines.invoice_status import derive_invoice_status
from money_engines.ledger import (
    AccountBalance,
    PeriodBalance,
    PlatformBalance,
    balance_from_transactions,
    compute_balance,
)
from money_engines.recognition import (
    IncomeRecognitionEngine,
    MonthIncomeSummary,
    ProjectMonthDetail,
)
from money_engines.tracer import traced_engine
from money_engines.valuation import (
    BatchValuation,
    InvestmentSummary,
    InvestmentValuationEngine,
    ValuationFailure,
    ValuationInput,
)

__all__ = [
    "AccountBalance",
    "BatchValuation",
    "BudgetCalculator",
    "BudgetPeriod",
    "BudgetPeriodCalculator",
    "BudgetReportRow",
    "BudgetSummary",
    "CategoryBudgetLine",
    "Compounding",
    "IncomeRecognitionEngine",
    "InvestmentSummary",
    "InvestmentValuationEngine",
    "MaturityResult",
    "MonthIncomeSummary",
    "PeriodBalance",
    "PlatformBalance",
    "ProjectMonthDetail",
    "ValuationFailure",
    "ValuationInput",
    "balance_from_transactions",
    "compute_balance",
    "days_in_month",
    "derive_invoice_status",
    "fixed_deposit_maturity",
    "is_leap_year",
    "parse_month",
    "recurring_deposit_maturity",
    "traced_engine",
    "unit_holding_value",
]
