"""Selectors for the money tracker kernel (read side)."""

from money_kernel.selectors.investment_selector import InvestmentSelector
from money_kernel.selectors.ledger_selector import AccountLedger, PeriodBalanceReport
from money_kernel.selectors.record_selector import ProjectOverview, RecordSelector
from money_kernel.selectors.transaction_selector import (
    CategoryTotal,
    ClientTotal,
    MonthlyTotals,
    OverallTotals,
    ReportFilters,
    TransactionSelector,
)

__all__ = [
    "AccountLedger",
    "PeriodBalanceReport",
    "InvestmentSelector",
    "RecordSelector",
    "ProjectOverview",
    "TransactionSelector",
    "ReportFilters",
    "MonthlyTotals",
    "CategoryTotal",
    "ClientTotal",
    "OverallTotals",
]
