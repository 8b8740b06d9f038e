"""
Pure domain layer.

This module contains pure data transfer objects with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from money_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from money_kernel.domain.records import (
    AccountInfo,
    AccountType,
    BudgetInfo,
    CategoryInfo,
    CategoryKind,
    ClientInfo,
    ClientStatus,
    Direction,
    InvestmentInfo,
    InvestmentRateInfo,
    InvestmentType,
    InvoiceInfo,
    InvoiceStatus,
    LineItemInfo,
    LotRecord,
    LotType,
    MonthlyIncomeInfo,
    PaymentInfo,
    ProjectInfo,
    QuotationInfo,
    TagInfo,
    TimeLogInfo,
    TransactionRecord,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AccountInfo",
    "AccountType",
    "BudgetInfo",
    "CategoryInfo",
    "CategoryKind",
    "ClientInfo",
    "ClientStatus",
    "Direction",
    "InvestmentInfo",
    "InvestmentRateInfo",
    "InvestmentType",
    "InvoiceInfo",
    "InvoiceStatus",
    "LineItemInfo",
    "LotRecord",
    "LotType",
    "MonthlyIncomeInfo",
    "PaymentInfo",
    "ProjectInfo",
    "QuotationInfo",
    "TagInfo",
    "TimeLogInfo",
    "TransactionRecord",
]
