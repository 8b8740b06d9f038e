"""Domain models for the money tracker kernel."""

from money_kernel.models.account import Account
from money_kernel.models.budget import Budget, BudgetSettings, MonthlyIncome
from money_kernel.models.category import Category, Tag, transaction_tags
from money_kernel.models.company_setting import CompanySetting
from money_kernel.models.investment import Investment, InvestmentLot, InvestmentRate
from money_kernel.models.invoice import Invoice, InvoiceItem, InvoicePayment
from money_kernel.models.project import Client, Project, TimeLog
from money_kernel.models.quotation import Quotation, QuotationItem
from money_kernel.models.transaction import Transaction

__all__ = [
    "Account",
    "Budget",
    "BudgetSettings",
    "MonthlyIncome",
    "Category",
    "Tag",
    "transaction_tags",
    "CompanySetting",
    "Investment",
    "InvestmentLot",
    "InvestmentRate",
    "Invoice",
    "InvoiceItem",
    "InvoicePayment",
    "Client",
    "Project",
    "TimeLog",
    "Quotation",
    "QuotationItem",
    "Transaction",
]
