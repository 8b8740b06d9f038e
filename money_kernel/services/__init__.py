"""Record services for the money tracker kernel (write side)."""

from money_kernel.services.account_service import AccountService
from money_kernel.services.budget_service import BudgetService
from money_kernel.services.category_service import CategoryService, TagService
from money_kernel.services.investment_service import InvestmentService
from money_kernel.services.invoice_service import InvoiceService
from money_kernel.services.project_service import ClientService, ProjectService
from money_kernel.services.quotation_service import QuotationService
from money_kernel.services.settings_service import CompanySettingsService
from money_kernel.services.transaction_service import TransactionService

__all__ = [
    "AccountService",
    "BudgetService",
    "CategoryService",
    "ClientService",
    "CompanySettingsService",
    "InvestmentService",
    "InvoiceService",
    "ProjectService",
    "QuotationService",
    "TagService",
    "TransactionService",
]
