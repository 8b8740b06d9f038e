"""
Module: money_kernel.selectors.record_selector
Responsibility: Read-only listings and lookups of the plain records (accounts,
    categories, tags, clients, projects, time logs, budgets, invoices,
    quotations, settings) for the command surface.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/.

Invariants enforced:
    - Clients list active, prospect, inactive, archived, then by name.
    - Project overviews carry received (income), spent (expense) and logged
      hours, all derived at query time.
    - Missing budget settings read as None so the caller's default applies.

Failure modes:
    - The typed NotFoundError subclass for single-record lookups.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, select

from money_kernel.domain.records import (
    AccountInfo,
    BudgetInfo,
    CategoryInfo,
    ClientInfo,
    ClientStatus,
    Direction,
    InvestmentRateInfo,
    InvoiceInfo,
    MonthlyIncomeInfo,
    ProjectInfo,
    QuotationInfo,
    TagInfo,
    TimeLogInfo,
)
from money_kernel.exceptions import (
    AccountNotFoundError,
    InvoiceNotFoundError,
    ProjectNotFoundError,
    QuotationNotFoundError,
)
from money_kernel.models.account import Account
from money_kernel.models.budget import Budget, BudgetSettings, MonthlyIncome
from money_kernel.models.category import Category, Tag
from money_kernel.models.company_setting import CompanySetting
from money_kernel.models.investment import InvestmentRate
from money_kernel.models.invoice import Invoice
from money_kernel.models.project import Client, Project, TimeLog
from money_kernel.models.quotation import Quotation
from money_kernel.selectors.base import ZERO, BaseSelector, as_decimal
from money_kernel.selectors.transaction_selector import TransactionSelector

@dataclass(frozen=True)
class ProjectOverview:
    project: ProjectInfo
    received_amount: Decimal
    spent_amount: Decimal
    logged_hours: Decimal


_CLIENT_STATUS_ORDER = case(
    (Client.status == ClientStatus.ACTIVE.value, 0),
    (Client.status == ClientStatus.PROSPECT.value, 1),
    (Client.status == ClientStatus.INACTIVE.value, 2),
    (Client.status == ClientStatus.ARCHIVED.value, 3),
    else_=4,
)


class RecordSelector(BaseSelector):
    """Plain record listings."""

    # Accounts / categories / tags

    def get_account(self, account_id: UUID) -> AccountInfo:
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        return account.to_dto()

    def accounts(self) -> list[AccountInfo]:
        rows = self.session.scalars(select(Account).order_by(Account.name, Account.id))
        return [row.to_dto() for row in rows.all()]

    def categories(self) -> list[CategoryInfo]:
        rows = self.session.scalars(
            select(Category).order_by(Category.kind, Category.name, Category.id)
        )
        return [row.to_dto() for row in rows.all()]

    def tags(self) -> list[TagInfo]:
        rows = self.session.scalars(select(Tag).order_by(Tag.name))
        return [row.to_dto() for row in rows.all()]

    # Clients / projects / time logs

    def clients(self) -> list[ClientInfo]:
        rows = self.session.scalars(
            select(Client).order_by(_CLIENT_STATUS_ORDER, Client.name, Client.id)
        )
        return [row.to_dto() for row in rows.all()]

    def get_project(self, project_id: UUID) -> ProjectInfo:
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(str(project_id))
        return project.to_dto()

    def projects(self) -> list[ProjectInfo]:
        rows = self.session.scalars(select(Project).order_by(Project.name, Project.id))
        return [row.to_dto() for row in rows.all()]

    def project_overviews(self) -> list[ProjectOverview]:
        """Projects by name with received/spent money and logged hours."""
        flows = TransactionSelector(self.session).totals_by_project()
        hours = {
            row.project_id: as_decimal(row.hours)
            for row in self.session.execute(
                select(TimeLog.project_id, func.sum(TimeLog.hours).label("hours"))
                .group_by(TimeLog.project_id)
            ).all()
        }
        overviews = []
        for project in self.projects():
            totals = flows.get(project.id, {})
            overviews.append(
                ProjectOverview(
                    project=project,
                    received_amount=totals.get(Direction.INCOME, ZERO),
                    spent_amount=totals.get(Direction.EXPENSE, ZERO),
                    logged_hours=hours.get(project.id, ZERO),
                )
            )
        return overviews

    def time_logs(self, project_id: UUID) -> list[TimeLogInfo]:
        query = (
            select(TimeLog)
            .where(TimeLog.project_id == project_id)
            .order_by(TimeLog.date.desc(), TimeLog.id)
        )
        return [row.to_dto() for row in self.session.scalars(query).all()]

    # Budgets

    def salary_date(self) -> int | None:
        settings = self.session.scalars(select(BudgetSettings).limit(1)).first()
        return settings.salary_date if settings is not None else None

    def budgets_for(self, month: str) -> list[BudgetInfo]:
        query = select(Budget).where(Budget.month == month).order_by(Budget.category_id)
        return [row.to_dto() for row in self.session.scalars(query).all()]

    def monthly_income(self, month: str) -> MonthlyIncomeInfo | None:
        row = self.session.scalars(
            select(MonthlyIncome).where(MonthlyIncome.month == month)
        ).first()
        return row.to_dto() if row is not None else None

    def investment_rates(self, investment_type: str | None = None) -> list[InvestmentRateInfo]:
        query = select(InvestmentRate).order_by(
            InvestmentRate.investment_type,
            InvestmentRate.effective_date.desc(),
        )
        if investment_type is not None:
            query = query.where(InvestmentRate.investment_type == investment_type)
        return [row.to_dto() for row in self.session.scalars(query).all()]

    # Billing documents

    def invoices(self) -> list[InvoiceInfo]:
        query = select(Invoice).order_by(Invoice.issue_date.desc(), Invoice.invoice_number.desc())
        return [row.to_dto() for row in self.session.scalars(query).all()]

    def get_invoice(self, invoice_id: UUID) -> InvoiceInfo:
        invoice = self.session.get(Invoice, invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(str(invoice_id))
        return invoice.to_dto()

    def quotations(self) -> list[QuotationInfo]:
        query = select(Quotation).order_by(
            Quotation.issue_date.desc(),
            Quotation.quotation_number.desc(),
        )
        return [row.to_dto() for row in self.session.scalars(query).all()]

    def get_quotation(self, quotation_id: UUID) -> QuotationInfo:
        quotation = self.session.get(Quotation, quotation_id)
        if quotation is None:
            raise QuotationNotFoundError(str(quotation_id))
        return quotation.to_dto()

    # Settings

    def company_settings(self) -> dict[str, str]:
        rows = self.session.scalars(select(CompanySetting).order_by(CompanySetting.key))
        return {row.key: row.value for row in rows.all()}
