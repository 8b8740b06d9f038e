"""
Tests for RecordSelector orderings and lookups.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from money_kernel.domain.clock import DeterministicClock
from money_kernel.exceptions import (
    AccountNotFoundError,
    InvoiceNotFoundError,
    ProjectNotFoundError,
    QuotationNotFoundError,
)
from money_kernel.selectors.record_selector import RecordSelector
from money_kernel.services.investment_service import InvestmentService
from money_kernel.services.invoice_service import InvoiceService
from money_kernel.services.project_service import ClientService, ProjectService
from money_kernel.services.quotation_service import QuotationService


class TestOrderings:

    def test_categories_by_kind_then_name(self, session, make_category):
        make_category("Rent")
        make_category("Salary", kind="income")
        make_category("Dining")

        names = [c.name for c in RecordSelector(session).categories()]

        assert names == ["Dining", "Rent", "Salary"]

    def test_accounts_by_name(self, session, make_account):
        make_account("Wallet", account_type="cash")
        make_account("Axis")

        assert [a.name for a in RecordSelector(session).accounts()] == ["Axis", "Wallet"]

    def test_investment_rates_newest_first_per_type(self, session):
        service = InvestmentService(session)
        service.save_rate("fd", "6.5", date(2023, 4, 1))
        service.save_rate("fd", "7.1", date(2024, 4, 1))
        service.save_rate("rd", "6.8", date(2024, 1, 1))

        selector = RecordSelector(session)
        fd_rates = selector.investment_rates("fd")

        assert [r.rate for r in fd_rates] == [Decimal("7.1"), Decimal("6.5")]
        assert [r.investment_type for r in selector.investment_rates()] == ["fd", "fd", "rd"]

    def test_invoices_newest_first(self, session, deterministic_clock):
        project = ProjectService(session).create_project(name="Portal")
        invoices = InvoiceService(session, deterministic_clock)
        invoices.create_invoice(project.id, date(2024, 2, 1), "100")
        invoices.create_invoice(project.id, date(2024, 5, 1), "200")

        listed = RecordSelector(session).invoices()

        assert [i.issue_date for i in listed] == [date(2024, 5, 1), date(2024, 2, 1)]

    def test_quotations_newest_first(self, session):
        client = ClientService(session).create_client(name="Acme")
        quotations = QuotationService(session, DeterministicClock())
        quotations.create_quotation(client.id, date(2024, 1, 5), "10")
        quotations.create_quotation(client.id, date(2024, 3, 5), "20")

        listed = RecordSelector(session).quotations()

        assert [q.total_amount for q in listed] == [Decimal("20"), Decimal("10")]


class TestLookups:

    @pytest.mark.parametrize(
        "method, error",
        [
            ("get_account", AccountNotFoundError),
            ("get_project", ProjectNotFoundError),
            ("get_invoice", InvoiceNotFoundError),
            ("get_quotation", QuotationNotFoundError),
        ],
    )
    def test_unknown_ids_raise(self, session, method, error):
        with pytest.raises(error):
            getattr(RecordSelector(session), method)(uuid4())

    def test_empty_settings(self, session):
        selector = RecordSelector(session)

        assert selector.company_settings() == {}
        assert selector.salary_date() is None
        assert selector.monthly_income("2024-01") is None
        assert selector.budgets_for("2024-01") == []
