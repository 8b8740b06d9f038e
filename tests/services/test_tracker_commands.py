"""
Tests for TrackerCommands -- one atomic scope per command, errors mapped
to a CommandResult status instead of raised.

These tests go through the real session_scope(), so they use the engine
fixture and never the shared ``session`` fixture.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from money_kernel.db.engine import session_scope
from money_kernel.exceptions import PriceLookupError
from money_services.commands import CommandStatus, TrackerCommands
from money_services.price_source import PriceSource


class StaticPriceSource(PriceSource):
    """Quotes from a dict; unknown symbols fail like a 404."""

    def __init__(self, prices):
        self.prices = prices
        self.calls = []

    def lookup_price(self, symbol, instrument_kind):
        self.calls.append((symbol, str(getattr(instrument_kind, "value", instrument_kind))))
        if symbol not in self.prices:
            raise PriceLookupError(symbol, str(instrument_kind), "HTTP 404")
        return self.prices[symbol]


@pytest.fixture
def commands(engine, deterministic_clock):
    return TrackerCommands(
        clock=deterministic_clock,
        price_source=StaticPriceSource({"INFY.NS": Decimal("1500.25")}),
    )


class TestSuccessfulCommands:

    def test_create_then_list(self, commands):
        created = commands.create_account(name="HDFC", account_type="bank", opening_balance="100")

        assert created.ok
        assert created.status == CommandStatus.OK
        listed = commands.list_accounts()
        assert [a.name for a in listed.data] == ["HDFC"]

    def test_writes_are_committed_across_commands(self, commands):
        account = commands.create_account(name="HDFC", account_type="bank").data
        salary = commands.create_category(name="Salary", kind="income").data
        commands.create_transaction(
            date=date(2024, 6, 1), amount="2500", direction="income",
            category_id=salary.id, to_account_id=account.id,
        )

        balances = commands.get_account_balances().data

        assert balances[0].balance == Decimal("2500")

    def test_budget_settings_default_from_config(self, commands):
        assert commands.get_budget_settings().data == 1

        commands.update_budget_settings(25)

        assert commands.get_budget_settings().data == 25

    def test_dashboard_uses_clock(self, commands):
        result = commands.get_dashboard()

        assert result.ok
        assert result.data.month == "2024-06"

    def test_report_periods_default_to_clock(self, commands):
        assert commands.get_budget_summary().data.month == "2024-06"
        assert commands.get_budget_report().data[0].month == "2024-01"
        assert len(commands.get_project_income_report().data) == 12


class TestErrorMapping:

    def test_validation_error(self, commands):
        result = commands.create_account(name="  ", account_type="bank")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.data is None
        assert result.message

    def test_missing_identifier(self, commands):
        result = commands.update_account(None, name="HDFC", account_type="bank", opening_balance="0")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.error_code == "MISSING_IDENTIFIER"

    def test_not_found(self, commands):
        result = commands.delete_account(uuid4())

        assert result.status == CommandStatus.NOT_FOUND
        assert result.error_code == "ACCOUNT_NOT_FOUND"

    def test_invalid_month(self, commands):
        result = commands.get_budget_summary("2024/06")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_MONTH"

    @pytest.mark.parametrize("year", [0, 10000, True, "2024"])
    def test_year_out_of_calendar_range(self, commands, year):
        for result in (
            commands.get_budget_report(year),
            commands.get_project_income_report(year),
            commands.get_monthly_summary(year),
        ):
            assert result.status == CommandStatus.VALIDATION_ERROR
            assert result.error_code == "INVALID_RECORD"

    def test_unknown_field_name(self, commands):
        result = commands.create_account(name="A", account_type="bank", colour="red")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_RECORD"
        assert "colour" in result.message
        assert commands.list_accounts().data == []

    def test_unknown_investment_amount(self, commands):
        broker = commands.create_account(name="Broker", account_type="investment").data

        result = commands.create_investment(
            name="TCS", investment_type="stock", account_id=broker.id, colour="red"
        )

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_RECORD"
        assert commands.list_investments().data == []

    def test_unknown_field_on_update(self, commands):
        account = commands.create_account(name="HDFC", account_type="bank").data

        result = commands.update_account(
            account.id, name="HDFC", account_type="bank", opening_balance="0", colour="red"
        )

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert commands.list_accounts().data[0].name == "HDFC"

    def test_field_check_runs_before_the_store(self, engine, deterministic_clock):
        opened = []

        def scope():
            opened.append(True)
            return session_scope()

        commands = TrackerCommands(clock=deterministic_clock, scope=scope)
        result = commands.set_budget(month="2024-06", colour="red")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert opened == []

    def test_duplicate_invoice_number_is_a_store_error(self, commands):
        project = commands.create_project(name="Portal").data
        first = commands.create_invoice(
            project_id=project.id, issue_date=date(2024, 6, 1), total_amount="100",
            invoice_number="INV-X",
        )
        second = commands.create_invoice(
            project_id=project.id, issue_date=date(2024, 6, 2), total_amount="200",
            invoice_number="INV-X",
        )

        assert first.ok
        assert second.status == CommandStatus.STORE_ERROR
        assert second.error_code == "STORE_ACCESS_ERROR"
        assert len(commands.list_invoices().data) == 1

    def test_failed_command_leaves_no_partial_write(self, commands):
        account = commands.create_account(name="Broker", account_type="investment").data
        commands.create_investment(name="TCS", investment_type="stock", account_id=account.id)

        result = commands.delete_account(account.id)

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert [a.name for a in commands.list_accounts().data] == ["Broker"]

    def test_failure_is_logged_with_command_context(self, commands, captured_logs):
        missing = uuid4()
        commands.delete_tag(missing)

        record = [r for r in captured_logs() if r["message"] == "command_failed"][-1]
        assert record["command"] == "DeleteTag"
        assert record["record_id"] == str(missing)
        assert record["status"] == CommandStatus.NOT_FOUND
        assert "correlation_id" in record


class TestPriceCommands:

    def test_live_price(self, commands):
        result = commands.get_live_price("INFY.NS", "stock")

        assert result.ok
        assert result.data == Decimal("1500.25")

    def test_live_price_failure(self, commands):
        result = commands.get_live_price("NOPE", "stock")

        assert result.status == CommandStatus.LOOKUP_ERROR
        assert result.error_code == "PRICE_LOOKUP_FAILED"

    def test_refresh_prices(self, commands):
        broker = commands.create_account(name="Broker", account_type="investment").data
        commands.create_investment(
            name="Infosys", investment_type="stock", account_id=broker.id,
            provider_symbol="INFY.NS",
        )
        commands.create_investment(
            name="Unknown", investment_type="stock", account_id=broker.id,
            provider_symbol="NOPE",
        )
        commands.create_investment(name="Gold", investment_type="other", account_id=broker.id)

        result = commands.refresh_prices()

        assert result.ok
        assert result.data.updated == 1
        assert result.data.failed == 1
        investments = {i.name: i for i in commands.list_investments().data}
        assert investments["Infosys"].current_price == Decimal("1500.25")
        assert investments["Infosys"].last_updated_at is not None
        assert investments["Unknown"].current_price is None


class TestCalculatorCommands:

    def test_fixed_deposit(self, commands):
        result = commands.calculate_fd_maturity("100000", "7", 12, "quarterly")

        assert result.ok
        assert result.data.maturity_amount == Decimal("107185.90")
        assert result.data.interest_earned == Decimal("7185.90")

    def test_recurring_deposit_rejects_yearly(self, commands):
        result = commands.calculate_rd_maturity("1000", "6.5", 12, "yearly")

        assert result.status == CommandStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_RECORD"

    @pytest.mark.parametrize("tenure", [-1, True, 1.5])
    def test_tenure_must_be_whole_months(self, commands, tenure):
        result = commands.calculate_fd_maturity("1000", "7", tenure)

        assert result.status == CommandStatus.VALIDATION_ERROR

    def test_unit_value(self, commands):
        result = commands.calculate_unit_value("100", "25.50", "2000")

        assert result.data.current_value == Decimal("2550.00")
        assert result.data.absolute_return == Decimal("550.00")
