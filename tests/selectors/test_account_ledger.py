"""
Tests for AccountLedger -- balances derived from transactions.

Covers:
- opening + incoming - outgoing, current and date-bounded
- Transfers move money between two accounts
- Null account sides contribute nothing
- Bulk balances agree with single-account balances
- Period opening balances use the day before the period
- Platform cash on investment accounts
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from money_engines.ledger import lot_outlay
from money_kernel.exceptions import AccountNotFoundError
from money_kernel.selectors.ledger_selector import AccountLedger
from money_kernel.services.investment_service import InvestmentService


class TestSingleAccountBalance:

    def test_no_transactions_returns_opening_balance(self, session, make_account):
        account = make_account(opening_balance="2500")

        assert AccountLedger(session).balance(account.id) == Decimal("2500")

    def test_income_and_expense(self, session, make_account, make_category, make_transaction):
        account = make_account(opening_balance="1000")
        salary = make_category("Salary", kind="income")
        food = make_category("Food")

        make_transaction(salary, "5000", "income", to_account_id=account.id)
        make_transaction(food, "750.50", "expense", from_account_id=account.id)

        assert AccountLedger(session).balance(account.id) == Decimal("5249.50")

    def test_transfer_moves_money_between_accounts(
        self, session, make_account, make_category, make_transaction
    ):
        bank = make_account("Bank", opening_balance="1000")
        cash = make_account("Wallet", account_type="cash")
        transfer = make_category("Self transfer")

        make_transaction(
            transfer, "300", "transfer", from_account_id=bank.id, to_account_id=cash.id
        )

        ledger = AccountLedger(session)
        assert ledger.balance(bank.id) == Decimal("700")
        assert ledger.balance(cash.id) == Decimal("300")

    def test_null_account_side_has_no_effect(
        self, session, make_account, make_category, make_transaction
    ):
        account = make_account(opening_balance="100")
        gift = make_category("Gift", kind="income")

        make_transaction(gift, "999", "income")

        assert AccountLedger(session).balance(account.id) == Decimal("100")

    def test_as_of_date_includes_that_day(
        self, session, make_account, make_category, make_transaction
    ):
        account = make_account()
        salary = make_category("Salary", kind="income")
        make_transaction(salary, "100", "income", on=date(2024, 1, 31), to_account_id=account.id)
        make_transaction(salary, "200", "income", on=date(2024, 2, 1), to_account_id=account.id)

        ledger = AccountLedger(session)
        assert ledger.balance(account.id, as_of_date=date(2024, 1, 30)) == Decimal("0")
        assert ledger.balance(account.id, as_of_date=date(2024, 1, 31)) == Decimal("100")
        assert ledger.balance_as_of(account.id, date(2024, 2, 1)) == Decimal("300")

    def test_opening_balance_for_period_uses_day_before(
        self, session, make_account, make_category, make_transaction
    ):
        account = make_account(opening_balance="50")
        salary = make_category("Salary", kind="income")
        make_transaction(salary, "100", "income", on=date(2024, 2, 29), to_account_id=account.id)
        make_transaction(salary, "40", "income", on=date(2024, 3, 1), to_account_id=account.id)

        opening = AccountLedger(session).opening_balance_for_period(account.id, date(2024, 3, 1))

        assert opening == Decimal("150")

    def test_unknown_account_raises(self, session):
        with pytest.raises(AccountNotFoundError):
            AccountLedger(session).balance(uuid4())


class TestBulkBalances:

    def test_bulk_matches_single_account(
        self, session, make_account, make_category, make_transaction
    ):
        bank = make_account("Bank", opening_balance="1000")
        cash = make_account("Cash", account_type="cash", opening_balance="20")
        salary = make_category("Salary", kind="income")
        food = make_category("Food")
        move = make_category("Move")

        make_transaction(salary, "4000", "income", to_account_id=bank.id)
        make_transaction(food, "35", "expense", from_account_id=cash.id)
        make_transaction(move, "500", "transfer", from_account_id=bank.id, to_account_id=cash.id)

        ledger = AccountLedger(session)
        rows = ledger.balances()

        assert [r.account_name for r in rows] == ["Bank", "Cash"]
        for row in rows:
            assert row.balance == ledger.balance(row.account_id)
        assert rows[0].incoming == Decimal("4000")
        assert rows[0].outgoing == Decimal("500")

    def test_period_balances(self, session, make_account, make_category, make_transaction):
        bank = make_account("Bank", opening_balance="1000")
        salary = make_category("Salary", kind="income")
        make_transaction(salary, "100", "income", on=date(2024, 1, 10), to_account_id=bank.id)
        make_transaction(salary, "200", "income", on=date(2024, 2, 10), to_account_id=bank.id)
        make_transaction(salary, "400", "income", on=date(2024, 3, 10), to_account_id=bank.id)

        report = AccountLedger(session).period_balances(date(2024, 2, 1), date(2024, 2, 29))

        assert report.accounts[0].opening == Decimal("1100")
        assert report.accounts[0].current == Decimal("1300")
        assert report.total_opening_balance == Decimal("1100")
        assert report.total_current_balance == Decimal("1300")

    def test_period_balances_without_start_uses_opening_balance(self, session, make_account):
        make_account("Bank", opening_balance="75")

        report = AccountLedger(session).period_balances()

        assert report.accounts[0].opening == Decimal("75")
        assert report.accounts[0].current == Decimal("75")


class TestPlatformBalances:

    def test_available_cash_on_investment_account(
        self, session, make_account, make_category, make_transaction
    ):
        broker = make_account("Zerodha", account_type="investment")
        make_account("Bank", opening_balance="10000")
        funding = make_category("Broker funding")
        make_transaction(funding, "5000", "transfer", to_account_id=broker.id)

        service = InvestmentService(session)
        stock = service.create_investment(name="TCS", investment_type="stock", account_id=broker.id)
        service.add_lot(stock.id, quantity="2", price_per_unit="1500", date=date(2024, 1, 2), charges="10")
        service.add_lot(
            stock.id, quantity="1", price_per_unit="1600", date=date(2024, 2, 2),
            lot_type="sell", charges="5",
        )

        rows = AccountLedger(session).platform_balances()

        assert len(rows) == 1
        assert rows[0].account_name == "Zerodha"
        assert rows[0].ledger_balance == Decimal("5000")
        assert rows[0].deployed == Decimal("4615")
        assert rows[0].available == Decimal("385")

    def test_deployed_matches_lot_outlay_fold(self, session, make_account):
        """The grouped SQL sum agrees with lot_outlay applied lot by lot."""
        broker = make_account("Broker", account_type="investment")
        service = InvestmentService(session)
        fund = service.create_investment(name="Index", investment_type="mf", account_id=broker.id)
        stock = service.create_investment(name="TCS", investment_type="stock", account_id=broker.id)
        lots = [
            service.add_lot(fund.id, quantity="12.5", price_per_unit="231.25", date=date(2024, 3, 1), charges="1"),
            service.add_lot(fund.id, quantity="3", price_per_unit="240", date=date(2024, 4, 1), lot_type="sell"),
            service.add_lot(stock.id, quantity="4", price_per_unit="3810.50", date=date(2024, 5, 1), charges="20"),
        ]

        expected = sum(
            (lot_outlay(lot.quantity, lot.price_per_unit, lot.charges) for lot in lots), Decimal("0")
        )

        assert AccountLedger(session).platform_balances()[0].deployed == expected
