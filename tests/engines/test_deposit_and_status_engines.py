"""
Tests for the small engines: invoice status, deposit maturity, ledger
arithmetic and the engine tracer.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from money_engines.deposits import (
    Compounding,
    fixed_deposit_maturity,
    recurring_deposit_maturity,
    unit_holding_value,
)
from money_engines.invoice_status import derive_invoice_status
from money_engines.ledger import (
    AccountBalance,
    PlatformBalance,
    balance_from_transactions,
    compute_balance,
    day_before,
    lot_outlay,
)
from money_engines.tracer import compute_input_fingerprint, traced_engine
from money_kernel.domain.records import (
    AccountType,
    Direction,
    InvoiceStatus,
    TransactionRecord,
)


class TestInvoiceStatus:
    """Status is derived from the full payment total."""

    def test_partial_then_full_payment(self):
        total = Decimal("1000")

        assert derive_invoice_status(total, [Decimal("400")]) == InvoiceStatus.PARTIALLY_PAID
        assert (
            derive_invoice_status(total, [Decimal("400"), Decimal("600")])
            == InvoiceStatus.PAID
        )

    def test_no_payments_is_unpaid(self):
        assert derive_invoice_status(Decimal("1000"), []) == InvoiceStatus.UNPAID

    def test_overpayment_is_paid(self):
        assert derive_invoice_status(Decimal("1000"), [Decimal("1200")]) == InvoiceStatus.PAID

    def test_zero_total_is_paid(self):
        assert derive_invoice_status(Decimal("0"), []) == InvoiceStatus.PAID

    def test_status_values_match_stored_strings(self):
        assert InvoiceStatus.PARTIALLY_PAID.value == "Partially Paid"


class TestDeposits:

    def test_fixed_deposit_quarterly(self):
        result = fixed_deposit_maturity(
            principal=Decimal("100000"),
            rate=Decimal("7"),
            tenure_months=12,
            compounding=Compounding.QUARTERLY,
        )

        assert result.maturity_amount == Decimal("107185.90")
        assert result.interest_earned == Decimal("7185.90")
        assert result.total_deposited == Decimal("100000")

    def test_fixed_deposit_zero_tenure_returns_principal(self):
        result = fixed_deposit_maturity(
            principal=Decimal("5000"), rate=Decimal("6.5"), tenure_months=0
        )

        assert result.maturity_amount == Decimal("5000.00")
        assert result.interest_earned == Decimal("0.00")

    def test_recurring_deposit_at_zero_rate(self):
        result = recurring_deposit_maturity(
            monthly_deposit=Decimal("1000"), rate=Decimal("0"), tenure_months=12
        )

        assert result.total_deposited == Decimal("12000")
        assert result.maturity_amount == Decimal("12000.00")

    def test_recurring_deposit_earns_interest(self):
        result = recurring_deposit_maturity(
            monthly_deposit=Decimal("1000"),
            rate=Decimal("7"),
            tenure_months=12,
            compounding="monthly",
        )

        assert result.maturity_amount > result.total_deposited
        assert result.interest_earned == result.maturity_amount - result.total_deposited

    def test_recurring_deposit_rejects_yearly_compounding(self):
        with pytest.raises(ValueError):
            recurring_deposit_maturity(
                monthly_deposit=Decimal("1000"),
                rate=Decimal("7"),
                tenure_months=12,
                compounding=Compounding.YEARLY,
            )

    def test_negative_tenure_rejected(self):
        with pytest.raises(ValueError):
            fixed_deposit_maturity(principal=Decimal("1"), rate=Decimal("1"), tenure_months=-1)

    def test_unit_holding_value(self):
        value = unit_holding_value(Decimal("100"), Decimal("25.5"), Decimal("2000"))

        assert value.current_value == Decimal("2550.00")
        assert value.absolute_return == Decimal("550.00")
        assert value.percentage_return == Decimal("27.50")


class TestLedgerArithmetic:

    def test_compute_balance_reads_none_as_zero(self):
        assert compute_balance(Decimal("100"), None, Decimal("30")) == Decimal("70")

    def test_day_before_crosses_month_and_leap_day(self):
        assert day_before(date(2024, 3, 1)) == date(2024, 2, 29)

    def test_balance_from_transactions(self):
        account_id = uuid4()
        other = uuid4()
        txns = [
            TransactionRecord(uuid4(), date(2024, 1, 5), Decimal("500"), Direction.INCOME,
                              uuid4(), to_account_id=account_id),
            TransactionRecord(uuid4(), date(2024, 1, 9), Decimal("120"), Direction.EXPENSE,
                              uuid4(), from_account_id=account_id),
            TransactionRecord(uuid4(), date(2024, 2, 1), Decimal("200"), Direction.TRANSFER,
                              uuid4(), from_account_id=account_id, to_account_id=other),
        ]

        assert balance_from_transactions(
            account_id=account_id, opening_balance=Decimal("1000"), transactions=txns
        ) == Decimal("1180")
        assert balance_from_transactions(
            account_id=account_id,
            opening_balance=Decimal("1000"),
            transactions=txns,
            as_of_date=date(2024, 1, 31),
        ) == Decimal("1380")

    def test_balance_dataclasses(self):
        row = AccountBalance(uuid4(), "Cash", AccountType.CASH, Decimal("10"),
                             Decimal("5"), Decimal("3"))
        platform = PlatformBalance(uuid4(), "Zerodha", Decimal("1000"), Decimal("1005"))

        assert row.balance == Decimal("12")
        assert platform.available == Decimal("-5")

    def test_lot_outlay(self):
        assert lot_outlay(Decimal("10"), Decimal("100"), Decimal("5")) == Decimal("1005")


class TestTracer:

    def test_fingerprint_ignores_decimal_scale(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("100")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("100.00")})

        assert a == b
        assert len(a) == 16

    def test_fingerprint_records_missing_fields(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )

    def test_traced_engine_logs_and_returns(self, captured_logs):
        @traced_engine("demo", "2.0", fingerprint_fields=("value",))
        def double(*, value):
            return value * 2

        assert double(value=Decimal("4")) == Decimal("8")

        trace = [r for r in captured_logs() if r["message"] == "MONEY_ENGINE_TRACE"][-1]
        assert trace["engine_name"] == "demo"
        assert trace["engine_version"] == "2.0"
        assert trace["logger"] == "money_kernel.engines.tracer"
        assert "duration_ms" in trace
