"""
Tests for the investment valuation engine.

Covers:
- Unit holdings from buy and sell lots
- Cost basis (sells never reduce it)
- Expense and capital contributions from referencing transactions
- Current valuation per investment type, with and without a price
- Zero-denominator guards
- Batch isolation of failing inputs
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from money_engines.valuation import (
    BatchValuation,
    InvestmentValuationEngine,
    ValuationInput,
)
from money_kernel.domain.records import InvestmentInfo, InvestmentType, LotRecord


def _investment(kind=InvestmentType.STOCK, current_price=None, name="INFY"):
    return InvestmentInfo(
        id=uuid4(),
        name=name,
        investment_type=kind,
        account_id=uuid4(),
        current_price=current_price,
    )


def _lot(investment, quantity, price, charges="0", lot_type="buy", on=date(2024, 1, 10)):
    return LotRecord(
        id=uuid4(),
        investment_id=investment.id,
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price),
        charges=Decimal(charges),
        date=on,
        lot_type=lot_type,
    )


class TestSingleBuyLot:
    """One buy lot of 10 units at 100 with 5 charges."""

    def setup_method(self):
        self.engine = InvestmentValuationEngine()
        self.investment = _investment(current_price=Decimal("120"))
        self.summary = self.engine.summarize(
            investment=self.investment,
            lots=[_lot(self.investment, "10", "100", charges="5")],
        )

    def test_units_and_cost_basis(self):
        assert self.summary.total_units == Decimal("10")
        assert self.summary.cost_basis == Decimal("1005")
        assert self.summary.total_invested == Decimal("1005")

    def test_average_buy_price_includes_charges(self):
        assert self.summary.avg_buy_price == Decimal("100.5")

    def test_valuation_uses_units_times_price(self):
        assert self.summary.current_valuation == Decimal("1200")

    def test_charges_count_as_expenses(self):
        assert self.summary.total_expenses == Decimal("5")
        assert self.summary.net_capital == Decimal("1000")

    def test_gain_is_measured_against_net_capital(self):
        """net_gain = valuation - (capital - expenses)."""
        assert self.summary.net_gain == Decimal("200")
        assert self.summary.gain_percentage == Decimal("20")


class TestSellLots:
    """Sells reduce units but never the cost basis."""

    def setup_method(self):
        self.engine = InvestmentValuationEngine()

    def test_sell_reduces_units_not_cost_basis(self):
        investment = _investment(current_price=Decimal("50"))
        summary = self.engine.summarize(
            investment=investment,
            lots=[
                _lot(investment, "10", "40", charges="2"),
                _lot(investment, "4", "55", charges="1", lot_type="sell"),
            ],
        )

        assert summary.total_units == Decimal("6")
        assert summary.cost_basis == Decimal("402")
        assert summary.total_expenses == Decimal("3")
        assert summary.current_valuation == Decimal("300")

    def test_fully_sold_holding_has_zero_average_price(self):
        investment = _investment(current_price=Decimal("50"))
        summary = self.engine.summarize(
            investment=investment,
            lots=[
                _lot(investment, "5", "40"),
                _lot(investment, "5", "45", lot_type="sell"),
            ],
        )

        assert summary.total_units == Decimal("0")
        assert summary.avg_buy_price == Decimal("0")
        assert summary.current_valuation == Decimal("0")

    def test_unknown_lot_type_is_ignored(self):
        investment = _investment()
        summary = self.engine.summarize(
            investment=investment,
            lots=[_lot(investment, "3", "10", charges="9", lot_type="bonus")],
        )

        assert summary.total_units == Decimal("0")
        assert summary.cost_basis == Decimal("0")
        assert summary.total_expenses == Decimal("0")


class TestReferencingTransactions:
    """Transfers add capital, expenses add expenses."""

    def setup_method(self):
        self.engine = InvestmentValuationEngine()

    def test_transfer_adds_to_invested_capital(self):
        investment = _investment(kind=InvestmentType.OTHER)
        summary = self.engine.summarize(
            investment=investment,
            lots=[],
            transfer_total=Decimal("5000"),
            expense_total=Decimal("50"),
        )

        assert summary.total_invested == Decimal("5000")
        assert summary.total_expenses == Decimal("50")
        assert summary.net_capital == Decimal("4950")
        assert summary.current_valuation == Decimal("4950")
        assert summary.net_gain == Decimal("0")

    def test_no_lots_and_no_transactions_is_all_zero(self):
        investment = _investment()
        summary = self.engine.summarize(investment=investment, lots=[])

        assert summary.total_units == Decimal("0")
        assert summary.net_capital == Decimal("0")
        assert summary.gain_percentage == Decimal("0")


class TestValuationByType:
    """Fallbacks when no current price is recorded."""

    def setup_method(self):
        self.engine = InvestmentValuationEngine()

    @pytest.mark.parametrize("kind", [InvestmentType.STOCK, InvestmentType.MUTUAL_FUND])
    def test_unitised_without_price_falls_back_to_net_capital(self, kind):
        investment = _investment(kind=kind)
        summary = self.engine.summarize(
            investment=investment,
            lots=[_lot(investment, "10", "100", charges="5")],
        )

        assert summary.current_valuation == summary.net_capital
        assert summary.net_gain == Decimal("0")

    @pytest.mark.parametrize(
        "kind", [InvestmentType.FIXED_DEPOSIT, InvestmentType.RECURRING_DEPOSIT]
    )
    def test_deposit_uses_price_as_tracked_value(self, kind):
        investment = _investment(kind=kind, current_price=Decimal("10750"))
        summary = self.engine.summarize(
            investment=investment,
            lots=[],
            transfer_total=Decimal("10000"),
        )

        assert summary.current_valuation == Decimal("10750")
        assert summary.net_gain == Decimal("750")
        assert summary.gain_percentage == Decimal("7.5")

    def test_other_ignores_current_price(self):
        investment = _investment(kind=InvestmentType.OTHER, current_price=Decimal("999"))
        summary = self.engine.summarize(
            investment=investment,
            lots=[],
            transfer_total=Decimal("100"),
        )

        assert summary.current_valuation == Decimal("100")

    def test_negative_net_capital_gives_zero_percentage(self):
        investment = _investment(kind=InvestmentType.OTHER)
        summary = self.engine.summarize(
            investment=investment,
            lots=[],
            expense_total=Decimal("20"),
        )

        assert summary.net_capital == Decimal("-20")
        assert summary.gain_percentage == Decimal("0")


class TestBatch:

    def setup_method(self):
        self.engine = InvestmentValuationEngine()

    def test_batch_preserves_input_order(self):
        first = _investment(name="A")
        second = _investment(name="B")
        batch = self.engine.summarize_batch(
            [ValuationInput(first, ()), ValuationInput(second, ())]
        )

        assert isinstance(batch, BatchValuation)
        assert [s.name for s in batch.summaries] == ["A", "B"]
        assert batch.failures == ()

    def test_failing_input_is_isolated(self):
        good = _investment(name="Good")
        bad = _investment(name="Bad")
        broken_lot = LotRecord(
            id=uuid4(),
            investment_id=bad.id,
            quantity=Decimal("NaN"),
            price_per_unit=Decimal("1"),
            charges=Decimal("0"),
            date=date(2024, 1, 1),
            lot_type="buy",
        )

        batch = self.engine.summarize_batch(
            [ValuationInput(bad, (broken_lot,)), ValuationInput(good, ())]
        )

        assert [s.name for s in batch.summaries] == ["Good"]
        assert [f.investment_id for f in batch.failures] == [bad.id]

    def test_summarize_emits_engine_trace(self, captured_logs):
        investment = _investment()
        self.engine.summarize(investment=investment, lots=[])

        traces = [r for r in captured_logs() if r["message"] == "MONEY_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "valuation"
        assert len(traces[-1]["input_fingerprint"]) == 16
