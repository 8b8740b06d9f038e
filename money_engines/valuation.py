"""
Module: money_engines.valuation
Responsibility:
    Derive unit holdings, cost basis, capital, expenses, current valuation
    and gain/loss for one investment from its lots and the transactions
    that reference it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import money_kernel/domain and money_engines helpers.

Invariants enforced:
    - total_units = sum(buy.quantity) - sum(sell.quantity).
    - cost_basis = sum over BUY lots of (quantity x price + charges).  Sell
      lots never reduce it; they only add their charges to expenses.
    - total_expenses = sum(charges over all lots) + expense-direction
      transactions referencing the investment.
    - total_invested_capital = cost_basis + transfer-direction transactions
      referencing the investment.
    - Every ratio with a zero or negative denominator resolves to 0.
    - Lots whose lot_type is neither "buy" nor "sell" are ignored.

Failure modes:
    - summarize() itself does not raise for well-formed Decimals.
      summarize_batch() isolates ArithmeticError / ValueError per
      investment and reports it as a ValuationFailure.

Usage:
    engine = InvestmentValuationEngine()
    summary = engine.summarize(
        investment=investment_info,
        lots=lot_records,
        transfer_total=Decimal("0"),
        expense_total=Decimal("0"),
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from money_kernel.domain.records import InvestmentInfo, InvestmentType, LotRecord, LotType
from money_kernel.logging_config import get_logger
from money_engines.ledger import lot_outlay
from money_engines.ratios import percentage, safe_divide
from money_engines.tracer import traced_engine

logger = get_logger("engines.valuation")

ZERO = Decimal("0")


@dataclass(frozen=True)
class InvestmentSummary:
    """
    Valuation result for one investment.

    ``total_invested`` is the invested capital (lots plus manual transfers);
    ``cost_basis`` is the buy-lot figure alone.
    """

    investment_id: UUID
    name: str
    investment_type: InvestmentType
    account_id: UUID
    total_units: Decimal
    avg_buy_price: Decimal
    cost_basis: Decimal
    total_invested: Decimal
    total_expenses: Decimal
    net_capital: Decimal
    current_price: Decimal | None
    current_valuation: Decimal
    net_gain: Decimal
    gain_percentage: Decimal
    account_name: str | None = None


@dataclass(frozen=True)
class ValuationInput:
    """Everything summarize() needs for one investment."""

    investment: InvestmentInfo
    lots: tuple[LotRecord, ...]
    transfer_total: Decimal = ZERO
    expense_total: Decimal = ZERO


@dataclass(frozen=True)
class ValuationFailure:
    investment_id: UUID
    reason: str


@dataclass(frozen=True)
class BatchValuation:
    summaries: tuple[InvestmentSummary, ...] = ()
    failures: tuple[ValuationFailure, ...] = field(default_factory=tuple)


class InvestmentValuationEngine:
    """
    Pure valuation calculator.

    Contract:
        summarize() receives immutable DTOs and Decimal sums, and returns a
        frozen InvestmentSummary.  Same inputs always give the same output.

    Non-goals:
        - Does not fetch prices; current_price is whatever the record holds.
        - Does not reduce cost basis on sells (the recorded behaviour).
    """

    @traced_engine(
        "valuation",
        "1.0",
        fingerprint_fields=("investment", "lots", "transfer_total", "expense_total"),
    )
    def summarize(
        self,
        *,
        investment: InvestmentInfo,
        lots: Sequence[LotRecord],
        transfer_total: Decimal = ZERO,
        expense_total: Decimal = ZERO,
    ) -> InvestmentSummary:
        buy_units = ZERO
        sell_units = ZERO
        cost_basis = ZERO
        lot_charges = ZERO

        for lot in lots:
            charges = lot.charges or ZERO
            if lot.lot_type == LotType.BUY.value:
                buy_units += lot.quantity
                cost_basis += lot_outlay(lot.quantity, lot.price_per_unit, charges)
                lot_charges += charges
            elif lot.lot_type == LotType.SELL.value:
                sell_units += lot.quantity
                lot_charges += charges

        total_units = buy_units - sell_units
        total_expenses = lot_charges + (expense_total or ZERO)
        total_invested_capital = cost_basis + (transfer_total or ZERO)
        avg_buy_price = safe_divide(cost_basis, total_units)
        net_capital = total_invested_capital - total_expenses

        current_valuation = self._current_valuation(
            investment, total_units, net_capital
        )
        net_gain = current_valuation - net_capital
        gain_percentage = percentage(net_gain, net_capital)

        return InvestmentSummary(
            investment_id=investment.id,
            name=investment.name,
            investment_type=investment.investment_type,
            account_id=investment.account_id,
            total_units=total_units,
            avg_buy_price=avg_buy_price,
            cost_basis=cost_basis,
            total_invested=total_invested_capital,
            total_expenses=total_expenses,
            net_capital=net_capital,
            current_price=investment.current_price,
            current_valuation=current_valuation,
            net_gain=net_gain,
            gain_percentage=gain_percentage,
        )

    @staticmethod
    def _current_valuation(
        investment: InvestmentInfo,
        total_units: Decimal,
        net_capital: Decimal,
    ) -> Decimal:
        price = investment.current_price
        kind = investment.investment_type
        if kind.is_unitised:
            return total_units * price if price is not None else net_capital
        if kind.is_deposit:
            # Manually tracked value for deposits
            return price if price is not None else net_capital
        return net_capital

    def summarize_batch(self, inputs: Sequence[ValuationInput]) -> BatchValuation:
        """
        Summarize many investments; one failure does not stop the rest.

        Postconditions:
            Every input appears exactly once, either in summaries or in
            failures, in input order.
        """
        summaries: list[InvestmentSummary] = []
        failures: list[ValuationFailure] = []
        for item in inputs:
            try:
                summaries.append(
                    self.summarize(
                        investment=item.investment,
                        lots=item.lots,
                        transfer_total=item.transfer_total,
                        expense_total=item.expense_total,
                    )
                )
            except (ArithmeticError, ValueError, TypeError) as exc:
                logger.warning(
                    "investment_valuation_failed",
                    extra={
                        "investment_id": str(item.investment.id),
                        "error": str(exc),
                    },
                )
                failures.append(ValuationFailure(item.investment.id, str(exc)))
        return BatchValuation(summaries=tuple(summaries), failures=tuple(failures))
