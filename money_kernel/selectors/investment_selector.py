"""
Module: money_kernel.selectors.investment_selector
Responsibility: Read-only access to investments and their lots, shaped as the
    inputs the valuation engine needs.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/, selectors/ and the money_engines valuation input types.

Invariants enforced:
    - Lots and referencing-transaction sums are loaded in a fixed number of
      queries (investments with lots, one grouped transaction sum), not one
      query per investment.
    - A row that cannot be turned into a DTO (e.g. an unknown
      investment_type) is reported as a ValuationFailure instead of
      aborting the batch.

Failure modes:
    - InvestmentNotFoundError from get() for unknown ids.
"""

from uuid import UUID

from sqlalchemy import func, select

from money_kernel.domain.records import Direction, InvestmentInfo, LotRecord
from money_kernel.exceptions import InvestmentNotFoundError
from money_kernel.logging_config import get_logger
from money_kernel.models.investment import Investment, InvestmentLot
from money_kernel.selectors.base import ZERO, BaseSelector
from money_kernel.selectors.transaction_selector import TransactionSelector
from money_engines.valuation import ValuationFailure, ValuationInput

logger = get_logger("selectors.investment")


class InvestmentSelector(BaseSelector):
    """Investment and lot queries."""

    def get(self, investment_id: UUID) -> InvestmentInfo:
        investment = self.session.get(Investment, investment_id)
        if investment is None:
            raise InvestmentNotFoundError(str(investment_id))
        return investment.to_dto()

    def list_investments(self) -> list[InvestmentInfo]:
        rows = self.session.scalars(select(Investment).order_by(Investment.name, Investment.id))
        return [row.to_dto() for row in rows.all()]

    def lots_for(self, investment_id: UUID) -> list[LotRecord]:
        """Lots of one investment, oldest first."""
        query = (
            select(InvestmentLot)
            .where(InvestmentLot.investment_id == investment_id)
            .order_by(InvestmentLot.date, InvestmentLot.id)
        )
        return [lot.to_dto() for lot in self.session.scalars(query).all()]

    def symbol_bearing(self) -> list[InvestmentInfo]:
        """Investments with a non-empty provider_symbol, by name."""
        query = (
            select(Investment)
            .where(Investment.provider_symbol.is_not(None))
            .where(func.trim(Investment.provider_symbol) != "")
            .order_by(Investment.name, Investment.id)
        )
        return [row.to_dto() for row in self.session.scalars(query).all()]

    def valuation_inputs(self) -> tuple[list[ValuationInput], list[ValuationFailure]]:
        """
        Everything needed to value every investment.

        Returns:
            (inputs, failures) where failures lists rows that could not be
            read into DTOs.
        """
        flows = TransactionSelector(self.session).totals_by_investment()
        investments = self.session.scalars(
            select(Investment).order_by(Investment.name, Investment.id)
        ).all()

        inputs: list[ValuationInput] = []
        failures: list[ValuationFailure] = []
        for investment in investments:
            try:
                info = investment.to_dto()
                lots = tuple(lot.to_dto() for lot in investment.lots)
            except ValueError as exc:
                logger.warning(
                    "investment_record_unreadable",
                    extra={"investment_id": str(investment.id), "error": str(exc)},
                )
                failures.append(ValuationFailure(investment.id, str(exc)))
                continue

            totals = flows.get(investment.id, {})
            inputs.append(
                ValuationInput(
                    investment=info,
                    lots=lots,
                    transfer_total=totals.get(Direction.TRANSFER, ZERO),
                    expense_total=totals.get(Direction.EXPENSE, ZERO),
                )
            )
        return inputs, failures
