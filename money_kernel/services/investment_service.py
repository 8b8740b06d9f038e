"""
Module: money_kernel.services.investment_service
Responsibility: Maintain investments, their buy/sell lots, the current price
    written by the refresh sweep, and the small-savings rate table.
Architecture position: Kernel > Services.  May import from models/,
    domain/, exceptions and services/base.py.

Invariants enforced:
    - Lot quantity > 0, price_per_unit >= 0, charges >= 0, lot_type in
      {buy, sell}; checked before any store access.
    - Deleting an investment first detaches every transaction that
      referenced it, then removes the investment with its lots.
    - Only record_price() writes current_price and last_updated_at.

Failure modes:
    - InvalidRecordError for out-of-domain values.
    - InvestmentNotFoundError / AccountNotFoundError for missing references.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import update

from money_kernel.domain.records import (
    InvestmentInfo,
    InvestmentRateInfo,
    InvestmentType,
    LotRecord,
    LotType,
)
from money_kernel.exceptions import (
    AccountNotFoundError,
    InvalidRecordError,
    InvestmentNotFoundError,
)
from money_kernel.logging_config import get_logger
from money_kernel.models.account import Account
from money_kernel.models.investment import Investment, InvestmentLot, InvestmentRate
from money_kernel.models.transaction import Transaction
from money_kernel.services.base import (
    BaseService,
    coerce_decimal,
    coerce_enum,
    require_id,
    require_non_negative,
    require_positive,
    require_text,
)

logger = get_logger("services.investment")

_OPTIONAL_AMOUNTS = (
    "units",
    "avg_buy_price",
    "current_price",
    "principal_amount",
    "interest_rate",
    "maturity_amount",
    "monthly_deposit",
    "principal_charges",
)


class InvestmentService(BaseService):
    """
    Investment, lot and rate writes.

    Guarantees:
        - Returns DTOs, never ORM rows.
        - A lot always belongs to an existing investment.
    """

    def create_investment(
        self,
        name: str,
        investment_type: InvestmentType | str,
        account_id: UUID,
        *,
        maturity_date: dt.date | None = None,
        provider_symbol: str | None = None,
        notes: str | None = None,
        **amounts: Decimal | str | None,
    ) -> InvestmentInfo:
        values = self._validate(name, investment_type, amounts)
        investment = Investment()
        self._assign(investment, values, account_id, maturity_date, provider_symbol, notes)
        self.session.add(investment)
        self.session.flush()
        logger.info(
            "investment_created",
            extra={
                "investment_id": str(investment.id),
                "investment_type": investment.investment_type,
            },
        )
        return investment.to_dto()

    def update_investment(
        self,
        investment_id: UUID | None,
        name: str,
        investment_type: InvestmentType | str,
        account_id: UUID,
        *,
        maturity_date: dt.date | None = None,
        provider_symbol: str | None = None,
        notes: str | None = None,
        **amounts: Decimal | str | None,
    ) -> InvestmentInfo:
        investment_id = require_id("Investment", investment_id)
        values = self._validate(name, investment_type, amounts)
        investment = self._load(Investment, investment_id, InvestmentNotFoundError)
        self._assign(investment, values, account_id, maturity_date, provider_symbol, notes)
        self.session.flush()
        return investment.to_dto()

    def delete_investment(self, investment_id: UUID | None) -> None:
        investment_id = require_id("Investment", investment_id)
        investment = self._load(Investment, investment_id, InvestmentNotFoundError)
        self.session.execute(
            update(Transaction)
            .where(Transaction.investment_id == investment_id)
            .values(investment_id=None)
        )
        self.session.delete(investment)
        self.session.flush()
        logger.info("investment_deleted", extra={"investment_id": str(investment_id)})

    def record_price(
        self,
        investment_id: UUID,
        price: Decimal,
        observed_at: dt.datetime,
    ) -> InvestmentInfo:
        """Store a freshly observed market price."""
        price = require_non_negative("investment", "current_price", price)
        investment = self._load(Investment, investment_id, InvestmentNotFoundError)
        investment.current_price = price
        investment.last_updated_at = observed_at
        self.session.flush()
        return investment.to_dto()

    # ------------------------------------------------------------------
    # Lots
    # ------------------------------------------------------------------

    def add_lot(
        self,
        investment_id: UUID,
        quantity: Decimal | str,
        price_per_unit: Decimal | str,
        date: dt.date,
        lot_type: LotType | str = LotType.BUY,
        charges: Decimal | str = Decimal("0"),
        notes: str | None = None,
    ) -> LotRecord:
        values = self._validate_lot(quantity, price_per_unit, date, lot_type, charges, notes)
        investment = self._load(Investment, investment_id, InvestmentNotFoundError)
        lot = InvestmentLot(**values)
        investment.lots.append(lot)
        self.session.flush()
        return lot.to_dto()

    def update_lot(
        self,
        lot_id: UUID | None,
        quantity: Decimal | str,
        price_per_unit: Decimal | str,
        date: dt.date,
        lot_type: LotType | str = LotType.BUY,
        charges: Decimal | str = Decimal("0"),
        notes: str | None = None,
    ) -> LotRecord:
        lot_id = require_id("InvestmentLot", lot_id)
        values = self._validate_lot(quantity, price_per_unit, date, lot_type, charges, notes)

        lot = self._load(InvestmentLot, lot_id)
        for field, value in values.items():
            setattr(lot, field, value)
        self.session.flush()
        return lot.to_dto()

    def delete_lot(self, lot_id: UUID | None) -> None:
        lot = self._load(InvestmentLot, require_id("InvestmentLot", lot_id))
        lot.investment.lots.remove(lot)
        self.session.flush()

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    def save_rate(
        self,
        investment_type: str,
        rate: Decimal | str,
        effective_date: dt.date,
        notes: str | None = None,
        rate_id: UUID | None = None,
    ) -> InvestmentRateInfo:
        """Insert a rate, or replace the one with ``rate_id``."""
        investment_type = require_text("investment_rate", "investment_type", investment_type)
        rate = require_non_negative("investment_rate", "rate", rate)

        row = self._load(InvestmentRate, rate_id) if rate_id is not None else InvestmentRate()
        row.investment_type = investment_type
        row.rate = rate
        row.effective_date = effective_date
        row.notes = notes
        if rate_id is None:
            self.session.add(row)
        self.session.flush()
        return row.to_dto()

    def delete_rate(self, rate_id: UUID | None) -> None:
        self._delete(InvestmentRate, require_id("InvestmentRate", rate_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(name, investment_type, amounts) -> dict:
        values = {
            "name": require_text("investment", "name", name),
            "investment_type": coerce_enum(
                "investment", "investment_type", InvestmentType, investment_type
            ).value,
        }
        for field, raw in amounts.items():
            if field not in _OPTIONAL_AMOUNTS:
                raise InvalidRecordError("investment", field, "not an investment field")
            values[field] = None if raw is None else coerce_decimal("investment", field, raw)
        return values

    def _assign(self, investment, values, account_id, maturity_date, provider_symbol, notes) -> None:
        if self.session.get(Account, account_id) is None:
            raise AccountNotFoundError(str(account_id))

        investment.account_id = account_id
        investment.maturity_date = maturity_date
        investment.provider_symbol = provider_symbol.strip() if provider_symbol else None
        investment.notes = notes
        investment.name = values["name"]
        investment.investment_type = values["investment_type"]
        for field in _OPTIONAL_AMOUNTS:
            setattr(investment, field, values.get(field))

    @staticmethod
    def _validate_lot(quantity, price_per_unit, date, lot_type, charges, notes) -> dict:
        return {
            "quantity": require_positive("lot", "quantity", quantity),
            "price_per_unit": require_non_negative("lot", "price_per_unit", price_per_unit),
            "charges": require_non_negative("lot", "charges", charges),
            "lot_type": coerce_enum("lot", "lot_type", LotType, lot_type).value,
            "date": date,
            "notes": notes,
        }
