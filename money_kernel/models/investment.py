"""
Module: money_kernel.models.investment
Responsibility: ORM persistence for investments, their buy/sell lots, and the
    reference rate table for small-savings schemes (NPS, PPF).
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Lots are the authoritative record of unit activity.  Holding units are
      always derived as sum(buy.quantity) - sum(sell.quantity); the optional
      ``units`` / ``avg_buy_price`` columns are informational only.
    - InvestmentLot.quantity > 0, price_per_unit >= 0, charges >= 0
      (validated by InvestmentService before insert).
    - current_price / last_updated_at are the only columns the price refresh
      sweep writes.

Failure modes:
    - InvestmentNotFoundError when a lot or refresh targets a missing row.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import (
    InvestmentInfo,
    InvestmentRateInfo,
    InvestmentType,
    LotRecord,
)


class Investment(TrackedBase):
    """
    A holding on an investment-platform account.

    Contract:
        Market-priced kinds (stock, mf) are valued as units x current_price.
        Deposit kinds (fd, rd) treat current_price as a manually tracked
        value.  provider_symbol, when present, is the lookup key for the
        external price source.
    """

    __tablename__ = "investments"

    __table_args__ = (Index("idx_investment_account", "account_id"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    investment_type: Mapped[str] = mapped_column(String(20), nullable=False)

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    units: Mapped[Decimal | None] = mapped_column(nullable=True)
    avg_buy_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    current_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Fixed-instrument fields
    principal_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    interest_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    maturity_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    maturity_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    monthly_deposit: Mapped[Decimal | None] = mapped_column(nullable=True)
    principal_charges: Mapped[Decimal | None] = mapped_column(nullable=True)

    provider_symbol: Mapped[str | None] = mapped_column(String(100), nullable=True)

    last_updated_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lots: Mapped[list["InvestmentLot"]] = relationship(
        back_populates="investment",
        cascade="all, delete-orphan",
        order_by="InvestmentLot.date",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Investment {self.name} ({self.investment_type})>"

    def to_dto(self) -> InvestmentInfo:
        """Convert ORM model to frozen domain DTO."""
        return InvestmentInfo(
            id=self.id,
            name=self.name,
            investment_type=InvestmentType(self.investment_type),
            account_id=self.account_id,
            units=self.units,
            avg_buy_price=self.avg_buy_price,
            current_price=self.current_price,
            principal_amount=self.principal_amount,
            interest_rate=self.interest_rate,
            maturity_date=self.maturity_date,
            maturity_amount=self.maturity_amount,
            monthly_deposit=self.monthly_deposit,
            principal_charges=self.principal_charges,
            provider_symbol=self.provider_symbol,
            last_updated_at=self.last_updated_at,
            notes=self.notes,
        )


class InvestmentLot(TrackedBase):
    """
    One buy or sell event.

    Guarantees:
        - Deleted together with its investment.
    """

    __tablename__ = "investment_lots"

    __table_args__ = (Index("idx_lot_investment_date", "investment_id", "date"),)

    investment_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("investments.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(nullable=False)
    charges: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    date: Mapped[dt.date] = mapped_column("date", Date, nullable=False)

    lot_type: Mapped[str] = mapped_column(String(10), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    investment: Mapped[Investment] = relationship(back_populates="lots")

    def __repr__(self) -> str:
        return f"<InvestmentLot {self.lot_type} {self.quantity} @ {self.price_per_unit}>"

    def to_dto(self) -> LotRecord:
        """Convert ORM model to frozen domain DTO."""
        return LotRecord(
            id=self.id,
            investment_id=self.investment_id,
            quantity=self.quantity,
            price_per_unit=self.price_per_unit,
            charges=self.charges,
            date=self.date,
            lot_type=self.lot_type,
            notes=self.notes,
        )


class InvestmentRate(TrackedBase):
    """Published rate for a small-savings scheme, effective from a date."""

    __tablename__ = "investment_rates"

    investment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    effective_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self) -> InvestmentRateInfo:
        return InvestmentRateInfo(
            id=self.id,
            investment_type=self.investment_type,
            rate=self.rate,
            effective_date=self.effective_date,
            notes=self.notes,
        )
