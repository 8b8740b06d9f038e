"""
Module: money_kernel.models.quotation
Responsibility: ORM persistence for quotations sent to clients and their line
    items.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - quotation_number is unique (uq_quotation_number).
    - Items are owned by the quotation; an update replaces the full item set.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import LineItemInfo, QuotationInfo


class Quotation(TrackedBase):
    __tablename__ = "quotations"

    __table_args__ = (
        UniqueConstraint("quotation_number", name="uq_quotation_number"),
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("clients.id"),
        nullable=False,
    )

    project_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=True,
    )

    project_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quotation_number: Mapped[str] = mapped_column(String(50), nullable=False)
    issue_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    valid_till: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Draft")
    payment_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    terms_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)

    items: Mapped[list["QuotationItem"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Quotation {self.quotation_number} {self.status}>"

    def to_dto(self) -> QuotationInfo:
        return QuotationInfo(
            id=self.id,
            client_id=self.client_id,
            quotation_number=self.quotation_number,
            issue_date=self.issue_date,
            valid_till=self.valid_till,
            total_amount=self.total_amount,
            status=self.status,
            project_id=self.project_id,
            project_title=self.project_title,
            payment_terms=self.payment_terms,
            terms_conditions=self.terms_conditions,
            items=tuple(item.to_dto() for item in self.items),
        )


class QuotationItem(TrackedBase):
    __tablename__ = "quotation_items"

    quotation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("quotations.id", ondelete="CASCADE"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    timeline: Mapped[str | None] = mapped_column(String(100), nullable=True)
    features: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    def to_dto(self) -> LineItemInfo:
        return LineItemInfo(
            description=self.description,
            quantity=self.quantity,
            rate=self.rate,
            amount=self.amount,
            timeline=self.timeline,
            features=self.features,
        )
