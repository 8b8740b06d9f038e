"""
Module: money_kernel.models.invoice
Responsibility: ORM persistence for invoices, their line items, and the
    payments received against them.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - invoice_number is unique (uq_invoice_number).
    - status is always derived from total_amount and the sum of payments; it
      is recomputed in full by InvoiceService every time a payment is
      recorded or removed, never patched incrementally.
    - Items and payments are deleted with their invoice.

Failure modes:
    - IntegrityError (surfaced as StoreAccessError) on a duplicate
      invoice_number; the whole create is rolled back with its items.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import (
    InvoiceInfo,
    InvoiceStatus,
    LineItemInfo,
    PaymentInfo,
)


class Invoice(TrackedBase):
    """A bill raised against a project."""

    __tablename__ = "invoices"

    __table_args__ = (UniqueConstraint("invoice_number", name="uq_invoice_number"),)

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    stage: Mapped[str | None] = mapped_column(String(100), nullable=True)
    issue_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.UNPAID.value,
    )

    discount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    tax_percentage: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )
    project_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    items: Mapped[list["InvoiceItem"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    payments: Mapped[list["InvoicePayment"]] = relationship(
        cascade="all, delete-orphan",
        order_by="InvoicePayment.payment_date",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} {self.status}>"

    def to_dto(self) -> InvoiceInfo:
        """Convert ORM model (with items and payments) to a frozen DTO."""
        return InvoiceInfo(
            id=self.id,
            project_id=self.project_id,
            invoice_number=self.invoice_number,
            issue_date=self.issue_date,
            due_date=self.due_date,
            total_amount=self.total_amount,
            status=InvoiceStatus(self.status),
            stage=self.stage,
            discount=self.discount,
            tax_percentage=self.tax_percentage,
            project_reference=self.project_reference,
            notes=self.notes,
            items=tuple(item.to_dto() for item in self.items),
            payments=tuple(payment.to_dto() for payment in self.payments),
        )


class InvoiceItem(TrackedBase):
    __tablename__ = "invoice_items"

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    def to_dto(self) -> LineItemInfo:
        return LineItemInfo(
            description=self.description,
            quantity=self.quantity,
            rate=self.rate,
            amount=self.amount,
        )


class InvoicePayment(TrackedBase):
    """Money received against an invoice.  May link the income transaction."""

    __tablename__ = "invoice_payments"

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
    )

    amount_paid: Mapped[Decimal] = mapped_column(nullable=False)
    payment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_reference: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    transaction_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    def to_dto(self) -> PaymentInfo:
        return PaymentInfo(
            id=self.id,
            invoice_id=self.invoice_id,
            amount_paid=self.amount_paid,
            payment_date=self.payment_date,
            payment_mode=self.payment_mode,
            transaction_reference=self.transaction_reference,
            transaction_id=self.transaction_id,
        )
