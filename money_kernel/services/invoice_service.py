"""
Module: money_kernel.services.invoice_service
Responsibility: Create invoices with their line items, record payments, and
    keep the stored invoice status consistent with its payments.
Architecture position: Kernel > Services.  May import from models/,
    domain/, exceptions, services/base.py and the pure money_engines
    invoice_status rule.

Invariants enforced:
    - An invoice and its items are written in the caller's transaction, so
      they are persisted together or not at all.
    - Invoice numbers default to INV-{year}-{n:03d}, n being one more than
      the invoices already numbered for that year.
    - status is recomputed from total_amount and the full set of payments
      every time a payment is added or removed; never adjusted in place.

Failure modes:
    - InvalidRecordError for negative totals or non-positive payments.
    - InvoiceNotFoundError / ProjectNotFoundError for missing references.
    - StoreAccessError (at commit) on a duplicate invoice number.
"""

import datetime as dt
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from money_kernel.domain.clock import Clock, SystemClock
from money_kernel.domain.records import InvoiceInfo, PaymentInfo
from money_kernel.exceptions import InvoiceNotFoundError, ProjectNotFoundError
from money_kernel.logging_config import get_logger
from money_kernel.models.invoice import Invoice, InvoiceItem, InvoicePayment
from money_kernel.models.project import Project
from money_kernel.services.base import (
    BaseService,
    require_id,
    require_non_negative,
    require_positive,
    require_text,
)
from money_engines.invoice_status import derive_invoice_status

logger = get_logger("services.invoice")


def validated_line_items(record_type: str, items: Iterable[Mapping[str, Any]]) -> list[dict]:
    """Normalize line item mappings (description, quantity, rate, amount, ...)."""
    lines = []
    for item in items:
        quantity = require_non_negative(record_type, "quantity", item.get("quantity", 1))
        rate = require_non_negative(record_type, "rate", item.get("rate", 0))
        amount = item.get("amount")
        lines.append(
            {
                "description": require_text(record_type, "description", item.get("description")),
                "quantity": quantity,
                "rate": rate,
                "amount": (
                    quantity * rate
                    if amount is None
                    else require_non_negative(record_type, "amount", amount)
                ),
                "timeline": item.get("timeline"),
                "features": item.get("features"),
            }
        )
    return lines


def next_document_number(session: Session, column, prefix: str, year: int) -> str:
    """``{prefix}-{year}-{n:03d}`` with n = documents already numbered that year + 1."""
    stem = f"{prefix}-{year}-"
    count = session.execute(
        select(func.count()).where(column.like(f"{stem}%"))
    ).scalar_one()
    return f"{stem}{count + 1:03d}"


class InvoiceService(BaseService):
    """
    Invoice writes.

    Contract:
        create_invoice(...) -> InvoiceInfo with items; status derived (Unpaid
            unless the total is zero).
        record_payment(...) -> PaymentInfo; invoice status re-derived.
        delete_payment(payment_id) -> None; invoice status re-derived.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def create_invoice(
        self,
        project_id: UUID,
        issue_date: dt.date,
        total_amount: Decimal | str | int,
        items: Iterable[Mapping[str, Any]] = (),
        invoice_number: str | None = None,
        due_date: dt.date | None = None,
        stage: str | None = None,
        discount: Decimal | str | int = Decimal("0"),
        tax_percentage: Decimal | str | int = Decimal("0"),
        project_reference: str | None = None,
        notes: str | None = None,
    ) -> InvoiceInfo:
        total = require_non_negative("invoice", "total_amount", total_amount)
        discount = require_non_negative("invoice", "discount", discount)
        tax_percentage = require_non_negative("invoice", "tax_percentage", tax_percentage)
        lines = validated_line_items("invoice_item", items)

        if self.session.get(Project, project_id) is None:
            raise ProjectNotFoundError(str(project_id))

        if not invoice_number or not invoice_number.strip():
            invoice_number = next_document_number(
                self.session, Invoice.invoice_number, "INV", self._clock.today().year
            )

        invoice = Invoice(
            project_id=project_id,
            invoice_number=invoice_number.strip(),
            issue_date=issue_date,
            due_date=due_date,
            total_amount=total,
            status=derive_invoice_status(total, ()).value,
            stage=stage,
            discount=discount,
            tax_percentage=tax_percentage,
            project_reference=project_reference,
            notes=notes,
        )
        for line in lines:
            invoice.items.append(
                InvoiceItem(
                    description=line["description"],
                    quantity=line["quantity"],
                    rate=line["rate"],
                    amount=line["amount"],
                )
            )
        self.session.add(invoice)
        self.session.flush()
        logger.info(
            "invoice_created",
            extra={
                "invoice_id": str(invoice.id),
                "invoice_number": invoice.invoice_number,
                "item_count": len(lines),
            },
        )
        return invoice.to_dto()

    def record_payment(
        self,
        invoice_id: UUID,
        amount_paid: Decimal | str | int,
        payment_date: dt.date,
        payment_mode: str,
        transaction_reference: str | None = None,
        transaction_id: UUID | None = None,
    ) -> PaymentInfo:
        amount = require_positive("invoice_payment", "amount_paid", amount_paid)
        mode = require_text("invoice_payment", "payment_mode", payment_mode)

        invoice = self._load(Invoice, invoice_id, InvoiceNotFoundError)
        payment = InvoicePayment(
            amount_paid=amount,
            payment_date=payment_date,
            payment_mode=mode,
            transaction_reference=transaction_reference,
            transaction_id=transaction_id,
        )
        invoice.payments.append(payment)
        self._refresh_status(invoice)
        self.session.flush()
        logger.info(
            "invoice_payment_recorded",
            extra={
                "invoice_id": str(invoice.id),
                "amount_paid": str(amount),
                "status": invoice.status,
            },
        )
        return payment.to_dto()

    def delete_payment(self, payment_id: UUID | None) -> None:
        payment_id = require_id("InvoicePayment", payment_id)
        payment = self._load(InvoicePayment, payment_id)
        invoice = self._load(Invoice, payment.invoice_id, InvoiceNotFoundError)
        invoice.payments.remove(payment)
        self._refresh_status(invoice)
        self.session.flush()

    @staticmethod
    def _refresh_status(invoice: Invoice) -> None:
        status = derive_invoice_status(
            invoice.total_amount,
            [payment.amount_paid for payment in invoice.payments],
        )
        invoice.status = status.value
