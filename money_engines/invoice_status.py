"""
Module: money_engines.invoice_status
Responsibility:
    Derive an invoice's payment status from its total and the payments
    recorded against it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Status is recomputed from the full payment total every time; it is
      never patched from the previous status.
    - Paid if paid >= total; Partially Paid if 0 < paid < total; otherwise
      Unpaid.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from money_kernel.domain.records import InvoiceStatus

ZERO = Decimal("0")


def derive_invoice_status(total_amount: Decimal, payments: Iterable[Decimal]) -> InvoiceStatus:
    """Status implied by the sum of ``payments`` against ``total_amount``."""
    paid = sum(payments, ZERO)
    if paid >= total_amount:
        return InvoiceStatus.PAID
    if paid > ZERO:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.UNPAID
