"""
Module: money_engines.ledger
Responsibility:
    Balance arithmetic for money accounts.  A balance is never stored; it is
    opening_balance + incoming - outgoing, where incoming sums transactions
    whose to_account is the account and outgoing sums those whose
    from_account is the account.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import money_kernel/domain.  The set-based SQL sums that feed
    these functions live in money_kernel.selectors.ledger_selector.

Invariants enforced:
    - Decimal-only arithmetic.
    - A date-bounded balance counts only transactions dated on or before
      the cutoff; the opening balance of a period is the balance at the
      end of the day before the period starts.
    - A null from/to account side contributes nothing.

Failure modes:
    (none -- empty inputs yield the opening balance)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from money_kernel.domain.records import AccountType, TransactionRecord
from money_engines.tracer import traced_engine

ZERO = Decimal("0")


@dataclass(frozen=True)
class AccountBalance:
    """
    Derived balance of one account.

    Guarantees:
        - balance == opening_balance + incoming - outgoing.
    """

    account_id: UUID
    account_name: str
    account_type: AccountType
    opening_balance: Decimal
    incoming: Decimal
    outgoing: Decimal

    @property
    def balance(self) -> Decimal:
        return compute_balance(self.opening_balance, self.incoming, self.outgoing)


@dataclass(frozen=True)
class PeriodBalance:
    """Balance at the start of a window and at its end (or now)."""

    account_id: UUID
    account_name: str
    account_type: AccountType
    opening: Decimal
    current: Decimal


@dataclass(frozen=True)
class PlatformBalance:
    """
    Cash left on an investment platform account.

    ``deployed`` is what the lots on this account cost (quantity x price +
    charges, buys and sells alike); ``available`` is the ledger balance
    minus that.
    """

    account_id: UUID
    account_name: str
    ledger_balance: Decimal
    deployed: Decimal

    @property
    def available(self) -> Decimal:
        return self.ledger_balance - self.deployed


def compute_balance(opening_balance: Decimal, incoming: Decimal, outgoing: Decimal) -> Decimal:
    """opening + incoming - outgoing, with None sums read as zero."""
    return (opening_balance or ZERO) + (incoming or ZERO) - (outgoing or ZERO)


def day_before(period_start: date) -> date:
    """Cutoff used for a period's opening balance."""
    return period_start - timedelta(days=1)


@traced_engine(
    "ledger",
    "1.0",
    fingerprint_fields=("account_id", "opening_balance", "as_of_date"),
)
def balance_from_transactions(
    *,
    account_id: UUID,
    opening_balance: Decimal,
    transactions: Iterable[TransactionRecord],
    as_of_date: date | None = None,
) -> Decimal:
    """
    Balance of one account from an in-memory transaction list.

    Used to cross-check the SQL aggregation and by callers that already
    hold the records.  Transactions dated after ``as_of_date`` are skipped.
    """
    incoming = ZERO
    outgoing = ZERO
    for txn in transactions:
        if as_of_date is not None and txn.date > as_of_date:
            continue
        if txn.to_account_id == account_id:
            incoming += txn.amount
        if txn.from_account_id == account_id:
            outgoing += txn.amount
    return compute_balance(opening_balance, incoming, outgoing)


def lot_outlay(quantity: Decimal, price_per_unit: Decimal, charges: Decimal) -> Decimal:
    """
    Cash a lot moved: quantity x price + charges.

    The single definition of a lot's outlay.  Valuation folds it over buy
    lots; AccountLedger.platform_balances evaluates the same expression as a
    grouped SQL sum and must stay in step with it.
    """
    return quantity * price_per_unit + (charges or ZERO)
