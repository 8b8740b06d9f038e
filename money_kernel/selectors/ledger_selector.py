"""
Module: money_kernel.selectors.ledger_selector
Responsibility: Read-only account balance queries.  The ledger is a derived
    view over transactions -- there is no stored balance anywhere.  Every
    balance is opening_balance + incoming - outgoing, computed from grouped
    SQL sums at query time.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/, selectors/base.py and the pure money_engines.ledger helpers.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - No stored balances.
    - Set-based bulk balances: balances() runs one grouped query for incoming
      sums and one for outgoing sums, regardless of transaction count, and
      each account's figure equals its single-account balance().
    - Date-bounded balances include transactions dated on or before the
      cutoff; a period's opening balance uses the day before the period.
    - Transactions with a null account side contribute nothing to that side.

Failure modes:
    - AccountNotFoundError from single-account methods for unknown ids.
    - Returns the opening balance when an account has no transactions.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from money_kernel.domain.records import AccountType
from money_kernel.exceptions import AccountNotFoundError
from money_kernel.models.account import Account
from money_kernel.models.investment import Investment, InvestmentLot
from money_kernel.models.transaction import Transaction
from money_kernel.selectors.base import ZERO, BaseSelector, as_decimal
from money_engines.ledger import (
    AccountBalance,
    PeriodBalance,
    PlatformBalance,
    compute_balance,
    day_before,
)


@dataclass(frozen=True)
class PeriodBalanceReport:
    """Per-account opening/current balances for a window, with totals."""

    accounts: tuple[PeriodBalance, ...]
    total_opening_balance: Decimal
    total_current_balance: Decimal


class AccountLedger(BaseSelector):
    """
    Account balance derivation.

    Contract:
        balance(account_id, as_of_date=None) -> Decimal
        balances(as_of_date=None) -> list[AccountBalance], ordered by name
        balance_as_of(account_id, day) -> Decimal
        opening_balance_for_period(account_id, period_start) -> Decimal

    Guarantees:
        - All balance methods return Decimal (never float).
        - Repeated calls without intervening writes return identical results.
    """

    # ------------------------------------------------------------------
    # Flow sums
    # ------------------------------------------------------------------

    def _flow_sums(
        self,
        side_column,
        *,
        up_to: date | None = None,
        account_id: UUID | None = None,
    ) -> dict[UUID, Decimal]:
        """Grouped Σ amount per account on one side of the flow."""
        query = (
            select(side_column, func.sum(Transaction.amount).label("total"))
            .where(side_column.is_not(None))
            .group_by(side_column)
        )
        if up_to is not None:
            query = query.where(Transaction.date <= up_to)
        if account_id is not None:
            query = query.where(side_column == account_id)

        return {
            row[0]: as_decimal(row.total)
            for row in self.session.execute(query).all()
        }

    def incoming(self, *, up_to: date | None = None, account_id: UUID | None = None) -> dict[UUID, Decimal]:
        return self._flow_sums(Transaction.to_account_id, up_to=up_to, account_id=account_id)

    def outgoing(self, *, up_to: date | None = None, account_id: UUID | None = None) -> dict[UUID, Decimal]:
        return self._flow_sums(Transaction.from_account_id, up_to=up_to, account_id=account_id)

    def _get_account(self, account_id: UUID) -> Account:
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        return account

    # ------------------------------------------------------------------
    # Single-account balances
    # ------------------------------------------------------------------

    def balance(self, account_id: UUID, as_of_date: date | None = None) -> Decimal:
        """
        Current (or date-bounded) balance of one account.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        account = self._get_account(account_id)
        incoming = self.incoming(up_to=as_of_date, account_id=account_id)
        outgoing = self.outgoing(up_to=as_of_date, account_id=account_id)
        return compute_balance(
            account.opening_balance,
            incoming.get(account_id, ZERO),
            outgoing.get(account_id, ZERO),
        )

    def balance_as_of(self, account_id: UUID, as_of: date) -> Decimal:
        return self.balance(account_id, as_of_date=as_of)

    def opening_balance_for_period(self, account_id: UUID, period_start: date) -> Decimal:
        """Balance at the close of the day before ``period_start``."""
        return self.balance_as_of(account_id, day_before(period_start))

    # ------------------------------------------------------------------
    # Bulk balances
    # ------------------------------------------------------------------

    def balances(self, as_of_date: date | None = None) -> list[AccountBalance]:
        """
        Balances of every account from two grouped queries.

        Postconditions:
            One AccountBalance per account, ordered by account name.
        """
        incoming = self.incoming(up_to=as_of_date)
        outgoing = self.outgoing(up_to=as_of_date)
        accounts = self.session.scalars(select(Account).order_by(Account.name, Account.id)).all()

        return [
            AccountBalance(
                account_id=account.id,
                account_name=account.name,
                account_type=AccountType(account.account_type),
                opening_balance=account.opening_balance,
                incoming=incoming.get(account.id, ZERO),
                outgoing=outgoing.get(account.id, ZERO),
            )
            for account in accounts
        ]

    def period_balances(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PeriodBalanceReport:
        """
        Opening balance (before start_date) and current balance (up to
        end_date, or all time) for every account.

        Without a start_date the opening figure is the account's own
        opening_balance.
        """
        opening_cutoff = day_before(start_date) if start_date is not None else None
        opening_rows = (
            {row.account_id: row.balance for row in self.balances(opening_cutoff)}
            if opening_cutoff is not None
            else None
        )
        current_rows = self.balances(end_date)

        period_rows = []
        for row in current_rows:
            opening = (
                opening_rows[row.account_id]
                if opening_rows is not None
                else row.opening_balance
            )
            period_rows.append(
                PeriodBalance(
                    account_id=row.account_id,
                    account_name=row.account_name,
                    account_type=row.account_type,
                    opening=opening,
                    current=row.balance,
                )
            )

        return PeriodBalanceReport(
            accounts=tuple(period_rows),
            total_opening_balance=sum((r.opening for r in period_rows), ZERO),
            total_current_balance=sum((r.current for r in period_rows), ZERO),
        )

    def platform_balances(self) -> list[PlatformBalance]:
        """
        Uninvested cash on each investment-type account.

        deployed = Σ lot_outlay(lot) over all lots of investments held on the
        account, buys and sells alike.  The SQL sum below is the set-based form
        of money_engines.ledger.lot_outlay.
        """
        deployed_query = (
            select(
                Investment.account_id,
                func.sum(
                    InvestmentLot.quantity * InvestmentLot.price_per_unit
                    + InvestmentLot.charges
                ).label("deployed"),
            )
            .select_from(Investment)
            .join(InvestmentLot, InvestmentLot.investment_id == Investment.id)
            .group_by(Investment.account_id)
        )
        deployed = {
            row.account_id: as_decimal(row.deployed)
            for row in self.session.execute(deployed_query).all()
        }

        return [
            PlatformBalance(
                account_id=row.account_id,
                account_name=row.account_name,
                ledger_balance=row.balance,
                deployed=deployed.get(row.account_id, ZERO),
            )
            for row in self.balances()
            if row.account_type == AccountType.INVESTMENT
        ]
