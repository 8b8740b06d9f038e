"""
Service layer for accounts.

Accounts hold no balance column; this service only maintains the account
definition (name, type, opening balance).  Balances are derived by
AccountLedger.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update

from money_kernel.domain.records import AccountInfo, AccountType
from money_kernel.exceptions import AccountNotFoundError, InvalidRecordError
from money_kernel.logging_config import get_logger
from money_kernel.models.account import Account
from money_kernel.models.investment import Investment
from money_kernel.models.transaction import Transaction
from money_kernel.services.base import (
    BaseService,
    coerce_decimal,
    coerce_enum,
    require_id,
    require_text,
)

logger = get_logger("services.account")


class AccountService(BaseService):
    """
    Create, update and delete accounts.

    Guarantees:
        - Returns AccountInfo DTOs, never ORM rows.
        - Deleting an account detaches it from transactions (the side that
          referenced it becomes null) and refuses while investments are
          still held on it.
    """

    def create_account(
        self,
        name: str,
        account_type: AccountType | str,
        opening_balance: Decimal | str | int = Decimal("0"),
        notes: str | None = None,
    ) -> AccountInfo:
        name = require_text("account", "name", name)
        kind = coerce_enum("account", "account_type", AccountType, account_type)
        opening = coerce_decimal("account", "opening_balance", opening_balance)

        account = Account(
            name=name,
            account_type=kind.value,
            opening_balance=opening,
            notes=notes,
        )
        self.session.add(account)
        self.session.flush()
        logger.info(
            "account_created",
            extra={"account_id": str(account.id), "account_type": kind.value},
        )
        return account.to_dto()

    def update_account(
        self,
        account_id: UUID | None,
        name: str,
        account_type: AccountType | str,
        opening_balance: Decimal | str | int,
        notes: str | None = None,
    ) -> AccountInfo:
        account_id = require_id("Account", account_id)
        name = require_text("account", "name", name)
        kind = coerce_enum("account", "account_type", AccountType, account_type)
        opening = coerce_decimal("account", "opening_balance", opening_balance)

        account = self._load(Account, account_id, AccountNotFoundError)
        account.name = name
        account.account_type = kind.value
        account.opening_balance = opening
        account.notes = notes
        self.session.flush()
        return account.to_dto()

    def delete_account(self, account_id: UUID | None) -> None:
        account_id = require_id("Account", account_id)
        account = self._load(Account, account_id, AccountNotFoundError)

        held = self.session.scalars(
            select(Investment.id).where(Investment.account_id == account_id).limit(1)
        ).first()
        if held is not None:
            raise InvalidRecordError("account", "id", "account still holds investments")

        self.session.execute(
            update(Transaction)
            .where(Transaction.from_account_id == account_id)
            .values(from_account_id=None)
        )
        self.session.execute(
            update(Transaction)
            .where(Transaction.to_account_id == account_id)
            .values(to_account_id=None)
        )
        self.session.delete(account)
        self.session.flush()
        logger.info("account_deleted", extra={"account_id": str(account_id)})
