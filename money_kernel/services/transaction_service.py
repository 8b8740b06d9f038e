"""
Module: money_kernel.services.transaction_service
Responsibility: Create, update and delete transactions and their tag links.
Architecture position: Kernel > Services.  May import from models/,
    domain/, exceptions and services/base.py.

Invariants enforced:
    - amount >= 0 and direction in {income, expense, transfer}, checked
      before any store access.
    - Tags are replaced as a whole set on update.
    - No balance is written anywhere; every derived figure picks the change
      up on its next read.

Failure modes:
    - InvalidRecordError for a negative amount, unknown direction, or an
      unknown tag id.
    - RecordNotFoundError when the category does not exist.
"""

import datetime as dt
from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from money_kernel.domain.records import Direction, TransactionRecord
from money_kernel.exceptions import InvalidRecordError
from money_kernel.logging_config import get_logger
from money_kernel.models.category import Category, Tag
from money_kernel.models.transaction import Transaction
from money_kernel.services.base import (
    BaseService,
    coerce_enum,
    require_id,
    require_non_negative,
)

logger = get_logger("services.transaction")


class TransactionService(BaseService):
    """
    Transaction writes.

    Contract:
        Fields mirror TransactionRecord.  Account sides are optional; a null
        side has no ledger effect.
    """

    def create_transaction(
        self,
        date: dt.date,
        amount: Decimal | str | int,
        direction: Direction | str,
        category_id: UUID,
        from_account_id: UUID | None = None,
        to_account_id: UUID | None = None,
        client_id: UUID | None = None,
        project_id: UUID | None = None,
        investment_id: UUID | None = None,
        notes: str | None = None,
        tag_ids: Iterable[UUID] = (),
    ) -> TransactionRecord:
        amount = require_non_negative("transaction", "amount", amount)
        direction = coerce_enum("transaction", "direction", Direction, direction)
        tag_ids = tuple(tag_ids)

        txn = Transaction()
        self._apply(
            txn, date, amount, direction, category_id, from_account_id,
            to_account_id, client_id, project_id, investment_id, notes, tag_ids,
        )
        self.session.add(txn)
        self.session.flush()
        logger.info(
            "transaction_created",
            extra={
                "transaction_id": str(txn.id),
                "direction": direction.value,
                "amount": str(amount),
            },
        )
        return txn.to_dto()

    def update_transaction(
        self,
        transaction_id: UUID | None,
        date: dt.date,
        amount: Decimal | str | int,
        direction: Direction | str,
        category_id: UUID,
        from_account_id: UUID | None = None,
        to_account_id: UUID | None = None,
        client_id: UUID | None = None,
        project_id: UUID | None = None,
        investment_id: UUID | None = None,
        notes: str | None = None,
        tag_ids: Iterable[UUID] = (),
    ) -> TransactionRecord:
        transaction_id = require_id("Transaction", transaction_id)
        amount = require_non_negative("transaction", "amount", amount)
        direction = coerce_enum("transaction", "direction", Direction, direction)
        tag_ids = tuple(tag_ids)

        txn = self._load(Transaction, transaction_id)
        self._apply(
            txn, date, amount, direction, category_id, from_account_id,
            to_account_id, client_id, project_id, investment_id, notes, tag_ids,
        )
        self.session.flush()
        return txn.to_dto()

    def delete_transaction(self, transaction_id: UUID | None) -> None:
        transaction_id = require_id("Transaction", transaction_id)
        self._delete(Transaction, transaction_id)
        logger.info("transaction_deleted", extra={"transaction_id": str(transaction_id)})

    def _apply(
        self, txn, date, amount, direction, category_id, from_account_id,
        to_account_id, client_id, project_id, investment_id, notes, tag_ids,
    ) -> None:
        self._load(Category, category_id)
        txn.date = date
        txn.amount = amount
        txn.direction = direction.value
        txn.category_id = category_id
        txn.from_account_id = from_account_id
        txn.to_account_id = to_account_id
        txn.client_id = client_id
        txn.project_id = project_id
        txn.investment_id = investment_id
        txn.notes = notes
        txn.tags = self._resolve_tags(tag_ids)

    def _resolve_tags(self, tag_ids: tuple[UUID, ...]) -> list[Tag]:
        if not tag_ids:
            return []
        tags = self.session.scalars(select(Tag).where(Tag.id.in_(tag_ids))).all()
        missing = set(tag_ids) - {tag.id for tag in tags}
        if missing:
            raise InvalidRecordError("transaction", "tag_ids", f"unknown tag {sorted(map(str, missing))[0]}")
        return list(tags)
