"""
Module: money_kernel.models.transaction
Responsibility: ORM persistence for transactions -- the monetary event log
    every balance, rollup and recognition schedule is derived from.
Architecture position: Kernel > Models.  May import from db/base.py,
    other models, and domain/ only.

Invariants enforced:
    - amount >= 0; the sign of a flow comes from which account side it is on.
    - from_account_id / to_account_id may each be null; a null side has no
      ledger effect.  By convention income fills to_account_id, expense
      fills from_account_id and transfer fills both.
    - Indexes on date, direction, project_id and investment_id back the
      grouped aggregate queries in the selectors.

Failure modes:
    - InvalidRecordError from TransactionService for negative amounts or an
      unknown direction (raised before insert).
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import Direction, TransactionRecord
from money_kernel.models.category import Tag, transaction_tags


class Transaction(TrackedBase):
    """
    A single dated flow of money.

    Contract:
        The ledger reads this row as: +amount on to_account, -amount on
        from_account.  Direction decides which report buckets include it.
    """

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_date", "date"),
        Index("idx_transaction_direction", "direction"),
        Index("idx_transaction_project", "project_id"),
        Index("idx_transaction_investment", "investment_id"),
    )

    date: Mapped[dt.date] = mapped_column("date", Date, nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    direction: Mapped[str] = mapped_column(String(20), nullable=False)

    from_account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    to_account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    category_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("categories.id"),
        nullable=False,
    )

    client_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("clients.id"),
        nullable=True,
    )

    project_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=True,
    )

    investment_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("investments.id"),
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    tags: Mapped[list[Tag]] = relationship(
        secondary=transaction_tags,
        lazy="selectin",
        order_by=Tag.name,
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.date} {self.direction} {self.amount}>"

    def to_dto(self) -> TransactionRecord:
        """Convert ORM model to frozen domain DTO."""
        return TransactionRecord(
            id=self.id,
            date=self.date,
            amount=self.amount,
            direction=Direction(self.direction),
            category_id=self.category_id,
            from_account_id=self.from_account_id,
            to_account_id=self.to_account_id,
            client_id=self.client_id,
            project_id=self.project_id,
            investment_id=self.investment_id,
            notes=self.notes,
            tag_ids=tuple(tag.id for tag in self.tags),
        )
