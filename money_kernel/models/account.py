"""
Module: money_kernel.models.account
Responsibility: ORM persistence for money accounts (bank, cash, investment
    platform, other) -- the endpoints of every transaction flow.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.  MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - No stored balance.  The only monetary column is opening_balance; the
      current balance is always derived by AccountLedger from transactions.
    - account_type is one of AccountType's values (validated by
      AccountService before insert).

Failure modes:
    - AccountNotFoundError when a ledger query references a missing account.
"""

from decimal import Decimal

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from money_kernel.db.base import TrackedBase
from money_kernel.domain.records import AccountInfo, AccountType


class Account(TrackedBase):
    """
    A place money sits.

    Contract:
        opening_balance is signed and is the balance before the first
        transaction.  Every later balance is opening_balance plus incoming
        minus outgoing transfers, incomes and expenses.

    Non-goals:
        - Does not cache or store any running balance.
    """

    __tablename__ = "accounts"

    __table_args__ = (Index("idx_account_type", "account_type"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[str] = mapped_column(String(20), nullable=False)

    opening_balance: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.account_type})>"

    def to_dto(self) -> AccountInfo:
        """Convert ORM model to frozen domain DTO."""
        return AccountInfo(
            id=self.id,
            name=self.name,
            account_type=AccountType(self.account_type),
            opening_balance=self.opening_balance,
            notes=self.notes,
        )
