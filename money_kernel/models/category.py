"""
Module: money_kernel.models.category
Responsibility: ORM persistence for transaction categories and free-form tags,
    plus the transaction_tags association table.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Category.kind and Transaction.direction are independent.  Report
      rollups filter by direction; investment rollups filter by
      is_investment.
    - Tag names are unique (uq_tag_name).
"""

from sqlalchemy import Boolean, Column, ForeignKey, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from money_kernel.db.base import Base, TrackedBase, UUIDString
from money_kernel.domain.records import CategoryInfo, CategoryKind, TagInfo

transaction_tags = Table(
    "transaction_tags",
    Base.metadata,
    Column(
        "transaction_id",
        UUIDString(),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        UUIDString(),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Category(TrackedBase):
    """
    Classification for transactions.

    Guarantees:
        - kind is "income" or "expense".
        - is_investment marks categories whose transactions count as
          investment contributions in budget rollups, whatever their
          direction.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    kind: Mapped[str] = mapped_column(String(20), nullable=False)

    is_investment: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Category {self.name} ({self.kind})>"

    def to_dto(self) -> CategoryInfo:
        """Convert ORM model to frozen domain DTO."""
        return CategoryInfo(
            id=self.id,
            name=self.name,
            kind=CategoryKind(self.kind),
            is_investment=bool(self.is_investment),
            notes=self.notes,
        )


class Tag(TrackedBase):
    """Free-form label attachable to many transactions."""

    __tablename__ = "tags"

    __table_args__ = (UniqueConstraint("name", name="uq_tag_name"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"

    def to_dto(self) -> TagInfo:
        return TagInfo(id=self.id, name=self.name)
