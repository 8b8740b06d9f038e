"""
Service layer for categories and tags.

Categories classify transactions; ``kind`` (income/expense) and
``is_investment`` drive budget lines, while report rollups filter by the
transaction's own direction.  Tags are free-form labels with unique names.
"""

from uuid import UUID

from sqlalchemy import delete, select

from money_kernel.domain.records import CategoryInfo, CategoryKind, TagInfo
from money_kernel.exceptions import InvalidRecordError
from money_kernel.models.budget import Budget
from money_kernel.models.category import Category, Tag, transaction_tags
from money_kernel.models.transaction import Transaction
from money_kernel.services.base import BaseService, coerce_enum, require_id, require_text


class CategoryService(BaseService):
    """Category maintenance."""

    def create_category(
        self,
        name: str,
        kind: CategoryKind | str,
        is_investment: bool = False,
        notes: str | None = None,
    ) -> CategoryInfo:
        category = Category(
            name=require_text("category", "name", name),
            kind=coerce_enum("category", "kind", CategoryKind, kind).value,
            is_investment=bool(is_investment),
            notes=notes,
        )
        self.session.add(category)
        self.session.flush()
        return category.to_dto()

    def update_category(
        self,
        category_id: UUID | None,
        name: str,
        kind: CategoryKind | str,
        is_investment: bool = False,
        notes: str | None = None,
    ) -> CategoryInfo:
        category_id = require_id("Category", category_id)
        name = require_text("category", "name", name)
        kind = coerce_enum("category", "kind", CategoryKind, kind)

        category = self._load(Category, category_id)
        category.name = name
        category.kind = kind.value
        category.is_investment = bool(is_investment)
        category.notes = notes
        self.session.flush()
        return category.to_dto()

    def delete_category(self, category_id: UUID | None) -> None:
        """
        Delete a category and its budgets.

        Raises:
            InvalidRecordError: If any transaction is still filed under it.
        """
        category_id = require_id("Category", category_id)
        category = self._load(Category, category_id)
        in_use = self.session.scalars(
            select(Transaction.id).where(Transaction.category_id == category_id).limit(1)
        ).first()
        if in_use is not None:
            raise InvalidRecordError("category", "id", "category still has transactions")
        self.session.execute(delete(Budget).where(Budget.category_id == category_id))
        self.session.delete(category)
        self.session.flush()


class TagService(BaseService):
    """Tag maintenance.  Names are unique and matched exactly."""

    def create_tag(self, name: str) -> TagInfo:
        name = require_text("tag", "name", name)
        existing = self.session.scalars(select(Tag).where(Tag.name == name)).first()
        if existing is not None:
            raise InvalidRecordError("tag", "name", f"'{name}' already exists")

        tag = Tag(name=name)
        self.session.add(tag)
        self.session.flush()
        return tag.to_dto()

    def rename_tag(self, tag_id: UUID | None, name: str) -> TagInfo:
        tag_id = require_id("Tag", tag_id)
        name = require_text("tag", "name", name)
        tag = self._load(Tag, tag_id)
        tag.name = name
        self.session.flush()
        return tag.to_dto()

    def delete_tag(self, tag_id: UUID | None) -> None:
        tag_id = require_id("Tag", tag_id)
        tag = self._load(Tag, tag_id)
        self.session.execute(delete(transaction_tags).where(transaction_tags.c.tag_id == tag_id))
        self.session.delete(tag)
        self.session.flush()
