"""
Module: money_kernel.models.company_setting
Responsibility: Opaque string-keyed settings store (company name, address,
    bank details, invoice footer...).  The kernel never interprets values.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from money_kernel.db.base import TrackedBase


class CompanySetting(TrackedBase):
    __tablename__ = "company_settings"

    __table_args__ = (UniqueConstraint("key", name="uq_company_setting_key"),)

    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<CompanySetting {self.key}>"
