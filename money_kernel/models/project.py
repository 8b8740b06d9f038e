"""
Module: money_kernel.models.project
Responsibility: ORM persistence for clients, the projects done for them, and
    the time logged against each project.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Project.end_date is the deadline used by income recognition; a null
      end_date means the project never recognises expected income.
    - Project.expected_amount may be null; recognition treats it as 0.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from money_kernel.db.base import TrackedBase, UUIDString
from money_kernel.domain.records import (
    ClientInfo,
    ClientStatus,
    ProjectInfo,
    TimeLogInfo,
)


class Client(TrackedBase):
    """A customer billed through projects, invoices and quotations."""

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ClientStatus.ACTIVE.value,
    )

    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gst: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Client {self.name} ({self.status})>"

    def to_dto(self) -> ClientInfo:
        return ClientInfo(
            id=self.id,
            name=self.name,
            status=ClientStatus(self.status),
            business_name=self.business_name,
            address=self.address,
            contact_number=self.contact_number,
            email=self.email,
            gst=self.gst,
            notes=self.notes,
        )


class Project(TrackedBase):
    """
    Billable work with an expected total and an optional deadline.

    Contract:
        Income transactions carrying this project's id count as received
        income for recognition and project reports.
    """

    __tablename__ = "projects"

    __table_args__ = (Index("idx_project_client", "client_id"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    client_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("clients.id"),
        nullable=True,
    )

    expected_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    daily_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Project {self.name}>"

    def to_dto(self) -> ProjectInfo:
        """Convert ORM model to frozen domain DTO."""
        return ProjectInfo(
            id=self.id,
            name=self.name,
            client_id=self.client_id,
            expected_amount=self.expected_amount,
            daily_rate=self.daily_rate,
            start_date=self.start_date,
            end_date=self.end_date,
            notes=self.notes,
        )


class TimeLog(TrackedBase):
    """Hours worked on a project on a day."""

    __tablename__ = "time_logs"

    __table_args__ = (Index("idx_time_log_project", "project_id"),)

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    date: Mapped[dt.date] = mapped_column("date", Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(nullable=False)
    task: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self) -> TimeLogInfo:
        return TimeLogInfo(
            id=self.id,
            project_id=self.project_id,
            date=self.date,
            hours=self.hours,
            task=self.task,
        )
