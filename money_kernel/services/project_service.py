"""
Service layer for clients, projects and time logs.

R3-style: public methods return ClientInfo / ProjectInfo / TimeLogInfo DTOs.
Received and spent amounts are never stored on a project; they are derived
from transactions by RecordSelector.project_overviews().
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from sqlalchemy import update

from money_kernel.domain.records import ClientInfo, ClientStatus, ProjectInfo, TimeLogInfo
from money_kernel.exceptions import InvalidRecordError, ProjectNotFoundError
from money_kernel.models.project import Client, Project, TimeLog
from money_kernel.models.transaction import Transaction
from money_kernel.services.base import (
    BaseService,
    coerce_enum,
    require_id,
    require_non_negative,
    require_positive,
    require_text,
)


def _optional_amount(record_type: str, field: str, value) -> Decimal | None:
    if value is None or value == "":
        return None
    return require_non_negative(record_type, field, value)


class ClientService(BaseService):
    """Client maintenance."""

    _CONTACT_FIELDS = ("business_name", "address", "contact_number", "email", "gst", "notes")

    def create_client(
        self,
        name: str,
        status: ClientStatus | str = ClientStatus.ACTIVE,
        **contact: str | None,
    ) -> ClientInfo:
        name = require_text("client", "name", name)
        status = coerce_enum("client", "status", ClientStatus, status)
        self._check_contact(contact)

        client = Client(name=name, status=status.value, **contact)
        self.session.add(client)
        self.session.flush()
        return client.to_dto()

    def update_client(
        self,
        client_id: UUID | None,
        name: str,
        status: ClientStatus | str = ClientStatus.ACTIVE,
        **contact: str | None,
    ) -> ClientInfo:
        client_id = require_id("Client", client_id)
        name = require_text("client", "name", name)
        status = coerce_enum("client", "status", ClientStatus, status)
        self._check_contact(contact)

        client = self._load(Client, client_id)
        client.name = name
        client.status = status.value
        for field in self._CONTACT_FIELDS:
            setattr(client, field, contact.get(field))
        self.session.flush()
        return client.to_dto()

    def delete_client(self, client_id: UUID | None) -> None:
        client_id = require_id("Client", client_id)
        client = self._load(Client, client_id)
        self.session.execute(
            update(Transaction).where(Transaction.client_id == client_id).values(client_id=None)
        )
        self.session.execute(
            update(Project).where(Project.client_id == client_id).values(client_id=None)
        )
        self.session.delete(client)
        self.session.flush()

    def _check_contact(self, contact: dict) -> None:
        unknown = sorted(set(contact) - set(self._CONTACT_FIELDS))
        if unknown:
            raise InvalidRecordError("client", unknown[0], "unknown field")


class ProjectService(BaseService):
    """Project and time log maintenance."""

    def create_project(
        self,
        name: str,
        client_id: UUID | None = None,
        expected_amount: Decimal | str | None = None,
        daily_rate: Decimal | str | None = None,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
        notes: str | None = None,
    ) -> ProjectInfo:
        project = Project(name=require_text("project", "name", name))
        self._apply(project, client_id, expected_amount, daily_rate, start_date, end_date, notes)
        self.session.add(project)
        self.session.flush()
        return project.to_dto()

    def update_project(
        self,
        project_id: UUID | None,
        name: str,
        client_id: UUID | None = None,
        expected_amount: Decimal | str | None = None,
        daily_rate: Decimal | str | None = None,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
        notes: str | None = None,
    ) -> ProjectInfo:
        project_id = require_id("Project", project_id)
        name = require_text("project", "name", name)
        _check_dates(start_date, end_date)

        project = self._load(Project, project_id, ProjectNotFoundError)
        project.name = name
        self._apply(project, client_id, expected_amount, daily_rate, start_date, end_date, notes)
        self.session.flush()
        return project.to_dto()

    def delete_project(self, project_id: UUID | None) -> None:
        project_id = require_id("Project", project_id)
        project = self._load(Project, project_id, ProjectNotFoundError)
        self.session.execute(
            update(Transaction).where(Transaction.project_id == project_id).values(project_id=None)
        )
        self.session.delete(project)
        self.session.flush()

    # Time logs

    def log_time(
        self,
        project_id: UUID,
        date: dt.date,
        hours: Decimal | str,
        task: str | None = None,
    ) -> TimeLogInfo:
        hours = require_positive("time_log", "hours", hours)
        self._load(Project, project_id, ProjectNotFoundError)

        entry = TimeLog(project_id=project_id, date=date, hours=hours, task=task)
        self.session.add(entry)
        self.session.flush()
        return entry.to_dto()

    def delete_time_log(self, time_log_id: UUID | None) -> None:
        self._delete(TimeLog, require_id("TimeLog", time_log_id))

    @staticmethod
    def _apply(project, client_id, expected_amount, daily_rate, start_date, end_date, notes):
        _check_dates(start_date, end_date)
        project.client_id = client_id
        project.expected_amount = _optional_amount("project", "expected_amount", expected_amount)
        project.daily_rate = _optional_amount("project", "daily_rate", daily_rate)
        project.start_date = start_date
        project.end_date = end_date
        project.notes = notes


def _check_dates(start_date: dt.date | None, end_date: dt.date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise InvalidRecordError("project", "end_date", "is before start_date")
