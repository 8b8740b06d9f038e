"""
BaseService -- abstract base for all record services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write service in the kernel.  Concrete services receive a
    SQLAlchemy ``Session`` and persist through ``session.flush()`` --
    never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell over the ORM models.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (``session_scope()`` via the command surface, or a test harness)
      owns commit/rollback, so multi-row writes such as an invoice with
      its items are atomic.
    - Validation first: request values are checked before the session is
      touched, so a rejected request performs no store access.

Failure modes:
    - ValidationError subclasses for rejected requests.
    - NotFoundError subclasses when an update targets a missing row.
"""

from abc import ABC
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from money_kernel.db.base import Base
from money_kernel.exceptions import (
    InvalidRecordError,
    MissingIdentifierError,
    RecordNotFoundError,
)

ModelType = TypeVar("ModelType", bound=Base)
EnumType = TypeVar("EnumType", bound=Enum)


def require_id(record_type: str, record_id: UUID | None) -> UUID:
    """Reject update/delete requests that carry no identifier."""
    if record_id is None:
        raise MissingIdentifierError(record_type)
    return record_id


def coerce_enum(record_type: str, field: str, enum_cls: type[EnumType], value: Any) -> EnumType:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRecordError(record_type, field, f"'{value}' is not one of {allowed}")


def coerce_decimal(record_type: str, field: str, value: Any) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        raise InvalidRecordError(record_type, field, f"'{value}' is not a number")


def require_non_negative(record_type: str, field: str, value: Any) -> Decimal:
    amount = coerce_decimal(record_type, field, value)
    if amount < 0:
        raise InvalidRecordError(record_type, field, "must not be negative")
    return amount


def require_positive(record_type: str, field: str, value: Any) -> Decimal:
    amount = coerce_decimal(record_type, field, value)
    if amount <= 0:
        raise InvalidRecordError(record_type, field, "must be greater than zero")
    return amount


def require_text(record_type: str, field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise InvalidRecordError(record_type, field, "must not be empty")
    return value.strip()


class BaseService(ABC):
    """
    Abstract base class for all record services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.

    Non-goals:
        - Does NOT provide listing queries -- those belong in
          ``money_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    def _load(self, model: type[ModelType], record_id: UUID, not_found=None) -> ModelType:
        """Fetch a row by id or raise the given (or generic) NotFoundError."""
        row = self.session.get(model, record_id)
        if row is None:
            if not_found is not None:
                raise not_found(str(record_id))
            raise RecordNotFoundError(model.__name__, str(record_id))
        return row

    def _delete(self, model: type[ModelType], record_id: UUID, not_found=None) -> None:
        self.session.delete(self._load(model, record_id, not_found))
        self.session.flush()
