"""
Module: money_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the read side of the kernel, deriving balances, rollups and record
    listings from the stored rows without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses or Decimals,
      NOT raw ORM model instances.
    - Session ownership: Selectors do NOT create or manage their own sessions;
      the caller owns the session and its transaction scope.
    - Null-safe sums: an aggregate over no rows reads as Decimal("0").

Failure modes:
    - NotFoundError subclasses when a selector is asked about a specific
      record that does not exist.
"""

from abc import ABC
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

ZERO = Decimal("0")


def as_decimal(value: Any) -> Decimal:
    """Normalize an aggregate result (None, int, float or Decimal) to Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
