"""
Record DTOs -- frozen snapshots of the source records.

Responsibility:
    Immutable value objects handed from the ORM layer (``Model.to_dto()``)
    and selectors to the pure engines and the command surface.  Engines
    compute exclusively from these; they never see a Session or an ORM row.

Architecture position:
    Kernel > Domain -- pure, zero I/O, no SQLAlchemy imports.

Invariants enforced:
    - Monetary fields are ``Decimal``; never float.
    - Enumerated fields carry the string values stored in the database, so
      an enum round-trips through a row unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class Direction(str, Enum):
    """How a transaction moves money; decides which report buckets see it."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class AccountType(str, Enum):
    BANK = "bank"
    CASH = "cash"
    INVESTMENT = "investment"
    OTHER = "other"


class CategoryKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class InvestmentType(str, Enum):
    """Instrument kinds.  Stored values match the short codes in use."""

    STOCK = "stock"
    MUTUAL_FUND = "mf"
    FIXED_DEPOSIT = "fd"
    RECURRING_DEPOSIT = "rd"
    OTHER = "other"

    @property
    def is_unitised(self) -> bool:
        """Valued as units x market price."""
        return self in (InvestmentType.STOCK, InvestmentType.MUTUAL_FUND)

    @property
    def is_deposit(self) -> bool:
        return self in (InvestmentType.FIXED_DEPOSIT, InvestmentType.RECURRING_DEPOSIT)


class LotType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class ClientStatus(str, Enum):
    ACTIVE = "active"
    PROSPECT = "prospect"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class InvoiceStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountInfo:
    id: UUID
    name: str
    account_type: AccountType
    opening_balance: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class CategoryInfo:
    id: UUID
    name: str
    kind: CategoryKind
    is_investment: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class TagInfo:
    id: UUID
    name: str


@dataclass(frozen=True)
class TransactionRecord:
    """
    One monetary event.

    A null ``from_account_id`` or ``to_account_id`` has no effect on that
    side of the ledger.
    """

    id: UUID
    date: date
    amount: Decimal
    direction: Direction
    category_id: UUID
    from_account_id: UUID | None = None
    to_account_id: UUID | None = None
    client_id: UUID | None = None
    project_id: UUID | None = None
    investment_id: UUID | None = None
    notes: str | None = None
    tag_ids: tuple[UUID, ...] = ()


# ---------------------------------------------------------------------------
# Investment records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvestmentInfo:
    id: UUID
    name: str
    investment_type: InvestmentType
    account_id: UUID
    units: Decimal | None = None
    avg_buy_price: Decimal | None = None
    current_price: Decimal | None = None
    principal_amount: Decimal | None = None
    interest_rate: Decimal | None = None
    maturity_date: date | None = None
    maturity_amount: Decimal | None = None
    monthly_deposit: Decimal | None = None
    principal_charges: Decimal | None = None
    provider_symbol: str | None = None
    last_updated_at: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class LotRecord:
    """
    A buy or sell event for an investment.

    ``lot_type`` is kept as the raw stored string so a row with an
    unrecognised type can reach the valuation engine and be skipped there.
    """

    id: UUID
    investment_id: UUID
    quantity: Decimal
    price_per_unit: Decimal
    charges: Decimal
    date: date
    lot_type: str
    notes: str | None = None


@dataclass(frozen=True)
class InvestmentRateInfo:
    id: UUID
    investment_type: str
    rate: Decimal
    effective_date: date
    notes: str | None = None


# ---------------------------------------------------------------------------
# Budget records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetInfo:
    id: UUID
    month: str
    category_id: UUID
    budgeted_amount: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class MonthlyIncomeInfo:
    id: UUID
    month: str
    expected_income: Decimal
    notes: str | None = None


# ---------------------------------------------------------------------------
# Client / project records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClientInfo:
    id: UUID
    name: str
    status: ClientStatus = ClientStatus.ACTIVE
    business_name: str | None = None
    address: str | None = None
    contact_number: str | None = None
    email: str | None = None
    gst: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ProjectInfo:
    id: UUID
    name: str
    client_id: UUID | None = None
    expected_amount: Decimal | None = None
    daily_rate: Decimal | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True)
class TimeLogInfo:
    id: UUID
    project_id: UUID
    date: date
    hours: Decimal
    task: str | None = None


# ---------------------------------------------------------------------------
# Billing documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineItemInfo:
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    timeline: str | None = None
    features: str | None = None


@dataclass(frozen=True)
class PaymentInfo:
    id: UUID
    invoice_id: UUID
    amount_paid: Decimal
    payment_date: date
    payment_mode: str
    transaction_reference: str | None = None
    transaction_id: UUID | None = None


@dataclass(frozen=True)
class InvoiceInfo:
    id: UUID
    project_id: UUID
    invoice_number: str
    issue_date: date
    due_date: date | None
    total_amount: Decimal
    status: InvoiceStatus
    stage: str | None = None
    discount: Decimal = Decimal("0")
    tax_percentage: Decimal = Decimal("0")
    project_reference: str | None = None
    notes: str | None = None
    items: tuple[LineItemInfo, ...] = ()
    payments: tuple[PaymentInfo, ...] = ()

    @property
    def amount_paid(self) -> Decimal:
        return sum((p.amount_paid for p in self.payments), Decimal("0"))


@dataclass(frozen=True)
class QuotationInfo:
    id: UUID
    client_id: UUID
    quotation_number: str
    issue_date: date
    valid_till: date | None
    total_amount: Decimal
    status: str
    project_id: UUID | None = None
    project_title: str | None = None
    payment_terms: str | None = None
    terms_conditions: str | None = None
    items: tuple[LineItemInfo, ...] = field(default_factory=tuple)
