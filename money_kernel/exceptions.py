"""
Typed Exception Hierarchy for the Money Tracker Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the command surface must be able to tell a bad request apart from
a missing record, a broken store or a flaky price source without parsing
message strings.  Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        ledger.balance(account_id)
    except AccountNotFoundError as e:
        return {"error": e.code, "account_id": e.account_id}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MoneyTrackerError (base)
    |
    +-- ValidationError
    |   +-- MissingIdentifierError
    |   +-- InvalidMonthError
    |   +-- InvalidRecordError
    |
    +-- NotFoundError
    |   +-- RecordNotFoundError
    |   +-- AccountNotFoundError
    |   +-- InvestmentNotFoundError
    |   +-- ProjectNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- QuotationNotFoundError
    |
    +-- StoreAccessError
    |
    +-- PriceLookupError
        +-- UnsupportedInstrumentError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | MISSING_IDENTIFIER          | Update request without an id
                | INVALID_MONTH               | Month string is not YYYY-MM
                | INVALID_RECORD              | Field value outside its domain
----------------|-----------------------------|-----------------------------------------
Not found       | RECORD_NOT_FOUND            | Generic record lookup failed
                | ACCOUNT_NOT_FOUND           | Account ID doesn't exist
                | INVESTMENT_NOT_FOUND        | Investment ID doesn't exist
                | PROJECT_NOT_FOUND           | Project ID doesn't exist
                | INVOICE_NOT_FOUND           | Invoice ID doesn't exist
                | QUOTATION_NOT_FOUND         | Quotation ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Store           | STORE_ACCESS_ERROR          | I/O or constraint failure in the store
----------------|-----------------------------|-----------------------------------------
Price lookup    | PRICE_LOOKUP_FAILED         | Price source failed for one symbol
                | UNSUPPORTED_INSTRUMENT      | No price endpoint for instrument kind

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Validation errors are raised BEFORE any store access.
2. NotFoundError is distinct from ValidationError so callers can map it
   to a different response.
3. StoreAccessError is opaque and never retried automatically.
4. PriceLookupError is per-symbol; batch sweeps record it and continue.
5. Division by zero is never an error: engines resolve it to 0.
"""


class MoneyTrackerError(Exception):
    """
    Base exception for all money tracker errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "MONEY_TRACKER_ERROR"


# Validation exceptions


class ValidationError(MoneyTrackerError):
    """Base exception for requests rejected before touching the store."""

    code: str = "VALIDATION_ERROR"


class MissingIdentifierError(ValidationError):
    """An update or delete request did not carry the record id."""

    code: str = "MISSING_IDENTIFIER"

    def __init__(self, record_type: str):
        self.record_type = record_type
        super().__init__(f"{record_type} ID is required")


class InvalidMonthError(ValidationError):
    """Month string is not of the form YYYY-MM."""

    code: str = "INVALID_MONTH"

    def __init__(self, month: str):
        self.month = month
        super().__init__(f"Invalid month '{month}', expected YYYY-MM")


class InvalidRecordError(ValidationError):
    """A record field holds a value outside its allowed domain."""

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, field: str, reason: str):
        self.record_type = record_type
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {record_type}.{field}: {reason}")


# Not-found exceptions


class NotFoundError(MoneyTrackerError):
    """Base exception for records that do not exist."""

    code: str = "NOT_FOUND"


class RecordNotFoundError(NotFoundError):
    """Generic record lookup failure."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_type: str, record_id: str):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type} not found: {record_id}")


class AccountNotFoundError(NotFoundError):
    """Account with given ID was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class InvestmentNotFoundError(NotFoundError):
    """Investment with given ID was not found."""

    code: str = "INVESTMENT_NOT_FOUND"

    def __init__(self, investment_id: str):
        self.investment_id = investment_id
        super().__init__(f"Investment not found: {investment_id}")


class ProjectNotFoundError(NotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class InvoiceNotFoundError(NotFoundError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


class QuotationNotFoundError(NotFoundError):
    """Quotation with given ID was not found."""

    code: str = "QUOTATION_NOT_FOUND"

    def __init__(self, quotation_id: str):
        self.quotation_id = quotation_id
        super().__init__(f"Quotation not found: {quotation_id}")


# Store exceptions


class StoreAccessError(MoneyTrackerError):
    """
    The store failed to read or write (I/O, constraint, driver error).

    The original driver exception is chained as ``__cause__``; the message
    is deliberately opaque.  Not retried automatically.
    """

    code: str = "STORE_ACCESS_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Store access failed during {operation}: {detail}")


# Price lookup exceptions


class PriceLookupError(MoneyTrackerError):
    """The external price source could not produce a price for a symbol."""

    code: str = "PRICE_LOOKUP_FAILED"

    def __init__(self, symbol: str, instrument_kind: str, reason: str):
        self.symbol = symbol
        self.instrument_kind = instrument_kind
        self.reason = reason
        super().__init__(
            f"Could not fetch price for {symbol} ({instrument_kind}): {reason}"
        )


class UnsupportedInstrumentError(PriceLookupError):
    """No price endpoint exists for the instrument kind."""

    code: str = "UNSUPPORTED_INSTRUMENT"

    def __init__(self, symbol: str, instrument_kind: str):
        super().__init__(
            symbol, instrument_kind, f"no price source for '{instrument_kind}'"
        )
