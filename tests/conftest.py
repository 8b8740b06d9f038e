"""
Pytest configuration and fixtures for the money tracker tests.

Every test that needs a store gets a fresh in-memory SQLite database:
the engine fixture initialises the module-level engine, creates all
tables, and disposes of it on teardown.  Tests that drive services
directly use the ``session`` fixture (services flush, never commit);
tests that go through TrackerCommands or PriceRefreshSweep use the real
``session_scope`` instead and must not also hold ``session`` open.
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from money_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from money_kernel.domain.clock import DeterministicClock
from money_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from money_kernel.services.account_service import AccountService
from money_kernel.services.category_service import CategoryService
from money_kernel.services.transaction_service import TransactionService


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture money_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, commands):
            commands.refresh_prices()
            logs = captured_logs()
            assert any(r["message"] == "price_refresh_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("money_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    """Fresh in-memory database with every table created."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(engine):
    """A session for direct service/selector tests; rolled back on teardown."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 6, 15, 9, 30, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_account(session):
    """Create an account; returns its AccountInfo."""

    def _make(name="HDFC Savings", account_type="bank", opening_balance="0"):
        return AccountService(session).create_account(
            name=name,
            account_type=account_type,
            opening_balance=Decimal(str(opening_balance)),
        )

    return _make


@pytest.fixture
def make_category(session):
    """Create a category; returns its CategoryInfo."""

    def _make(name="Groceries", kind="expense", is_investment=False):
        return CategoryService(session).create_category(
            name=name, kind=kind, is_investment=is_investment
        )

    return _make


@pytest.fixture
def make_transaction(session):
    """Create a transaction; returns its TransactionRecord."""

    def _make(category, amount, direction, on=date(2024, 1, 15), **links):
        return TransactionService(session).create_transaction(
            date=on,
            amount=Decimal(str(amount)),
            direction=direction,
            category_id=category.id,
            **links,
        )

    return _make
