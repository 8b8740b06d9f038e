#!/usr/bin/env python3
"""
Seed the store with a realistic household and freelance year.

Drops all tables, recreates them, and issues every write through
TrackerCommands so each record goes through the same validation and
atomic scopes as the application.

Usage:
    python3 scripts/seed_data.py [DATABASE_URL]
"""

import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
YEAR = 2024
MONTHS = range(1, 7)


def _data(result):
    """Unwrap a CommandResult or stop the seed with its message."""
    if not result.ok:
        raise SystemExit(f"  ERROR: {result.status}: {result.message}")
    return result.data


def main() -> int:
    logging.disable(logging.CRITICAL)

    from money_config import get_active_config
    from money_kernel.db.engine import create_tables, drop_tables, init_engine_from_url
    from money_kernel.domain.clock import DeterministicClock
    from money_services.commands import TrackerCommands

    config = get_active_config()
    db_url = sys.argv[1] if len(sys.argv) > 1 else config.database.url

    # -----------------------------------------------------------------
    # 1. Connect + reset
    # -----------------------------------------------------------------
    print()
    print(f"  [1/5] Connecting to {db_url}...")
    init_engine_from_url(db_url, echo=config.database.echo)

    print("  [2/5] Dropping old tables and recreating schema...")
    drop_tables()
    create_tables()

    clock = DeterministicClock(datetime(YEAR, 6, 15, 12, 0, 0, tzinfo=UTC))
    commands = TrackerCommands(clock=clock, config=config)

    # -----------------------------------------------------------------
    # 2. Accounts and categories
    # -----------------------------------------------------------------
    print("  [3/5] Creating accounts, categories and clients...")
    bank = _data(commands.create_account(name="HDFC Savings", account_type="bank", opening_balance="85000"))
    wallet = _data(commands.create_account(name="Wallet", account_type="cash", opening_balance="2500"))
    broker = _data(commands.create_account(name="Zerodha", account_type="investment"))

    salary = _data(commands.create_category(name="Salary", kind="income"))
    consulting = _data(commands.create_category(name="Consulting", kind="income"))
    rent = _data(commands.create_category(name="Rent", kind="expense"))
    groceries = _data(commands.create_category(name="Groceries", kind="expense"))
    sip = _data(commands.create_category(name="SIP", kind="expense", is_investment=True))

    client = _data(commands.create_client(name="Acme Labs", email="accounts@acme.example"))
    project = _data(commands.create_project(
        name="Billing portal", client_id=client.id, expected_amount="240000",
        daily_rate="12000", start_date=date(YEAR, 2, 1), end_date=date(YEAR, 5, 31),
    ))

    # -----------------------------------------------------------------
    # 3. Monthly activity
    # -----------------------------------------------------------------
    print(f"  [4/5] Recording {len(MONTHS)} months of transactions and budgets...")
    fund = _data(commands.create_investment(
        name="Nifty 50 Index Fund", investment_type="mf", account_id=broker.id,
        provider_symbol="120716", current_price="231.40",
    ))
    commands.update_budget_settings(1)

    for month in MONTHS:
        key = f"{YEAR}-{month:02d}"
        _data(commands.create_transaction(
            date=date(YEAR, month, 1), amount="95000", direction="income",
            category_id=salary.id, to_account_id=bank.id, notes="Monthly salary",
        ))
        _data(commands.create_transaction(
            date=date(YEAR, month, 3), amount="28000", direction="expense",
            category_id=rent.id, from_account_id=bank.id,
        ))
        _data(commands.create_transaction(
            date=date(YEAR, month, 12), amount="6400", direction="expense",
            category_id=groceries.id, from_account_id=wallet.id,
        ))
        _data(commands.create_transaction(
            date=date(YEAR, month, 10), amount="10000", direction="transfer",
            category_id=sip.id, from_account_id=bank.id, to_account_id=broker.id,
            investment_id=fund.id,
        ))
        _data(commands.add_lot(
            fund.id, quantity="45", price_per_unit="220", date=date(YEAR, month, 10), charges="1",
        ))
        _data(commands.set_budget(month=key, category_id=rent.id, budgeted_amount="28000"))
        _data(commands.set_budget(month=key, category_id=groceries.id, budgeted_amount="6000"))
        _data(commands.set_budget(month=key, category_id=sip.id, budgeted_amount="10000"))
        _data(commands.set_monthly_income(month=key, expected_income="95000"))

    for paid_on, amount in ((date(YEAR, 3, 5), "96000"), (date(YEAR, 5, 20), "72000")):
        _data(commands.create_transaction(
            date=paid_on, amount=amount, direction="income", category_id=consulting.id,
            to_account_id=bank.id, client_id=client.id, project_id=project.id,
        ))

    invoice = _data(commands.create_invoice(
        project_id=project.id, issue_date=date(YEAR, 5, 31), total_amount="240000",
        due_date=date(YEAR, 6, 30),
        items=[{"description": "Portal build", "quantity": "20", "rate": "12000"}],
    ))
    _data(commands.record_payment(
        invoice.id, amount_paid="168000", payment_date=date(YEAR, 5, 31), payment_mode="NEFT",
    ))

    # -----------------------------------------------------------------
    # 4. Summary
    # -----------------------------------------------------------------
    print("  [5/5] Done.")
    print()
    for balance in _data(commands.get_account_balances()):
        print(f"    {balance.account_name:<20} {balance.balance:>14,.2f}")
    print()
    print("  Next: python3 scripts/view_reports.py")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
