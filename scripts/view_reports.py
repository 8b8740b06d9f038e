#!/usr/bin/env python3
"""
View derived reports from persisted store data.

Connects to the store (assumes tables and data already exist; run
seed_data.py first) and prints balances, the budget report, project
income recognition and investment valuations.

Usage:
    python3 scripts/view_reports.py [DATABASE_URL] [YEAR]
"""

import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 72


def _heading(title: str) -> None:
    print("=" * W)
    print(f"  {title}".center(W))
    print("=" * W)


def _row(label: str, *values) -> str:
    cells = "".join(f"{value:>14,.2f}" for value in values)
    return f"  {label:<28}{cells}"


def main() -> int:
    logging.disable(logging.CRITICAL)

    from money_config import get_active_config
    from money_kernel.db.engine import init_engine_from_url
    from money_kernel.domain.clock import SystemClock
    from money_services.commands import TrackerCommands

    config = get_active_config()
    db_url = sys.argv[1] if len(sys.argv) > 1 else config.database.url

    init_engine_from_url(db_url, echo=False)
    commands = TrackerCommands(clock=SystemClock(), config=config)

    accounts = commands.list_accounts()
    if not accounts.ok:
        print(f"  ERROR: {accounts.message}", file=sys.stderr)
        return 1
    if not accounts.data:
        print("  No accounts found. Run seed_data.py first.", file=sys.stderr)
        return 1

    dashboard = commands.get_dashboard().data
    year = int(sys.argv[2]) if len(sys.argv) > 2 else dashboard.as_of.year

    # -----------------------------------------------------------------
    # Balances
    # -----------------------------------------------------------------
    _heading(f"ACCOUNT BALANCES  (as of {dashboard.as_of})")
    for balance in dashboard.accounts:
        print(_row(f"{balance.account_name} [{balance.account_type.value}]", balance.balance))
    print("-" * W)
    print(_row("Net worth", dashboard.net_worth))
    print()

    for platform in commands.get_platform_balances().data:
        print(_row(f"{platform.account_name} available", platform.available))
    print()

    # -----------------------------------------------------------------
    # Budget report
    # -----------------------------------------------------------------
    _heading(f"BUDGET REPORT {year}")
    print(f"  {'Month':<28}{'Income':>14}{'Expenses':>14}{'Invested':>14}")
    for row in commands.get_budget_report(year).data:
        if row.income or row.expenses or row.investments:
            print(_row(row.month, row.income, row.expenses, row.investments))
    print()

    # -----------------------------------------------------------------
    # Project income
    # -----------------------------------------------------------------
    _heading(f"PROJECT INCOME {year}")
    for month in commands.get_project_income_report(year).data:
        if month.projects:
            print(_row(month.month, month.expected_income, month.actual_income))
    print()

    # -----------------------------------------------------------------
    # Investments
    # -----------------------------------------------------------------
    _heading("INVESTMENTS")
    batch = commands.get_investment_summaries().data
    for summary in batch.summaries:
        print(_row(summary.name, summary.net_capital, summary.current_valuation, summary.net_gain))
    for failure in batch.failures:
        print(f"  [FAIL] {failure.investment_id}: {failure.reason}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
