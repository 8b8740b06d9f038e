"""
Property tests for derived account balances.

Balances are never stored, so every way of deriving them must agree:

- The grouped bulk query equals the per-account query.
- Both equal the in-memory fold over the same transactions.
- A transfer between two tracked accounts leaves net worth unchanged.
- Re-deriving without writes gives the same answer.

Each example gets its own in-memory store.
"""

from contextlib import contextmanager
from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from money_engines.ledger import balance_from_transactions
from money_kernel.db.engine import create_tables, get_session, init_engine_from_url, reset_engine
from money_kernel.selectors.ledger_selector import AccountLedger
from money_kernel.selectors.transaction_selector import TransactionSelector
from money_kernel.services.account_service import AccountService
from money_kernel.services.category_service import CategoryService
from money_kernel.services.transaction_service import TransactionService

BASE_DATE = date(2024, 1, 1)
ACCOUNT_NAMES = ("Bank", "Cash", "Broker")

amounts = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("100000"), places=2,
    allow_nan=False, allow_infinity=False,
)
account_slot = st.one_of(st.none(), st.integers(min_value=0, max_value=len(ACCOUNT_NAMES) - 1))

movements = st.lists(
    st.tuples(
        amounts,
        st.integers(min_value=0, max_value=365),
        st.sampled_from(["income", "expense", "transfer"]),
        account_slot,
        account_slot,
    ),
    max_size=25,
)

openings = st.lists(
    st.decimals(min_value=Decimal("-5000"), max_value=Decimal("5000"), places=2,
                allow_nan=False, allow_infinity=False),
    min_size=len(ACCOUNT_NAMES),
    max_size=len(ACCOUNT_NAMES),
)


@contextmanager
def fresh_store():
    init_engine_from_url("sqlite://")
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        reset_engine()


def _populate(session, opening_balances, rows):
    accounts = [
        AccountService(session).create_account(name=name, account_type="bank", opening_balance=opening)
        for name, opening in zip(ACCOUNT_NAMES, opening_balances)
    ]
    category = CategoryService(session).create_category(name="Misc", kind="expense")
    service = TransactionService(session)
    for amount, offset, direction, source, target in rows:
        service.create_transaction(
            date=BASE_DATE + timedelta(days=offset),
            amount=amount,
            direction=direction,
            category_id=category.id,
            from_account_id=accounts[source].id if source is not None else None,
            to_account_id=accounts[target].id if target is not None else None,
        )
    return accounts, category


@pytest.mark.slow
class TestBalanceDerivationsAgree:

    @given(opening_balances=openings, rows=movements, cutoff=st.integers(min_value=0, max_value=365))
    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_bulk_single_and_fold_agree(self, opening_balances, rows, cutoff):
        as_of = BASE_DATE + timedelta(days=cutoff)
        with fresh_store() as session:
            accounts, _ = _populate(session, opening_balances, rows)
            ledger = AccountLedger(session)
            records = TransactionSelector(session).list_transactions()

            for as_of_date in (None, as_of):
                bulk = {row.account_id: row.balance for row in ledger.balances(as_of_date)}
                for account in accounts:
                    folded = balance_from_transactions(
                        account_id=account.id,
                        opening_balance=account.opening_balance,
                        transactions=records,
                        as_of_date=as_of_date,
                    )
                    assert bulk[account.id] == ledger.balance(account.id, as_of_date) == folded

    @given(opening_balances=openings, rows=movements)
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_balances_are_stable_without_writes(self, opening_balances, rows):
        with fresh_store() as session:
            _populate(session, opening_balances, rows)
            ledger = AccountLedger(session)

            assert ledger.balances() == ledger.balances()


@pytest.mark.slow
class TestTransferConservation:

    @given(
        opening_balances=openings,
        rows=movements,
        amount=amounts,
        pair=st.permutations(range(len(ACCOUNT_NAMES))),
    )
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_internal_transfer_preserves_net_worth(self, opening_balances, rows, amount, pair):
        with fresh_store() as session:
            accounts, category = _populate(session, opening_balances, rows)
            ledger = AccountLedger(session)
            before = {row.account_id: row.balance for row in ledger.balances()}

            source, target = accounts[pair[0]], accounts[pair[1]]
            TransactionService(session).create_transaction(
                date=BASE_DATE, amount=amount, direction="transfer", category_id=category.id,
                from_account_id=source.id, to_account_id=target.id,
            )
            after = {row.account_id: row.balance for row in ledger.balances()}

            assert sum(after.values()) == sum(before.values())
            assert after[source.id] == before[source.id] - amount
            assert after[target.id] == before[target.id] + amount
