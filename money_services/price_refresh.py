"""
PriceRefreshSweep -- SAVEPOINT-per-item live price refresh.

Contract:
    Refreshes ``current_price`` / ``last_updated_at`` of every investment
    that has a non-empty provider_symbol, one symbol at a time.

Architecture: money_services.  Imports from money_kernel (selectors,
    services, db) and the PriceSource interface.

Invariants enforced:
    - Lookups happen between store scopes, never while the store lock is
      held; the network never blocks other store users.
    - Each write runs inside its own SAVEPOINT, so one failed write rolls
      back only that investment.
    - A failed lookup or write is recorded in the result and the sweep
      continues with the next symbol.
    - All timestamps come from the injected Clock.
"""

import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from money_kernel.db.engine import session_scope
from money_kernel.domain.clock import Clock, SystemClock
from money_kernel.domain.records import InvestmentType
from money_kernel.exceptions import MoneyTrackerError, PriceLookupError
from money_kernel.logging_config import get_logger
from money_kernel.selectors.investment_selector import InvestmentSelector
from money_kernel.services.investment_service import InvestmentService
from money_services.price_source import PriceSource

logger = get_logger("services.price_refresh")

SessionScope = Callable[[], AbstractContextManager[Session]]


@dataclass(frozen=True)
class RefreshTarget:
    investment_id: UUID
    name: str
    symbol: str
    instrument_kind: InvestmentType


@dataclass(frozen=True)
class RefreshItemResult:
    investment_id: UUID
    name: str
    symbol: str
    succeeded: bool
    price: Decimal | None = None
    error_code: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class RefreshResult:
    started_at: datetime
    items: tuple[RefreshItemResult, ...]
    duration_ms: int

    @property
    def updated(self) -> int:
        return sum(1 for item in self.items if item.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if not item.succeeded)


class PriceRefreshSweep:
    """Sequential price refresh with per-item isolation.

    Contract:
        - ``targets(session)`` lists what would be refreshed.
        - ``apply(session, quotes)`` writes looked-up prices, one
          SAVEPOINT per item.
        - ``run()`` does both around the lookups, each side in its own
          store scope.

    Non-goals:
        - Does NOT retry failed lookups; the next sweep tries again.
        - ``apply`` does NOT commit -- the caller's scope does.
    """

    def __init__(
        self,
        price_source: PriceSource,
        clock: Clock | None = None,
        scope: SessionScope = session_scope,
    ):
        self._source = price_source
        self._clock = clock or SystemClock()
        self._scope = scope

    def targets(self, session: Session) -> list[RefreshTarget]:
        return [
            RefreshTarget(
                investment_id=info.id,
                name=info.name,
                symbol=info.provider_symbol.strip(),
                instrument_kind=info.investment_type,
            )
            for info in InvestmentSelector(session).symbol_bearing()
        ]

    def lookup(self, targets: list[RefreshTarget]) -> list[tuple[RefreshTarget, Decimal | PriceLookupError]]:
        """Quote every target; failures are returned in place of a price."""
        quotes: list[tuple[RefreshTarget, Decimal | PriceLookupError]] = []
        for target in targets:
            try:
                price = self._source.lookup_price(target.symbol, target.instrument_kind)
            except PriceLookupError as exc:
                logger.warning(
                    "price_refresh_item_failed",
                    extra={
                        "investment_id": str(target.investment_id),
                        "symbol": target.symbol,
                        "stage": "lookup",
                        "error_code": exc.code,
                        "error": str(exc),
                    },
                )
                quotes.append((target, exc))
                continue
            quotes.append((target, price))
        return quotes

    def apply(
        self,
        session: Session,
        quotes: list[tuple[RefreshTarget, Decimal | PriceLookupError]],
    ) -> list[RefreshItemResult]:
        service = InvestmentService(session)
        results: list[RefreshItemResult] = []

        for target, quote in quotes:
            if isinstance(quote, PriceLookupError):
                results.append(_failed(target, quote.code, str(quote)))
                continue

            savepoint = session.begin_nested()
            try:
                service.record_price(target.investment_id, quote, self._clock.now())
                savepoint.commit()
            except (MoneyTrackerError, SQLAlchemyError) as exc:
                savepoint.rollback()
                code = getattr(exc, "code", "STORE_ACCESS_ERROR")
                logger.warning(
                    "price_refresh_item_failed",
                    extra={
                        "investment_id": str(target.investment_id),
                        "symbol": target.symbol,
                        "stage": "write",
                        "error_code": code,
                        "error": str(exc),
                    },
                )
                results.append(_failed(target, code, str(exc)))
                continue

            results.append(
                RefreshItemResult(
                    investment_id=target.investment_id,
                    name=target.name,
                    symbol=target.symbol,
                    succeeded=True,
                    price=quote,
                )
            )
        return results

    def run(self) -> RefreshResult:
        started_at = self._clock.now()
        start = time.monotonic()

        with self._scope() as session:
            targets = self.targets(session)
        logger.info("price_refresh_started", extra={"targets": len(targets)})

        quotes = self.lookup(targets)

        with self._scope() as session:
            items = self.apply(session, quotes)

        result = RefreshResult(
            started_at=started_at,
            items=tuple(items),
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        logger.info(
            "price_refresh_completed",
            extra={
                "updated": result.updated,
                "failed": result.failed,
                "duration_ms": result.duration_ms,
            },
        )
        return result


def _failed(target: RefreshTarget, code: str, message: str) -> RefreshItemResult:
    return RefreshItemResult(
        investment_id=target.investment_id,
        name=target.name,
        symbol=target.symbol,
        succeeded=False,
        error_code=code,
        error_message=message,
    )
