"""
Live price lookup (``money_services.price_source``).

Responsibility
--------------
Fetches the latest market price for one symbol from the external price
services: mutual fund NAVs by scheme code, and equity prices by ticker.

Architecture position
---------------------
**Services layer** -- the only module that performs network I/O.  The
refresh sweep and the GetLivePrice command depend on the ``PriceSource``
interface, so tests substitute an in-memory source or an httpx
``MockTransport``.

Invariants enforced
-------------------
* Prices are returned as ``Decimal`` parsed from the response text, never
  through float.
* Every failure (empty symbol, unsupported instrument kind, transport
  error, non-success status, missing field) raises ``PriceLookupError``;
  nothing partial is returned.

Failure modes
-------------
* ``UnsupportedInstrumentError`` for kinds other than mf and stock.
* ``PriceLookupError`` for every other failure, with a reason string.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from money_config.schema import PriceSourceConfig
from money_kernel.domain.records import InvestmentType
from money_kernel.exceptions import PriceLookupError, UnsupportedInstrumentError
from money_kernel.logging_config import get_logger

logger = get_logger("services.price_source")


class PriceSource(ABC):
    """Interface for anything that can quote a symbol."""

    @abstractmethod
    def lookup_price(self, symbol: str, instrument_kind: InvestmentType | str) -> Decimal:
        """
        Latest price for ``symbol``.

        Raises:
            PriceLookupError: If no price can be produced.
        """
        ...


class HttpPriceSource(PriceSource):
    """
    Price source backed by the public mutual fund and equity chart APIs.

    Config:
        mf_base_url: ``{mf_base_url}/{scheme_code}``, price at data[0].nav
        equity_base_url: ``{equity_base_url}/{ticker}?interval=1d&range=1d``,
            price at chart.result[0].meta.regularMarketPrice
        timeout_seconds: per-request timeout
        user_agent: sent with every request
    """

    def __init__(self, config: PriceSourceConfig | None = None, http_client: httpx.Client | None = None):
        """
        Args:
            config: Endpoint settings; defaults to PriceSourceConfig().
            http_client: Optional client for testing (mock transport
                injection).  The caller keeps ownership of an injected
                client.
        """
        self.config = config or PriceSourceConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=float(self.config.timeout_seconds),
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpPriceSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def lookup_price(self, symbol: str, instrument_kind: InvestmentType | str) -> Decimal:
        symbol = (symbol or "").strip()
        kind = str(getattr(instrument_kind, "value", instrument_kind))
        if not symbol:
            raise PriceLookupError(symbol, kind, "symbol cannot be empty")

        if kind == InvestmentType.MUTUAL_FUND.value:
            price = self._mutual_fund_nav(symbol)
        elif kind == InvestmentType.STOCK.value:
            price = self._equity_price(symbol)
        else:
            raise UnsupportedInstrumentError(symbol, kind)

        logger.info(
            "price_lookup_succeeded",
            extra={"symbol": symbol, "instrument_kind": kind, "price": str(price)},
        )
        return price

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def _mutual_fund_nav(self, symbol: str) -> Decimal:
        kind = InvestmentType.MUTUAL_FUND.value
        payload = self._get_json(f"{self.config.mf_base_url.rstrip('/')}/{symbol}", symbol, kind)

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data:
            raise PriceLookupError(symbol, kind, f"no data found for scheme code {symbol}")
        nav = data[0].get("nav") if isinstance(data[0], dict) else None
        return _to_decimal(nav, symbol, kind, "nav")

    def _equity_price(self, symbol: str) -> Decimal:
        kind = InvestmentType.STOCK.value
        payload = self._get_json(
            f"{self.config.equity_base_url.rstrip('/')}/{symbol}",
            symbol,
            kind,
            params={"interval": "1d", "range": "1d"},
            unauthorized_reason=(
                "401 Unauthorized; check the symbol carries its exchange suffix (e.g. .NS or .BO)"
            ),
        )

        try:
            meta = payload["chart"]["result"][0]["meta"]
        except (KeyError, IndexError, TypeError):
            raise PriceLookupError(symbol, kind, "no chart result in response")
        return _to_decimal(meta.get("regularMarketPrice"), symbol, kind, "regularMarketPrice")

    def _get_json(
        self,
        url: str,
        symbol: str,
        kind: str,
        params: dict[str, str] | None = None,
        unauthorized_reason: str | None = None,
    ) -> Any:
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise PriceLookupError(symbol, kind, f"request failed: {type(exc).__name__}") from exc

        if response.status_code == 401 and unauthorized_reason is not None:
            raise PriceLookupError(symbol, kind, unauthorized_reason)
        if response.is_error:
            raise PriceLookupError(symbol, kind, f"HTTP {response.status_code}")

        try:
            return response.json(parse_float=Decimal)
        except ValueError as exc:
            raise PriceLookupError(symbol, kind, "response is not JSON") from exc


def _to_decimal(value: Any, symbol: str, kind: str, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise PriceLookupError(symbol, kind, f"missing {field}")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise PriceLookupError(symbol, kind, f"unparseable {field} {value!r}")
    if not price.is_finite() or price < 0:
        raise PriceLookupError(symbol, kind, f"invalid {field} {value!r}")
    return price
