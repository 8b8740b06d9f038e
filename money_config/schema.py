"""
Configuration Schema (``money_config.schema``).

Responsibility
--------------
Frozen dataclasses describing the tracker's runtime settings: the store
location, the external price source, budget defaults and logging level.

Architecture position
---------------------
**Config layer** -- pure data.  No dependency on kernel, engines or
services.

Invariants enforced
-------------------
* Every section is a frozen dataclass; a loaded config never changes.
* Defaults here match ``sets/default.yaml`` so a missing section behaves
  like the shipped configuration.
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///money_tracker.db"
    echo: bool = False


@dataclass(frozen=True)
class PriceSourceConfig:
    """Endpoints for live prices.  Symbols are appended to the base URLs."""

    mf_base_url: str = "https://api.mfapi.in/mf"
    equity_base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    timeout_seconds: Decimal = Decimal("10")
    user_agent: str = "Mozilla/5.0"


@dataclass(frozen=True)
class BudgetConfig:
    default_salary_date: int = 1


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class TrackerConfig:
    """
    The complete runtime configuration.

    Contract
    --------
    * ``checksum`` is a SHA-256 of the canonical source mapping; the same
      YAML always yields the same checksum.
    """

    config_id: str = "default"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    price_source: PriceSourceConfig = field(default_factory=PriceSourceConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""

    @classmethod
    def with_defaults(cls) -> "TrackerConfig":
        return cls()
