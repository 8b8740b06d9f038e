"""
Configuration Loader (``money_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``money_config.schema`` dataclasses.  Runtime callers go through
``money_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing sections fall back to the schema defaults; unknown keys are
  rejected by the validator, not silently dropped.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrongly typed values  -> ``ValueError``.
"""

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from money_config.schema import (
    BudgetConfig,
    DatabaseConfig,
    LoggingConfig,
    PriceSourceConfig,
    TrackerConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Section '{name}' must be a mapping")
    return value


def parse_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field_name}: cannot parse number from {value!r}")


def parse_config(data: dict[str, Any]) -> TrackerConfig:
    """Build a TrackerConfig from a parsed YAML mapping."""
    defaults = TrackerConfig()

    database = _section(data, "database")
    price_source = _section(data, "price_source")
    budget = _section(data, "budget")
    logging_section = _section(data, "logging")

    return TrackerConfig(
        config_id=str(data.get("config_id", defaults.config_id)),
        database=DatabaseConfig(
            url=str(database.get("url", defaults.database.url)),
            echo=bool(database.get("echo", defaults.database.echo)),
        ),
        price_source=PriceSourceConfig(
            mf_base_url=str(price_source.get("mf_base_url", defaults.price_source.mf_base_url)),
            equity_base_url=str(
                price_source.get("equity_base_url", defaults.price_source.equity_base_url)
            ),
            timeout_seconds=parse_decimal(
                price_source.get("timeout_seconds", defaults.price_source.timeout_seconds),
                "price_source.timeout_seconds",
            ),
            user_agent=str(price_source.get("user_agent", defaults.price_source.user_agent)),
        ),
        budget=BudgetConfig(
            default_salary_date=budget.get(
                "default_salary_date", defaults.budget.default_salary_date
            ),
        ),
        logging=LoggingConfig(
            level=str(logging_section.get("level", defaults.logging.level)).upper(),
        ),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
