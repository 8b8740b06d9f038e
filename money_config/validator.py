"""
Configuration Validator (``money_config.validator``).

Responsibility
--------------
Checks a parsed ``TrackerConfig`` (and the raw mapping it came from) before
it is handed to the rest of the system.

Invariants enforced
-------------------
* Only known top-level sections appear in the source mapping.
* Price source URLs are http(s) and the timeout is positive.
* default_salary_date is an integer within 1..31.
* The logging level is a standard level name.

Failure modes
-------------
* Errors are collected into ``ConfigValidationResult.errors``; a config
  with errors MUST NOT be used.
"""

from dataclasses import dataclass, field
from typing import Any

from money_config.schema import TrackerConfig

KNOWN_SECTIONS = frozenset({"config_id", "database", "price_source", "budget", "logging"})
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)


def validate_configuration(
    config: TrackerConfig,
    source: dict[str, Any] | None = None,
) -> ConfigValidationResult:
    result = ConfigValidationResult()

    if source is not None:
        for key in sorted(set(source) - KNOWN_SECTIONS):
            result.add_error(f"Unknown configuration section '{key}'")

    if not config.database.url:
        result.add_error("database.url must not be empty")

    for name in ("mf_base_url", "equity_base_url"):
        url = getattr(config.price_source, name)
        if not url.startswith(("http://", "https://")):
            result.add_error(f"price_source.{name} must be an http(s) URL, got {url!r}")
    if config.price_source.timeout_seconds <= 0:
        result.add_error("price_source.timeout_seconds must be positive")

    salary_date = config.budget.default_salary_date
    if isinstance(salary_date, bool) or not isinstance(salary_date, int) or not 1 <= salary_date <= 31:
        result.add_error(
            f"budget.default_salary_date must be an integer in 1..31, got {salary_date!r}"
        )

    if config.logging.level not in LOG_LEVELS:
        result.add_error(f"logging.level must be one of {sorted(LOG_LEVELS)}")

    return result
