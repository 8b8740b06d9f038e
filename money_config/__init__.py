"""
money_config -- single public entrypoint for tracker configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``TrackerConfig``.

Architecture position:
    Configuration -- sits beside ``money_kernel``; the kernel never imports
    from ``money_config``.  Services receive the parts they need (price
    source settings, budget defaults) from their callers.

Invariants enforced:
    - Validation: a configuration with errors is never returned.
    - Deterministic identity: the same YAML always produces the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ValueError`` -- parse or validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``MONEY_CONFIG_TRACE`` log entry containing the config_id and checksum.
"""

import logging
from pathlib import Path

from money_config.loader import load_yaml_file, parse_config
from money_config.schema import (
    BudgetConfig,
    DatabaseConfig,
    LoggingConfig,
    PriceSourceConfig,
    TrackerConfig,
)
from money_config.validator import validate_configuration

_logger = logging.getLogger("money_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> TrackerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to
            money_config/sets/default.yaml.

    Returns:
        A validated, frozen TrackerConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the configuration fails parsing or validation.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    source = load_yaml_file(path)
    config = parse_config(source)

    validation = validate_configuration(config, source)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )

    _logger.info(
        "MONEY_CONFIG_TRACE",
        extra={
            "trace_type": "MONEY_CONFIG_TRACE",
            "config_id": config.config_id,
            "checksum": config.checksum,
            "source": str(path),
        },
    )
    return config


__all__ = [
    "BudgetConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "PriceSourceConfig",
    "TrackerConfig",
    "get_active_config",
]
