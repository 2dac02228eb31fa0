"""
station_config: single public entrypoint for station configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component may read configuration
    files or environment variables directly.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` / ``KeyError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STATION_CONFIG_TRACE`` log entry with the source path and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from station_config.loader import load_yaml_file, parse_config
from station_config.schema import StationConfig
from station_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_PATH_ENV = "STATION_LEDGER_CONFIG"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(config_path: Path | str | None = None) -> StationConfig:
    """The ONLY public configuration entrypoint.

    Resolution order for the file: explicit ``config_path``, then the
    ``STATION_LEDGER_CONFIG`` environment variable, then the packaged
    ``sets/default.yaml``.  ``DATABASE_URL`` in the environment overrides
    the file's ``database.url``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        KeyError: If required keys are missing.
        ValueError: If configuration validation fails.
    """
    path = Path(config_path or os.environ.get(CONFIG_PATH_ENV) or _DEFAULT_CONFIG_PATH)
    data = load_yaml_file(path)
    config = parse_config(
        data,
        source_path=str(path),
        database_url_override=os.environ.get(DATABASE_URL_ENV),
    )

    _logger.info(
        "STATION_CONFIG_TRACE",
        extra={
            "trace_type": "STATION_CONFIG_TRACE",
            "source_path": config.source_path,
            "checksum": config.checksum,
            "product_count": len(config.product_types),
            "expense_category_count": len(config.expense_categories),
        },
    )
    return config


__all__ = ["StationConfig", "get_active_config", "CONFIG_PATH_ENV", "DATABASE_URL_ENV"]
