"""
StationConfig schema.

The runtime configuration of one station deployment.  YAML files are parsed
into this frozen dataclass by the loader; nothing else in the system reads
configuration files or environment variables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from station_kernel.domain.catalog import (
    DEFAULT_CHART_COLORS,
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_PRODUCT_TYPES,
)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
VALID_INPUT_MODES = {"manual", "automatic"}


@dataclass(frozen=True)
class StationConfig:
    """Validated station configuration."""

    database_url: str
    log_level: str = "INFO"
    product_types: tuple[str, ...] = DEFAULT_PRODUCT_TYPES
    expense_categories: tuple[str, ...] = DEFAULT_EXPENSE_CATEGORIES
    chart_colors: tuple[str, ...] = DEFAULT_CHART_COLORS
    default_input_mode: str = "manual"
    currency_symbol: str = "₦"
    volume_unit: str = "L"
    checksum: str = ""
    source_path: str = ""

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("database_url is required")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got '{self.log_level}'"
            )
        if not self.product_types:
            raise ValueError("product_types cannot be empty")
        if len(set(self.product_types)) != len(self.product_types):
            raise ValueError(f"product_types contains duplicates: {self.product_types}")
        if not self.chart_colors:
            raise ValueError("chart_colors cannot be empty")
        if self.default_input_mode not in VALID_INPUT_MODES:
            raise ValueError(
                f"default_input_mode must be one of {sorted(VALID_INPUT_MODES)}, "
                f"got '{self.default_input_mode}'"
            )

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)
