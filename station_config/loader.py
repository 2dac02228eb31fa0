"""
Configuration Loader (``station_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``station_config.schema.StationConfig`` dataclass.  The single public entry
point for runtime config is ``station_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from ``StationConfig.__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from station_config.schema import StationConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping, got {type(data).__name__}")
    return data


def _string_tuple(data: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = data.get(key)
    if raw is None:
        return default
    if isinstance(raw, str) or not isinstance(raw, list):
        raise ValueError(f"{key} must be a list of strings, got {raw!r}")
    return tuple(str(item) for item in raw)


def parse_config(
    data: dict[str, Any],
    *,
    source_path: str = "",
    database_url_override: str | None = None,
) -> StationConfig:
    """
    Parse a ``StationConfig`` from a dict.

    Raises:
        KeyError: if ``database`` or ``database.url`` is missing and no
            override is given.
        ValueError: if any field fails validation.
    """
    defaults = StationConfig(database_url="unset")
    database_url = database_url_override or data["database"]["url"]
    logging_data = data.get("logging") or {}
    display = data.get("display") or {}

    return StationConfig(
        database_url=database_url,
        log_level=str(logging_data.get("level", defaults.log_level)).upper(),
        product_types=_string_tuple(data, "product_types", defaults.product_types),
        expense_categories=_string_tuple(data, "expense_categories", defaults.expense_categories),
        chart_colors=_string_tuple(display, "chart_colors", defaults.chart_colors),
        default_input_mode=data.get("default_input_mode", defaults.default_input_mode),
        currency_symbol=display.get("currency_symbol", defaults.currency_symbol),
        volume_unit=display.get("volume_unit", defaults.volume_unit),
        checksum=compute_checksum(data),
        source_path=source_path,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
