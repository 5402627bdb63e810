"""
Parser settings.
Scan budgets and tolerances, overridable through FINSCAN_* environment variables
or a .env file.
"""

import os
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "FINSCAN_"


class ConfigError(ValueError):
    """Raised when a FINSCAN_* setting cannot be parsed."""


@dataclass(frozen=True)
class ParserSettings:
    expected_column_count: int = 9
    max_rows_to_scan: int = 150
    max_columns_to_scan: int = 15
    header_scan_rows: int = 6        # rows 0-5
    min_header_periods: int = 3
    default_header_row: int = 3
    anchor_buffer: int = 1           # rows skipped between consecutive statements
    income_row_budget: int = 150
    balance_sheet_row_budget: int = 60
    cash_flow_row_budget: int = 45
    missing_row_slack: int = 3
    consistency_tolerance: float = 100.0


DEFAULT_SETTINGS = ParserSettings()


def _coerce(name: str, raw: str, template):
    try:
        if isinstance(template, float):
            return float(raw)
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} must be numeric, got {raw!r}") from e


def load_settings(env_file: Optional[Path] = None) -> ParserSettings:
    """
    Build ParserSettings from the environment.
    A .env file (explicit path, or the nearest one found by python-dotenv) is
    loaded first; variables already set in the environment win.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    overrides = {}
    for f in fields(ParserSettings):
        raw = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None or not raw.strip():
            continue
        overrides[f.name] = _coerce(f.name, raw.strip(), f.default)

    if overrides:
        logger.info(f"Parser settings overridden from environment: {sorted(overrides)}")

    settings = ParserSettings(**overrides)
    if settings.expected_column_count < 1:
        raise ConfigError(f"{ENV_PREFIX}EXPECTED_COLUMN_COUNT must be at least 1")
    return settings
