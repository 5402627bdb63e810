"""
Period header detection.

Looks at the first few rows for one that reads like a run of reporting periods
(2023, 2023/24, FY24, Y-1, P+2 ...). Column 0 holds row labels and is never a
period.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from finscan.config import DEFAULT_SETTINGS, ParserSettings

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(
    r"\d{4}/\d{2}|\d{4}-\d{2}|20\d{2}|FY\s?\d{2,4}|Y-\d+|P\+\d+",
    re.IGNORECASE,
)


@dataclass
class PeriodHeaders:
    headers: list[str]
    header_row: int
    detected: bool      # False when the defaults were synthesized


def looks_like_period(text) -> bool:
    if text is None:
        return False
    return bool(PERIOD_PATTERN.search(str(text)))


def _cell_text(value) -> Optional[str]:
    """Render a cell as header text. 2024.0 reads as '2024'."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def default_period_headers(year: Optional[int] = None, count: int = 9) -> list[str]:
    """Sequential years starting three years back: 2021..2029 for 2024."""
    if year is None:
        year = date.today().year
    return [str(year - 3 + i) for i in range(count)]


def detect_period_headers(grid, settings: ParserSettings = DEFAULT_SETTINGS,
                          max_col: Optional[int] = None) -> PeriodHeaders:
    """
    Return the first row among the top header_scan_rows whose cells include at
    least min_header_periods period-like values.
    """
    if max_col is None:
        max_col = min(grid.max_col, settings.max_columns_to_scan)
    last_row = min(settings.header_scan_rows - 1, grid.max_row)

    for row in range(0, last_row + 1):
        values = []
        for col in range(1, max_col + 1):
            text = _cell_text(grid.cell_at(row, col))
            if text is not None:
                values.append(text)

        periods = [v for v in values if looks_like_period(v)]
        if len(periods) >= settings.min_header_periods:
            headers = values[:settings.expected_column_count]
            logger.info(f"Header row found at row {row}: {headers}")
            return PeriodHeaders(headers, row, True)

    headers = default_period_headers(count=settings.expected_column_count)
    logger.warning(f"No header row found, using default periods {headers[0]}-{headers[-1]}")
    return PeriodHeaders(headers, settings.default_header_row, False)
