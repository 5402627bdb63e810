"""
Statement extraction from a cell grid.

One extractor per statement. Each walks a bounded window of rows, lets its
classifier decide what every labelled row is, and emits rows with a value
series normalized to the period count.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from finscan.config import DEFAULT_SETTINGS, ParserSettings
from finscan.metrics.ratios import get_ratio_config
from finscan.models import BalanceSheetRow, CashFlowRow, RatioRow, StatementRow
from finscan.parser.catalogs import (
    CALCULATED_BALANCE_FIELDS,
    CALCULATED_CASH_FLOW_FIELDS,
    CALCULATED_INCOME_FIELDS,
    EXPECTED_INCOME_STATEMENT_ROWS,
    EXPECTED_RATIO_ROWS,
    get_ratio_type,
)
from finscan.parser.classifier import (
    RATIOS,
    BalanceSheetClassifier,
    CashFlowClassifier,
    IncomeClassifier,
    RowPlacement,
    Signal,
)
from finscan.parser.matching import clean_amount, normalize_label

logger = logging.getLogger(__name__)

_INCOME_CALCULATED = {normalize_label(label) for label in CALCULATED_INCOME_FIELDS}
_BALANCE_CALCULATED = {label.lower() for label in CALCULATED_BALANCE_FIELDS}
_CASH_FLOW_CALCULATED = [label.lower() for label in CALCULATED_CASH_FLOW_FIELDS]


# ── Helpers ───────────────────────────────────────────────────────────────────

def normalize_values(values, column_count: int) -> list[float]:
    """Pad with zeros or truncate to exactly column_count values."""
    values = [float(v) for v in values][:column_count]
    return values + [0.0] * (column_count - len(values))


def read_row_values(grid, row: int, column_count: int, max_col: int) -> list[float]:
    last_col = min(column_count, max_col)
    values = [clean_amount(grid.cell_at(row, col)) for col in range(1, last_col + 1)]
    return normalize_values(values, column_count)


def is_calculated_income_field(label: str) -> bool:
    return normalize_label(label) in _INCOME_CALCULATED


def is_calculated_balance_field(label: str) -> bool:
    return str(label).strip().lower() in _BALANCE_CALCULATED


def is_calculated_cash_flow_field(label: str) -> bool:
    lower = str(label).lower()
    return any(field in lower for field in _CASH_FLOW_CALCULATED)


def make_ratio_row(label: str, values: list[float]) -> RatioRow:
    config = get_ratio_config(label)
    if config:
        return RatioRow(label, values, type=config.type, category=config.category)
    return RatioRow(label, values, type=get_ratio_type(label))


@dataclass
class ExtractionResult:
    rows: list
    ratios: list[RatioRow]
    last_row: int                   # last emitted row, start_row - 1 if none
    stopped_at: Optional[int] = None  # row of another statement's header


# ── Extractors ────────────────────────────────────────────────────────────────

class StatementExtractor:
    """Base row loop. Subclasses supply the classifier and the row type."""

    name = "statement"

    def __init__(self, column_count: int = 9, settings: ParserSettings = DEFAULT_SETTINGS):
        self.column_count = column_count
        self.settings = settings

    @property
    def row_budget(self) -> int:
        raise NotImplementedError

    def new_classifier(self):
        raise NotImplementedError

    def make_row(self, placement: RowPlacement, values: list[float]):
        raise NotImplementedError

    def is_done(self, rows: list, ratios: list) -> bool:
        return False

    def extract(self, grid, start_row: int, max_row: Optional[int] = None,
                max_col: Optional[int] = None) -> ExtractionResult:
        if max_row is None:
            max_row = min(grid.max_row, self.settings.max_rows_to_scan - 1)
        if max_col is None:
            max_col = min(grid.max_col, self.settings.max_columns_to_scan)
        end_row = min(start_row + self.row_budget - 1, max_row)

        classifier = self.new_classifier()
        rows, ratios = [], []
        last_row = start_row - 1
        stopped_at = None

        for r in range(max(start_row, 0), end_row + 1):
            raw_label = grid.cell_at(r, 0)
            label = "" if raw_label is None else str(raw_label).strip()
            if not label:
                continue

            values = read_row_values(grid, r, self.column_count, max_col)
            has_values = any(v != 0 for v in values)

            signal = classifier.observe(label, has_values)
            if signal is Signal.STOP:
                stopped_at = r
                break
            if signal is Signal.HEADER:
                continue

            placement = classifier.place(label)
            if placement is None:
                continue
            # Unmatched rows need at least one non-zero value to count
            if not (placement.matched or has_values):
                continue

            if placement.target == RATIOS:
                ratios.append(make_ratio_row(placement.label, values))
            else:
                rows.append(self.make_row(placement, values))
            last_row = r

            if self.is_done(rows, ratios):
                logger.debug(f"{self.name}: all expected rows found by row {r}")
                break

        logger.info(
            f"{self.name}: {len(rows)} rows, {len(ratios)} ratios "
            f"from rows {start_row}-{last_row}"
        )
        return ExtractionResult(rows, ratios, last_row, stopped_at)


class IncomeStatementExtractor(StatementExtractor):
    """First pass over a sheet: the income statement and the ratio block."""

    name = "Income statement"

    @property
    def row_budget(self) -> int:
        return self.settings.income_row_budget

    def new_classifier(self):
        return IncomeClassifier()

    def make_row(self, placement, values):
        return StatementRow(
            placement.label, values, editable=not is_calculated_income_field(placement.label)
        )

    def is_done(self, rows, ratios):
        return (len(rows) >= len(EXPECTED_INCOME_STATEMENT_ROWS)
                and len(ratios) >= len(EXPECTED_RATIO_ROWS))


class BalanceSheetExtractor(StatementExtractor):
    name = "Balance sheet"

    @property
    def row_budget(self) -> int:
        return self.settings.balance_sheet_row_budget

    def new_classifier(self):
        return BalanceSheetClassifier()

    def make_row(self, placement, values):
        return BalanceSheetRow(
            placement.label,
            values,
            editable=not is_calculated_balance_field(placement.label),
            category=placement.category,
            subcategory=placement.subcategory,
        )


class CashFlowExtractor(StatementExtractor):
    name = "Cash flow"

    @property
    def row_budget(self) -> int:
        return self.settings.cash_flow_row_budget

    def new_classifier(self):
        return CashFlowClassifier()

    def make_row(self, placement, values):
        return CashFlowRow(
            placement.label,
            values,
            editable=not is_calculated_cash_flow_field(placement.label),
            category=placement.category,
        )
