"""
Row classification for the statement scans.

Each statement pass owns one classifier object. The extractor feeds it every
labelled row in order: observe() consumes section headers and reports when the
scan has walked into another statement, place() decides where a data row goes
and under which label.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from finscan.parser.catalogs import (
    BALANCE_SHEET_CATALOG,
    BALANCE_SHEET_HEADERS,
    BS_EXACT_HEADERS,
    BS_SUBSECTION_HEADERS,
    CASH_FLOW_CATALOG,
    CASH_FLOW_HEADERS,
    CF_ACTIVITY_HEADERS,
    CF_EXACT_HEADERS,
    EXPECTED_INCOME_STATEMENT_ROWS,
    EXPECTED_RATIO_ROWS,
    INCOME_SECTION_HEADERS,
    INCOME_STATEMENT_EXACT_TITLES,
    INCOME_STATEMENT_TITLES,
    NEUTRAL_HEADERS,
    RATIO_SECTION_HEADERS,
)
from finscan.parser.matching import (
    contains_any,
    find_exact_label,
    find_matching_label,
    normalize_label,
    resolve_label,
)

logger = logging.getLogger(__name__)

STATEMENT = "statement"
RATIOS = "ratios"

_BS_EXACT = {normalize_label(k): v for k, v in BS_EXACT_HEADERS.items()}
_CF_EXACT = {normalize_label(k): v for k, v in CF_EXACT_HEADERS.items()}
_INCOME_EXACT_TITLES = {normalize_label(t) for t in INCOME_STATEMENT_EXACT_TITLES}
_BS_BY_LABEL = {e.label: e for e in BALANCE_SHEET_CATALOG}
_CF_BY_LABEL = {e.label: e for e in CASH_FLOW_CATALOG}


class Signal(Enum):
    ROW = "row"         # data row, go on to place()
    HEADER = "header"   # section header consumed, nothing to emit
    STOP = "stop"       # another statement starts here


@dataclass
class RowPlacement:
    target: str                         # STATEMENT or RATIOS
    label: str
    matched: bool                       # label came from a catalog
    category: Optional[str] = None
    subcategory: Optional[str] = None


def _is_header_candidate(label: str) -> bool:
    # "Total current assets" is a subtotal, never a section header
    return "total" not in str(label).lower()


def _is_income_title(label: str) -> bool:
    return (contains_any(label, INCOME_STATEMENT_TITLES)
            or normalize_label(label) in _INCOME_EXACT_TITLES)


def _header_signal(has_values: bool) -> Signal:
    return Signal.ROW if has_values else Signal.HEADER


def _ratio_placement(label: str) -> RowPlacement:
    canonical = resolve_label(label, EXPECTED_RATIO_ROWS)
    if canonical:
        return RowPlacement(RATIOS, canonical, True)
    return RowPlacement(RATIOS, str(label).strip(), False)


# ── Income statement + ratios ─────────────────────────────────────────────────

class IncomeClassifier:
    """
    Tracks whether the scan is inside the income statement or the ratio block.

    The first pass over a sheet reads both: rows are placed by catalog match
    where possible and by the current section otherwise. A balance sheet or
    cash flow header ends the pass.
    """

    def __init__(self):
        self.section = "unknown"    # 'unknown', 'income', 'ratios'

    def observe(self, label: str, has_values: bool) -> Signal:
        if not _is_header_candidate(label):
            return Signal.ROW
        if contains_any(label, NEUTRAL_HEADERS):
            return Signal.HEADER
        if not has_values and self._other_statement(label):
            logger.debug(f"Income pass stops at '{label}'")
            return Signal.STOP
        if contains_any(label, RATIO_SECTION_HEADERS):
            self._enter("ratios")
            return _header_signal(has_values)
        if contains_any(label, INCOME_SECTION_HEADERS):
            self._enter("income")
            return _header_signal(has_values)
        return Signal.ROW

    def _enter(self, section: str):
        if section != self.section:
            logger.debug(f"Income pass section: {self.section} -> {section}")
        self.section = section

    @staticmethod
    def _other_statement(label: str) -> bool:
        return contains_any(label, BALANCE_SHEET_HEADERS) or contains_any(label, CASH_FLOW_HEADERS)

    def place(self, label: str) -> Optional[RowPlacement]:
        catalogs = [(STATEMENT, EXPECTED_INCOME_STATEMENT_ROWS), (RATIOS, EXPECTED_RATIO_ROWS)]
        if self.section == "ratios":
            catalogs.reverse()

        for target, rows in catalogs:
            canonical = find_exact_label(label, rows)
            if canonical:
                return RowPlacement(target, canonical, True)

        # Fuzzy matching stays inside the current section once one is known,
        # otherwise "Sales" would land on "Sales Growth"
        if self.section == "unknown":
            fuzzy_catalogs = catalogs
        else:
            fuzzy_catalogs = catalogs[:1]
        for target, rows in fuzzy_catalogs:
            canonical = find_matching_label(label, rows)
            if canonical:
                return RowPlacement(target, canonical, True)

        if self.section == "income":
            return RowPlacement(STATEMENT, str(label).strip(), False)
        if self.section == "ratios":
            return RowPlacement(RATIOS, str(label).strip(), False)
        return None


# ── Balance sheet ─────────────────────────────────────────────────────────────

class BalanceSheetClassifier:
    """
    Category/subcategory state for the balance sheet scan.

    Subsection headers are checked non-current first, since "non-current
    assets" also contains "current asset".
    """

    def __init__(self):
        self.category: Optional[str] = None
        self.subcategory: Optional[str] = None
        self.mode = STATEMENT

    def observe(self, label: str, has_values: bool) -> Signal:
        if not _is_header_candidate(label):
            return Signal.ROW
        if contains_any(label, NEUTRAL_HEADERS):
            return Signal.HEADER
        if not has_values and self._other_statement(label):
            logger.debug(f"Balance sheet pass stops at '{label}'")
            return Signal.STOP
        if contains_any(label, BALANCE_SHEET_HEADERS):
            self.mode = STATEMENT
            self._set(None, None)
            return _header_signal(has_values)
        if contains_any(label, RATIO_SECTION_HEADERS):
            logger.debug("Balance sheet pass entering ratio block")
            self.mode = RATIOS
            return _header_signal(has_values)

        for fragments, category, subcategory in BS_SUBSECTION_HEADERS:
            if contains_any(label, fragments):
                self.mode = STATEMENT
                self._set(category, subcategory)
                return _header_signal(has_values)

        key = normalize_label(label)
        if key in _BS_EXACT:
            self.mode = STATEMENT
            self._set(*_BS_EXACT[key])
            return _header_signal(has_values)
        return Signal.ROW

    def _set(self, category: Optional[str], subcategory: Optional[str]):
        if (category, subcategory) != (self.category, self.subcategory):
            logger.debug(f"Balance sheet section: {category}/{subcategory}")
        self.category = category
        self.subcategory = subcategory

    @staticmethod
    def _other_statement(label: str) -> bool:
        return contains_any(label, CASH_FLOW_HEADERS) or _is_income_title(label)

    def place(self, label: str) -> Optional[RowPlacement]:
        if self.mode == RATIOS:
            return _ratio_placement(label)

        canonical = resolve_label(label, _BS_BY_LABEL)
        if canonical:
            entry = _BS_BY_LABEL[canonical]
            return RowPlacement(STATEMENT, canonical, True, entry.category, entry.subcategory)

        if self.category is None:
            return None
        return RowPlacement(STATEMENT, str(label).strip(), False, self.category, self.subcategory)


# ── Cash flow ─────────────────────────────────────────────────────────────────

class CashFlowClassifier:
    """Activity state for the cash flow scan. Rows before any header count as operating."""

    def __init__(self):
        self.category = "operating"
        self.mode = STATEMENT

    def observe(self, label: str, has_values: bool) -> Signal:
        if not _is_header_candidate(label):
            return Signal.ROW
        if contains_any(label, NEUTRAL_HEADERS):
            return Signal.HEADER
        if not has_values and self._other_statement(label):
            logger.debug(f"Cash flow pass stops at '{label}'")
            return Signal.STOP
        if contains_any(label, CASH_FLOW_HEADERS):
            self.mode = STATEMENT
            return _header_signal(has_values)
        if contains_any(label, RATIO_SECTION_HEADERS):
            logger.debug("Cash flow pass entering ratio block")
            self.mode = RATIOS
            return _header_signal(has_values)

        for fragments, category in CF_ACTIVITY_HEADERS:
            if contains_any(label, fragments):
                self.mode = STATEMENT
                self._set(category)
                return _header_signal(has_values)

        key = normalize_label(label)
        if key in _CF_EXACT:
            self.mode = STATEMENT
            self._set(_CF_EXACT[key])
            return _header_signal(has_values)
        return Signal.ROW

    def _set(self, category: str):
        if category != self.category:
            logger.debug(f"Cash flow section: {self.category} -> {category}")
        self.category = category

    @staticmethod
    def _other_statement(label: str) -> bool:
        return contains_any(label, BALANCE_SHEET_HEADERS) or _is_income_title(label)

    def place(self, label: str) -> Optional[RowPlacement]:
        if self.mode == RATIOS:
            return _ratio_placement(label)

        canonical = resolve_label(label, _CF_BY_LABEL)
        if canonical:
            return RowPlacement(STATEMENT, canonical, True, _CF_BY_LABEL[canonical].category)
        return RowPlacement(STATEMENT, str(label).strip(), False, self.category)
