"""
Cross-statement consistency checks.

Both checks only ever warn: a sheet that does not balance is still a usable
parse. Each period is checked on its own so a warning can name the period.
"""

import logging
import re
from typing import Optional, Sequence

from finscan.models import BalanceSheetRow, CashFlowRow, ConsistencyResult, ParsedFinancialData
from finscan.parser.matching import contains_any

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 100.0

_CLOSING_CASH = re.compile(r"\b(closing|ending)\b|\bend of (the )?(period|year)\b")


def _period_name(column_headers: Optional[Sequence[str]], index: int) -> str:
    if column_headers and index < len(column_headers):
        return str(column_headers[index])
    return f"period {index + 1}"


def _find_total(rows: Sequence[BalanceSheetRow], category: str, patterns: list) -> Optional[BalanceSheetRow]:
    return next(
        (r for r in rows
         if r.category == category and contains_any(r.label, patterns) and not _is_combined_total(r)),
        None,
    )


def _is_combined_total(row: BalanceSheetRow) -> bool:
    """'Total Liabilities and Equity' and its variants: the right-hand side in one row."""
    lower = row.label.lower()
    return "total" in lower and "liabilit" in lower and "equit" in lower


def _find_combined_total(rows: Sequence[BalanceSheetRow]) -> Optional[BalanceSheetRow]:
    return next((r for r in rows if r.category == "liabilities" and _is_combined_total(r)), None)


def _at(values: Sequence[float], index: int) -> float:
    return values[index] if index < len(values) else 0.0


def validate_balance_sheet_equation(balance_sheet: Sequence[BalanceSheetRow],
                                    column_headers: Optional[Sequence[str]] = None,
                                    tolerance: float = DEFAULT_TOLERANCE) -> ConsistencyResult:
    """
    Total Assets = Total Liabilities + Total Equity, per period, within tolerance.
    Without separate liability and equity totals, a combined "Total Liabilities
    and Equity" row stands for the right-hand side.
    """
    if not balance_sheet:
        return ConsistencyResult()

    assets = _find_total(balance_sheet, "assets", ["total assets"])
    liabilities = _find_total(balance_sheet, "liabilities", ["total liabilities"])
    equity = _find_total(balance_sheet, "equity", ["total equity", "total shareholders"])
    combined = _find_combined_total(balance_sheet)

    if liabilities is not None and equity is not None:
        def right_side(i):
            return _at(liabilities.values, i) + _at(equity.values, i)
    elif combined is not None:
        def right_side(i):
            return _at(combined.values, i)
    else:
        right_side = None

    if assets is None or right_side is None:
        missing = [
            name for name, row in
            (("Total Assets", assets), ("Total Liabilities", liabilities), ("Total Equity", equity))
            if row is None
        ]
        logger.info(f"Balance sheet equation not checked, missing {missing}")
        return ConsistencyResult(
            is_valid=False,
            warnings=[f"Cannot validate balance sheet: missing {', '.join(missing)} row"],
        )

    warnings = []
    for i in range(len(assets.values)):
        a = _at(assets.values, i)
        le = right_side(i)
        diff = abs(a - le)
        if diff > tolerance:
            warnings.append(
                f"Balance sheet does not balance for {_period_name(column_headers, i)}: "
                f"assets {a:,.0f} vs liabilities + equity {le:,.0f} (difference {diff:,.0f})"
            )

    if warnings:
        logger.warning(f"Balance sheet equation failed for {len(warnings)} period(s)")
    return ConsistencyResult(is_valid=not warnings, warnings=warnings)


def find_closing_cash_row(cash_flow: Sequence[CashFlowRow]) -> Optional[CashFlowRow]:
    return next((r for r in cash_flow if _CLOSING_CASH.search(r.label.lower())), None)


def find_balance_sheet_cash_row(balance_sheet: Sequence[BalanceSheetRow]) -> Optional[BalanceSheetRow]:
    for r in balance_sheet:
        lower = r.label.lower()
        if r.subcategory == "current" and "cash" in lower and "equivalents" not in lower:
            return r
        if lower.strip() == "cash and cash equivalents":
            return r
    return None


def validate_cash_flow_reconciliation(cash_flow: Sequence[CashFlowRow],
                                      balance_sheet: Sequence[BalanceSheetRow],
                                      column_headers: Optional[Sequence[str]] = None,
                                      tolerance: float = DEFAULT_TOLERANCE) -> ConsistencyResult:
    """
    Closing cash on the cash flow statement against cash on the balance sheet.
    Skipped (valid, no warnings) when either row cannot be found.
    """
    closing = find_closing_cash_row(cash_flow)
    bs_cash = find_balance_sheet_cash_row(balance_sheet)
    if closing is None or bs_cash is None:
        logger.debug("Cash reconciliation skipped, closing cash or balance sheet cash not found")
        return ConsistencyResult()

    warnings = []
    for i in range(len(closing.values)):
        cf_cash = _at(closing.values, i)
        cash = _at(bs_cash.values, i)
        diff = abs(cf_cash - cash)
        if diff > tolerance:
            warnings.append(
                f"Cash flow closing cash does not match balance sheet cash for "
                f"{_period_name(column_headers, i)}: {cf_cash:,.0f} vs {cash:,.0f} "
                f"(difference {diff:,.0f})"
            )

    if warnings:
        logger.warning(f"Cash reconciliation failed for {len(warnings)} period(s)")
    return ConsistencyResult(is_valid=not warnings, warnings=warnings)


def run_consistency_checks(data: ParsedFinancialData,
                           tolerance: float = DEFAULT_TOLERANCE) -> ConsistencyResult:
    """Both checks over a parse result, warnings concatenated."""
    results = [
        validate_balance_sheet_equation(data.balance_sheet, data.column_headers, tolerance),
        validate_cash_flow_reconciliation(
            data.cash_flow, data.balance_sheet, data.column_headers, tolerance
        ),
    ]
    return ConsistencyResult(
        is_valid=all(r.is_valid for r in results),
        warnings=[w for r in results for w in r.warnings],
    )
