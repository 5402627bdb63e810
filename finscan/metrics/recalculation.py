"""
Edits and full recalculation over a parse result.

Nothing here mutates its input: edited rows are copied, recalculated
statements are new lists, and a new ParsedFinancialData is returned.
"""

import logging
from dataclasses import replace
from typing import Optional

from finscan.metrics.calculated_fields import recalculate_income_statement
from finscan.metrics.ratios import recalculate_ratios
from finscan.models import ParsedFinancialData

logger = logging.getLogger(__name__)

EDITABLE_STATEMENTS = ("income_statement", "balance_sheet", "cash_flow")


def _with_ratios(data: ParsedFinancialData) -> ParsedFinancialData:
    if not data.income_statement and not data.balance_sheet:
        return data
    ratios = recalculate_ratios(
        data.income_statement, data.balance_sheet, data.cash_flow, data.financial_ratios
    )
    return replace(data, financial_ratios=ratios)


def recalculate_all(data: ParsedFinancialData) -> ParsedFinancialData:
    """Income statement subtotals first, then every ratio."""
    data = replace(data, income_statement=recalculate_income_statement(data.income_statement))
    return _with_ratios(data)


def apply_cell_edit(data: ParsedFinancialData, statement: str, row_index: int,
                    period_index: int, value: float) -> ParsedFinancialData:
    """
    Set one value on an editable row and return the recalculated result.

    Income statement edits recompute the subtotals and then the ratios;
    balance sheet and cash flow edits recompute the ratios.
    Raises ValueError for an unknown statement, an index out of range, or a
    row the engines derive.
    """
    if statement not in EDITABLE_STATEMENTS:
        raise ValueError(f"Unknown statement '{statement}', expected one of {EDITABLE_STATEMENTS}")

    rows = list(getattr(data, statement))
    if not 0 <= row_index < len(rows):
        raise ValueError(f"Row {row_index} out of range for {statement} ({len(rows)} rows)")
    row = rows[row_index]
    if not row.editable:
        raise ValueError(f"'{row.label}' is calculated and cannot be edited")
    if not 0 <= period_index < len(row.values):
        raise ValueError(f"Period {period_index} out of range ({len(row.values)} periods)")

    values = list(row.values)
    values[period_index] = float(value)
    rows[row_index] = replace(row, values=values)
    logger.debug(f"Edited {statement} '{row.label}' period {period_index}: {value}")

    data = replace(data, **{statement: rows})
    if statement == "income_statement":
        data = replace(data, income_statement=recalculate_income_statement(rows))
    return _with_ratios(data)


def data_completeness(data: ParsedFinancialData, column_count: Optional[int] = None) -> int:
    """Percentage of non-zero cells across all statements and ratios."""
    if not data.income_statement or not data.financial_ratios:
        return 0
    if column_count is None:
        column_count = data.column_count or len(data.column_headers)

    rows = data.income_statement + data.balance_sheet + data.cash_flow + data.financial_ratios
    total_cells = len(rows) * column_count
    if total_cells == 0:
        return 0
    filled = sum(1 for row in rows for v in row.values if v != 0)
    return round(filled / total_cells * 100)
