"""
Income statement subtotals derived from their component rows.

The registry is ordered so each formula can read a subtotal recomputed earlier
in the same pass: Gross Profit feeds EBITDA, EBITDA feeds Profit before tax.
"""

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from finscan.metrics.ratios import find_row
from finscan.models import StatementRow
from finscan.parser.catalogs import (
    ADMIN_EXPENSES,
    CALCULATED_BALANCE_FIELDS,
    CALCULATED_CASH_FLOW_FIELDS,
    CALCULATED_INCOME_FIELDS,
    COST_OF_SALES,
    DEPRECIATION,
    EBITDA,
    FINANCE_COST,
    GROSS_PROFIT,
    INTEREST_INCOME,
    OTHER_OPEX,
    PROFIT_BEFORE_TAX,
    REVENUE,
    SALARIES,
)
from finscan.parser.matching import find_exact_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculatedField:
    label: str
    inputs: tuple       # labels summed to produce the field

    def compute(self, rows: Sequence[StatementRow], col: int) -> float:
        # Expenses are stored negative, so every subtotal is a plain sum
        return sum(find_row_value(rows, label, col) for label in self.inputs)


INCOME_CALCULATED_FIELDS = (
    CalculatedField(GROSS_PROFIT, (REVENUE, COST_OF_SALES)),
    CalculatedField(EBITDA, (GROSS_PROFIT, ADMIN_EXPENSES, OTHER_OPEX, SALARIES)),
    CalculatedField(PROFIT_BEFORE_TAX, (EBITDA, INTEREST_INCOME, FINANCE_COST, DEPRECIATION)),
)


def find_row_value(rows: Sequence[StatementRow], label: str, col: int) -> float:
    row = find_row(rows, label)
    if row is None or col >= len(row.values):
        return 0.0
    return row.values[col]


def recalculate_income_statement(rows: Sequence[StatementRow]) -> list[StatementRow]:
    """
    Recompute Gross Profit, EBITDA and Profit before tax where those rows exist.

    Returns a new list; recomputed rows are new objects and every other row is
    passed through. Missing input rows read as 0, and missing subtotal rows are
    never added.
    """
    result = list(rows)
    for calc in INCOME_CALCULATED_FIELDS:
        target = find_exact_label(calc.label, [r.label for r in result])
        if target is None:
            continue
        missing = [label for label in calc.inputs if find_row(result, label) is None]
        if missing:
            logger.debug(f"{calc.label}: no row for {missing}, read as 0")

        index = next(i for i, r in enumerate(result) if r.label == target)
        row = result[index]
        values = [calc.compute(result, col) for col in range(len(row.values))]
        result[index] = replace(row, values=values)
    return result


def get_calculated_fields() -> dict[str, list[str]]:
    """Labels the engines derive, per statement. These rows are not user-editable."""
    return {
        "income_statement": list(CALCULATED_INCOME_FIELDS),
        "balance_sheet": list(CALCULATED_BALANCE_FIELDS),
        "cash_flow": list(CALCULATED_CASH_FLOW_FIELDS),
    }
