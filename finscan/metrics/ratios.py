"""
Financial ratio engine.

Every ratio is a registry entry with a formula evaluated per period against a
read-only view of the three statements. A formula that raises or returns a
non-finite number never aborts the batch: that period falls back to the
previous ratio value, or 0.

Sign convention: costs and expenses are stored as negative numbers so they can
be added straight onto revenue.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from finscan.models import BalanceSheetRow, CashFlowRow, RatioRow, StatementRow
from finscan.parser.catalogs import (
    ADMIN_EXPENSES,
    COST_OF_SALES,
    COST_TO_INCOME,
    CREDITORS_DAYS,
    CURRENT_RATIO,
    DEBT_EQUITY,
    DEBTORS_DAYS,
    EBITDA,
    EQUITY_VALUE,
    EXPECTED_BALANCE_SHEET_ROWS,
    EXPECTED_CASH_FLOW_ROWS,
    EXPECTED_INCOME_STATEMENT_ROWS,
    EXPECTED_RATIO_ROWS,
    FINANCE_COST,
    GROSS_MARGIN,
    GROSS_PROFIT,
    INTEREST_COVER,
    NET_MARGIN,
    OPERATING_MARGIN,
    OTHER_OPEX,
    PROFIT_BEFORE_TAX,
    PROFIT_FOR_PERIOD,
    QUICK_RATIO,
    REVENUE,
    ROA,
    ROE,
    ROI,
    SALARIES,
    SALES_GROWTH,
    TOTAL_ASSETS,
    TOTAL_LIABILITIES,
)
from finscan.parser.matching import find_exact_label, fuzzy_match, normalize_label

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_COUNT = 9
DAYS_IN_YEAR = 365

_CANONICAL = {
    normalize_label(label)
    for rows in (EXPECTED_INCOME_STATEMENT_ROWS, EXPECTED_RATIO_ROWS,
                 EXPECTED_BALANCE_SHEET_ROWS, EXPECTED_CASH_FLOW_ROWS)
    for label in rows
}


# ── Data structures ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FinancialDataContext:
    """Read-only view of the statements handed to every formula."""
    income_statement: tuple = ()
    balance_sheet: tuple = ()
    cash_flow: tuple = ()
    column_count: int = DEFAULT_COLUMN_COUNT


@dataclass(frozen=True)
class RatioFormulaConfig:
    id: str
    label: str
    type: str                # 'percentage', 'ratio', 'currency'
    category: str            # 'profitability', 'liquidity', 'leverage', 'efficiency', 'growth'
    depends_on: tuple        # of 'income', 'balance', 'cashflow'
    description: str
    formula: Callable[[FinancialDataContext, int], float]


# ── Helpers ───────────────────────────────────────────────────────────────────

def _safe_div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def _pct(numerator: float, denominator: float) -> float:
    return _safe_div(numerator, denominator) * 100


def _value_at(row: Optional[StatementRow], col: int) -> float:
    if row is None or col >= len(row.values):
        return 0.0
    return row.values[col]


def find_row(rows: Sequence[StatementRow], label: str) -> Optional[StatementRow]:
    """
    Exact label first, then the first fuzzy match in statement order.
    A canonical label never fuzzy-matches a row stored under a different
    canonical label: a missing "Other Operating Expenses (Excl depreciation &
    amortisation)" row must not pick up "Depreciation & Amortisation".
    """
    exact = find_exact_label(label, [r.label for r in rows])
    if exact is not None:
        return next(r for r in rows if r.label == exact)
    candidates = rows
    if normalize_label(label) in _CANONICAL:
        candidates = [r for r in rows if normalize_label(r.label) not in _CANONICAL]
    return next((r for r in candidates if fuzzy_match(r.label, label)), None)


# ── Statement lookups ─────────────────────────────────────────────────────────

def get_income_value(ctx: FinancialDataContext, label: str, col: int) -> float:
    return _value_at(find_row(ctx.income_statement, label), col)


def get_balance_value(ctx: FinancialDataContext, category: str, pattern: str, col: int) -> float:
    """Value of the first row in a balance sheet category whose label matches pattern."""
    rows = [r for r in ctx.balance_sheet if r.category == category]
    return _value_at(find_row(rows, pattern), col)


def get_balance_row_value(ctx: FinancialDataContext, label: str, col: int) -> float:
    return _value_at(find_row(ctx.balance_sheet, label), col)


def get_balance_subcategory_total(ctx: FinancialDataContext, category: str,
                                  subcategory: str, col: int) -> float:
    """
    Explicit total row for the bucket if there is one, otherwise the sum of
    the bucket's non-total rows. Sheets without subtotal rows still work.
    """
    bucket = [
        r for r in ctx.balance_sheet
        if r.category == category and r.subcategory == subcategory
    ]
    for row in bucket:
        if "total" in row.label.lower():
            return _value_at(row, col)
    return sum(_value_at(r, col) for r in bucket if "total" not in r.label.lower())


def get_cash_flow_value(ctx: FinancialDataContext, label: str, col: int) -> float:
    return _value_at(find_row(ctx.cash_flow, label), col)


def _net_profit(ctx, col):
    return get_income_value(ctx, PROFIT_FOR_PERIOD, col) or get_income_value(ctx, PROFIT_BEFORE_TAX, col)


def _total_equity(ctx, col):
    return get_balance_value(ctx, "equity", "Total", col)


# ── Formulas ──────────────────────────────────────────────────────────────────

def _roe(ctx, col):
    return _pct(_net_profit(ctx, col), _total_equity(ctx, col))


def _roa(ctx, col):
    return _pct(_net_profit(ctx, col), get_balance_value(ctx, "assets", TOTAL_ASSETS, col))


def _gross_margin(ctx, col):
    return _pct(get_income_value(ctx, GROSS_PROFIT, col), get_income_value(ctx, REVENUE, col))


def _operating_margin(ctx, col):
    return _pct(get_income_value(ctx, EBITDA, col), get_income_value(ctx, REVENUE, col))


def _net_margin(ctx, col):
    return _pct(_net_profit(ctx, col), get_income_value(ctx, REVENUE, col))


def _current_ratio(ctx, col):
    current_assets = get_balance_subcategory_total(ctx, "assets", "current", col)
    current_liabilities = get_balance_subcategory_total(ctx, "liabilities", "current", col)
    return _safe_div(current_assets, abs(current_liabilities))


def _quick_ratio(ctx, col):
    current_assets = get_balance_subcategory_total(ctx, "assets", "current", col)
    inventory = get_balance_row_value(ctx, "Inventor", col)     # Inventory / Inventories
    current_liabilities = get_balance_subcategory_total(ctx, "liabilities", "current", col)
    return _safe_div(current_assets - inventory, abs(current_liabilities))


def _debt_equity(ctx, col):
    total_liabilities = get_balance_value(ctx, "liabilities", TOTAL_LIABILITIES, col)
    return _safe_div(abs(total_liabilities), _total_equity(ctx, col))


def _interest_cover(ctx, col):
    finance_cost = get_income_value(ctx, FINANCE_COST, col)
    return _safe_div(get_income_value(ctx, EBITDA, col), abs(finance_cost))


def _cost_to_income(ctx, col):
    costs = (
        abs(get_income_value(ctx, ADMIN_EXPENSES, col))
        + abs(get_income_value(ctx, OTHER_OPEX, col))
        + abs(get_income_value(ctx, SALARIES, col))
    )
    return _pct(costs, get_income_value(ctx, REVENUE, col))


def _roi(ctx, col):
    return _pct(_net_profit(ctx, col), _total_equity(ctx, col))


def _sales_growth(ctx, col):
    if col == 0:
        return 0.0
    current = get_income_value(ctx, REVENUE, col)
    prior = get_income_value(ctx, REVENUE, col - 1)
    return _pct(current - prior, abs(prior))


def _equity_value(ctx, col):
    return _total_equity(ctx, col)


def _debtors_days(ctx, col):
    receivables = get_balance_row_value(ctx, "receivables", col)
    return _safe_div(receivables, get_income_value(ctx, REVENUE, col)) * DAYS_IN_YEAR


def _creditors_days(ctx, col):
    payables = get_balance_row_value(ctx, "payables", col)
    cost_of_sales = get_income_value(ctx, COST_OF_SALES, col)
    return _safe_div(abs(payables), abs(cost_of_sales)) * DAYS_IN_YEAR


# ── Registry ──────────────────────────────────────────────────────────────────

RATIO_FORMULAS = (
    RatioFormulaConfig("roe", ROE, "percentage", "profitability", ("income", "balance"),
                       "Net Profit / Total Equity", _roe),
    RatioFormulaConfig("roa", ROA, "percentage", "profitability", ("income", "balance"),
                       "Net Profit / Total Assets", _roa),
    RatioFormulaConfig("gross_margin", GROSS_MARGIN, "percentage", "profitability", ("income",),
                       "Gross Profit / Revenue", _gross_margin),
    RatioFormulaConfig("operating_margin", OPERATING_MARGIN, "percentage", "profitability", ("income",),
                       "EBITDA / Revenue", _operating_margin),
    RatioFormulaConfig("net_margin", NET_MARGIN, "percentage", "profitability", ("income",),
                       "Net Profit / Revenue", _net_margin),
    RatioFormulaConfig("current_ratio", CURRENT_RATIO, "ratio", "liquidity", ("balance",),
                       "Current Assets / Current Liabilities", _current_ratio),
    RatioFormulaConfig("quick_ratio", QUICK_RATIO, "ratio", "liquidity", ("balance",),
                       "(Current Assets - Inventory) / Current Liabilities", _quick_ratio),
    RatioFormulaConfig("debt_equity", DEBT_EQUITY, "ratio", "leverage", ("balance",),
                       "Total Liabilities / Total Equity", _debt_equity),
    RatioFormulaConfig("interest_coverage", INTEREST_COVER, "ratio", "leverage", ("income",),
                       "EBITDA / Finance Costs", _interest_cover),
    RatioFormulaConfig("cost_income", COST_TO_INCOME, "percentage", "efficiency", ("income",),
                       "Operating Costs / Revenue", _cost_to_income),
    RatioFormulaConfig("roi", ROI, "percentage", "efficiency", ("income", "balance"),
                       "Net Profit / Total Equity", _roi),
    RatioFormulaConfig("sales_growth", SALES_GROWTH, "percentage", "growth", ("income",),
                       "(Current Revenue - Prior Revenue) / Prior Revenue", _sales_growth),
    RatioFormulaConfig("equity_value", EQUITY_VALUE, "currency", "efficiency", ("balance",),
                       "Total Equity", _equity_value),
    RatioFormulaConfig("debtors_days", DEBTORS_DAYS, "ratio", "efficiency", ("income", "balance"),
                       "Trade Receivables / Revenue x 365", _debtors_days),
    RatioFormulaConfig("creditors_days", CREDITORS_DAYS, "ratio", "efficiency", ("income", "balance"),
                       "Trade Payables / Cost of Sales x 365", _creditors_days),
)

_BY_LABEL = {f.label: f for f in RATIO_FORMULAS}


def get_ratio_config(label: str) -> Optional[RatioFormulaConfig]:
    return _BY_LABEL.get(label)


def get_ratios_by_category() -> dict[str, list[RatioFormulaConfig]]:
    grouped: dict[str, list[RatioFormulaConfig]] = {}
    for config in RATIO_FORMULAS:
        grouped.setdefault(config.category, []).append(config)
    return grouped


# ── Engine ────────────────────────────────────────────────────────────────────

def _resolve_column_count(income, balance_sheet, cash_flow) -> int:
    for rows in (income, balance_sheet, cash_flow):
        if rows and rows[0].values:
            return len(rows[0].values)
    return DEFAULT_COLUMN_COUNT


def _fallback(existing: Optional[RatioRow], col: int) -> float:
    if existing is None or col >= len(existing.values):
        return 0.0
    value = existing.values[col]
    return value if math.isfinite(value) else 0.0


def recalculate_ratios(income: Sequence[StatementRow],
                       balance_sheet: Sequence[BalanceSheetRow],
                       cash_flow: Sequence[CashFlowRow],
                       existing_ratios: Sequence[RatioRow] = (),
                       column_count: Optional[int] = None) -> list[RatioRow]:
    """
    Evaluate every registry ratio for every period.
    Ratios in existing_ratios that the registry does not know are appended
    after the registry ratios, as copies.
    """
    if column_count is None:
        column_count = _resolve_column_count(income, balance_sheet, cash_flow)

    ctx = FinancialDataContext(
        tuple(income), tuple(balance_sheet), tuple(cash_flow), column_count
    )
    existing_by_label = {}
    for r in existing_ratios:
        existing_by_label.setdefault(r.label, r)

    ratios = []
    for config in RATIO_FORMULAS:
        existing = existing_by_label.get(config.label)
        values = []
        for col in range(column_count):
            try:
                value = float(config.formula(ctx, col))
            except Exception as e:
                logger.warning(f"Error calculating {config.label} for period {col}: {e}")
                value = _fallback(existing, col)
            else:
                if not math.isfinite(value):
                    logger.warning(f"{config.label} is not finite for period {col}, using fallback")
                    value = _fallback(existing, col)
            values.append(value)

        ratios.append(RatioRow(
            config.label, values, editable=False, type=config.type, category=config.category,
        ))

    custom = [
        replace(r, values=list(r.values))
        for r in existing_ratios if r.label not in _BY_LABEL
    ]
    if custom:
        logger.debug(f"Keeping {len(custom)} custom ratios: {[r.label for r in custom]}")
    return ratios + custom
