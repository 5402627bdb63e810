"""Tests for the ratio registry and engine."""

from __future__ import annotations

import pytest

from finscan.metrics import ratios
from finscan.metrics.ratios import (
    FinancialDataContext,
    RatioFormulaConfig,
    get_balance_subcategory_total,
    get_ratio_config,
    get_ratios_by_category,
    recalculate_ratios,
)
from finscan.models import BalanceSheetRow, RatioRow, StatementRow
from finscan.parser.catalogs import EXPECTED_RATIO_ROWS


def _values(result, label):
    return next(r.values for r in result if r.label == label)


@pytest.fixture
def income():
    return [
        StatementRow("Revenue", [100.0, 120.0]),
        StatementRow("Cost of sales", [-40.0, -60.0]),
        StatementRow("Gross Profit", [60.0, 60.0], editable=False),
        StatementRow("EBITDA", [30.0, 24.0], editable=False),
        StatementRow("Finances Cost", [-10.0, 0.0]),
        StatementRow("Profit/(Loss) for the period", [15.0, 12.0]),
    ]


@pytest.fixture
def balance_sheet():
    return [
        BalanceSheetRow("Inventory", [20.0, 20.0], category="assets", subcategory="current"),
        BalanceSheetRow("Trade and other receivables", [30.0, 30.0], category="assets", subcategory="current"),
        BalanceSheetRow("Cash and cash equivalents", [100.0, 100.0], category="assets", subcategory="current"),
        BalanceSheetRow("Total Assets", [300.0, 300.0], False, "assets"),
        BalanceSheetRow("Trade and other payables", [75.0, 75.0], category="liabilities", subcategory="current"),
        BalanceSheetRow("Total Liabilities", [150.0, 150.0], False, "liabilities"),
        BalanceSheetRow("Share capital", [100.0, 100.0], category="equity"),
        BalanceSheetRow("Total Equity", [150.0, 150.0], False, "equity"),
    ]


def test_registry_covers_ratio_catalog():
    assert [get_ratio_config(label).label for label in EXPECTED_RATIO_ROWS] == list(EXPECTED_RATIO_ROWS)
    grouped = get_ratios_by_category()
    assert set(grouped) == {"profitability", "liquidity", "leverage", "efficiency", "growth"}
    assert get_ratio_config("Not a ratio") is None


def test_one_row_per_ratio_per_period(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    assert [r.label for r in result] == list(EXPECTED_RATIO_ROWS)
    assert all(len(r.values) == 2 for r in result)
    assert not any(r.editable for r in result)


def test_sales_growth(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    assert _values(result, "Sales Growth") == pytest.approx([0.0, 20.0])


def test_profitability_and_leverage(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    assert _values(result, "Gross profit margin") == pytest.approx([60.0, 50.0])
    assert _values(result, "Return on Equity (ROE)") == pytest.approx([10.0, 8.0])
    assert _values(result, "Return on Assets (ROA)") == pytest.approx([5.0, 4.0])
    assert _values(result, "Debt Equity Ratio (Total liabilities)") == pytest.approx([1.0, 1.0])
    assert _values(result, "Equity Investment Value") == pytest.approx([150.0, 150.0])


def test_liquidity_sums_bucket_without_total_row(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    assert _values(result, "Current Ratio") == pytest.approx([2.0, 2.0])
    assert _values(result, "Acid Test Ratio (Quick Ratio)") == pytest.approx([130 / 75, 130 / 75])


def test_efficiency_days(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    assert _values(result, "Debtors Days")[0] == pytest.approx(30 / 100 * 365)
    assert _values(result, "Creditors Days")[0] == pytest.approx(75 / 40 * 365)


def test_zero_denominator_is_zero(income, balance_sheet):
    result = recalculate_ratios(income, balance_sheet, [])
    # Finances Cost is 0 in the second period
    assert _values(result, "Interest Cover Ratio") == pytest.approx([3.0, 0.0])


def test_empty_inputs_give_zeros_for_default_periods():
    result = recalculate_ratios([], [], [])
    assert len(result) == len(EXPECTED_RATIO_ROWS)
    assert all(r.values == [0.0] * 9 for r in result)


def test_period_count_taken_from_balance_sheet_without_income(balance_sheet):
    result = recalculate_ratios([], balance_sheet, [])
    assert all(len(r.values) == 2 for r in result)
    assert _values(result, "Current Ratio") == pytest.approx([2.0, 2.0])


def test_custom_ratio_preserved_after_registry(income, balance_sheet):
    custom = RatioRow("EBITDA per employee", [1.5, 2.5], type="currency")
    result = recalculate_ratios(income, balance_sheet, [], [custom])
    assert result[-1].label == "EBITDA per employee"
    assert result[-1].values == [1.5, 2.5]
    assert result[-1] is not custom


def test_subcategory_total_sums_items():
    ctx = FinancialDataContext(balance_sheet=(
        BalanceSheetRow("Inventory", [50.0], category="assets", subcategory="current"),
        BalanceSheetRow("Cash", [100.0], category="assets", subcategory="current"),
        BalanceSheetRow("Land", [999.0], category="assets", subcategory="non-current"),
    ))
    assert get_balance_subcategory_total(ctx, "assets", "current", 0) == 150.0


def test_subcategory_total_prefers_total_row():
    ctx = FinancialDataContext(balance_sheet=(
        BalanceSheetRow("Inventory", [50.0], category="assets", subcategory="current"),
        BalanceSheetRow("Total Current Assets", [175.0], category="assets", subcategory="current"),
    ))
    assert get_balance_subcategory_total(ctx, "assets", "current", 0) == 175.0


def test_failing_formula_falls_back_to_existing_value(monkeypatch, income):
    def boom(ctx, col):
        raise KeyError("missing")

    config = RatioFormulaConfig("boom", "Current Ratio", "ratio", "liquidity", ("balance",), "", boom)
    monkeypatch.setattr(ratios, "RATIO_FORMULAS", (config,))

    existing = [RatioRow("Current Ratio", [1.25, float("nan")])]
    result = recalculate_ratios(income, [], [], existing)
    assert result[0].values == [1.25, 0.0]


def test_non_finite_result_falls_back_to_zero(monkeypatch, income):
    config = RatioFormulaConfig(
        "inf", "Current Ratio", "ratio", "liquidity", ("balance",), "", lambda ctx, col: float("inf")
    )
    monkeypatch.setattr(ratios, "RATIO_FORMULAS", (config,))
    result = recalculate_ratios(income, [], [])
    assert result[0].values == [0.0, 0.0]
