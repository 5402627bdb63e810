"""Tests for the balance sheet equation and cash reconciliation checks."""

from __future__ import annotations

from finscan.metrics.consistency import (
    find_balance_sheet_cash_row,
    find_closing_cash_row,
    run_consistency_checks,
    validate_balance_sheet_equation,
    validate_cash_flow_reconciliation,
)
from finscan.models import BalanceSheetRow, CashFlowRow, ParsedFinancialData


def _balance_sheet(assets, liabilities, equity):
    return [
        BalanceSheetRow("Cash and cash equivalents", [250.0] * len(assets), category="assets", subcategory="current"),
        BalanceSheetRow("Total Assets", assets, False, "assets"),
        BalanceSheetRow("Total Liabilities", liabilities, False, "liabilities"),
        BalanceSheetRow("Total Equity", equity, False, "equity"),
    ]


def test_balanced_within_tolerance():
    bs = _balance_sheet([1000.0, 2000.0], [400.0, 900.0], [650.0, 1100.0])
    result = validate_balance_sheet_equation(bs, ["2023", "2024"])
    assert result.is_valid
    assert result.warnings == []


def test_difference_above_tolerance_warns_for_that_period():
    bs = _balance_sheet([1000.0, 2000.0], [400.0, 900.0], [600.0, 950.0])
    result = validate_balance_sheet_equation(bs, ["2023", "2024"])
    assert not result.is_valid
    assert len(result.warnings) == 1
    assert "2024" in result.warnings[0]
    assert "150" in result.warnings[0]


def test_tolerance_is_configurable():
    bs = _balance_sheet([1000.0], [400.0], [550.0])
    assert validate_balance_sheet_equation(bs, tolerance=100.0).is_valid
    assert not validate_balance_sheet_equation(bs, tolerance=10.0).is_valid


def test_period_named_by_position_without_headers():
    bs = _balance_sheet([1000.0, 2000.0], [400.0, 400.0], [600.0, 600.0])
    result = validate_balance_sheet_equation(bs)
    assert "period 2" in result.warnings[0]


def test_missing_totals_reported_once():
    bs = [BalanceSheetRow("Total Assets", [1000.0, 1000.0], False, "assets")]
    result = validate_balance_sheet_equation(bs)
    assert not result.is_valid
    assert len(result.warnings) == 1
    assert "Total Liabilities" in result.warnings[0]
    assert "Total Equity" in result.warnings[0]


def test_combined_total_not_read_as_total_liabilities():
    bs = [
        BalanceSheetRow("Total Assets", [1000.0], False, "assets"),
        BalanceSheetRow("Total Current Liabilities", [400.0], False, "liabilities", "current"),
        BalanceSheetRow("Total Equity", [600.0], False, "equity"),
        BalanceSheetRow("Total Liabilities and Equity", [1000.0], False, "liabilities"),
    ]
    result = validate_balance_sheet_equation(bs, ["2024"])
    assert result.is_valid
    assert result.warnings == []


def test_combined_total_checked_against_assets():
    bs = [
        BalanceSheetRow("Total Assets", [1000.0, 1000.0], False, "assets"),
        BalanceSheetRow("Total Equity", [600.0, 600.0], False, "equity"),
        BalanceSheetRow("Total Liabilities and Equity", [1000.0, 1300.0], False, "liabilities"),
    ]
    result = validate_balance_sheet_equation(bs, ["2023", "2024"])
    assert not result.is_valid
    assert len(result.warnings) == 1
    assert "2024" in result.warnings[0]
    assert "1,300" in result.warnings[0]


def test_empty_balance_sheet_not_checked():
    result = validate_balance_sheet_equation([])
    assert result.is_valid
    assert result.warnings == []


def test_cash_rows_found():
    cf = [
        CashFlowRow("Net cash from operating activities", [1.0]),
        CashFlowRow("Cash at end of the year", [250.0], category="summary"),
    ]
    assert find_closing_cash_row(cf).label == "Cash at end of the year"
    assert find_balance_sheet_cash_row(_balance_sheet([1.0], [1.0], [1.0])).label == "Cash and cash equivalents"


def test_cash_reconciliation_mismatch():
    bs = _balance_sheet([1000.0, 1000.0], [400.0, 400.0], [600.0, 600.0])
    cf = [CashFlowRow("Closing cash balance", [250.0, 500.0], category="summary")]
    result = validate_cash_flow_reconciliation(cf, bs, ["2023", "2024"])
    assert not result.is_valid
    assert len(result.warnings) == 1
    assert "2024" in result.warnings[0]


def test_cash_reconciliation_skipped_without_rows():
    bs = _balance_sheet([1000.0], [400.0], [600.0])
    cf = [CashFlowRow("Dividends paid", [-50.0], category="financing")]
    result = validate_cash_flow_reconciliation(cf, bs)
    assert result.is_valid
    assert result.warnings == []


def test_run_consistency_checks_combines_warnings():
    data = ParsedFinancialData(
        balance_sheet=_balance_sheet([1000.0], [100.0], [100.0]),
        cash_flow=[CashFlowRow("Cash and cash equivalents at end of period", [900.0], category="summary")],
        column_headers=["2024"],
    )
    result = run_consistency_checks(data)
    assert not result.is_valid
    assert len(result.warnings) == 2
