"""Tests for the income statement subtotal engine."""

from __future__ import annotations

from finscan.metrics.calculated_fields import get_calculated_fields, recalculate_income_statement
from finscan.models import StatementRow


def _row(label, *values, editable=True):
    return StatementRow(label, [float(v) for v in values], editable)


def _by_label(rows):
    return {r.label: r.values for r in rows}


def test_gross_profit_from_revenue_and_cost_of_sales():
    rows = [_row("Revenue", 1000), _row("Cost of sales", -400), _row("Gross Profit", 0, editable=False)]
    result = _by_label(recalculate_income_statement(rows))
    assert result["Gross Profit"] == [600.0]


def test_subtotals_chain():
    rows = [
        _row("Revenue", 1000),
        _row("Cost of sales", -400),
        _row("Gross Profit", 0, editable=False),
        _row("Administrative expenses", -50),
        _row("Other Operating Expenses (Excl depreciation & amortisation)", -30),
        _row("Salaries & Staff Cost", -70),
        _row("EBITDA", 0, editable=False),
        _row("Interest Income", 10),
        _row("Finances Cost", -20),
        _row("Depreciation & Amortisation", -40),
        _row("Profit before tax", 0, editable=False),
    ]
    result = _by_label(recalculate_income_statement(rows))
    assert result["EBITDA"] == [450.0]
    assert result["Profit before tax"] == [400.0]


def test_missing_opex_row_does_not_pick_up_depreciation():
    rows = [
        _row("Revenue", 1000),
        _row("Cost of sales", -400),
        _row("Gross Profit", 600),
        _row("Administrative expenses", -50),
        _row("Depreciation & Amortisation", -40),
        _row("EBITDA", 0),
    ]
    result = _by_label(recalculate_income_statement(rows))
    assert result["EBITDA"] == [550.0]


def test_recalculation_is_idempotent():
    rows = [_row("Revenue", 1000, 1100), _row("Cost of sales", -400, -450), _row("Gross Profit", 1, 2)]
    once = recalculate_income_statement(rows)
    twice = recalculate_income_statement(once)
    assert _by_label(once) == _by_label(twice)


def test_input_rows_not_mutated():
    gross = _row("Gross Profit", 0)
    rows = [_row("Revenue", 1000), _row("Cost of sales", -400), gross]
    result = recalculate_income_statement(rows)
    assert gross.values == [0.0]
    assert result is not rows
    assert result[0] is rows[0]


def test_missing_subtotal_rows_not_added():
    rows = [_row("Revenue", 1000), _row("Cost of sales", -400)]
    assert [r.label for r in recalculate_income_statement(rows)] == ["Revenue", "Cost of sales"]


def test_subtotal_without_inputs_recomputed_as_zero():
    rows = [_row("EBITDA", 123)]
    assert _by_label(recalculate_income_statement(rows))["EBITDA"] == [0.0]


def test_extracted_subtotals_replaced_when_inputs_missing():
    rows = [_row("Gross Profit", 600), _row("EBITDA", 500)]
    result = _by_label(recalculate_income_statement(rows))
    assert result["Gross Profit"] == [0.0]
    assert result["EBITDA"] == [0.0]


def test_get_calculated_fields():
    fields = get_calculated_fields()
    assert set(fields) == {"income_statement", "balance_sheet", "cash_flow"}
    assert fields["income_statement"] == ["Gross Profit", "EBITDA", "Profit before tax"]
    assert "Total Assets" in fields["balance_sheet"]
