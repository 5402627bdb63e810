"""Shared fixtures: a small single-sheet financial statements template."""

from __future__ import annotations

import pandas as pd
import pytest

from finscan.config import ParserSettings
from finscan.parser.grid import FrameGrid

HEADER = [None, "2022", "2023", "2024"]

INCOME_ROWS = [
    ["Income Statement"],
    ["Revenue", 1000, 1200, 1500],
    ["Cost of sales", -400, -500, -600],
    ["Gross Profit", 600, 700, 900],
    ["Administrative expenses", -50, -60, -70],
    ["Other Operating Expenses (Excl depreciation & amortisation)", -30, -30, -40],
    ["Salaries & Staff Cost", -70, -80, -90],
    ["EBITDA", 450, 530, 700],
    ["Interest Income", 10, 10, 10],
    ["Finances Cost", -20, -20, -20],
    ["Depreciation & Amortisation", -40, -40, -40],
    ["Profit before tax", 400, 480, 650],
    ["Income tax expense", -112, -134, -182],
    ["Profit/(Loss) for the period", 288, 346, 468],
]

RATIO_ROWS = [
    ["Financial Ratios"],
    ["Current Ratio", 1.5, 1.6, 1.7],
    ["Custom KPI", 5, 6, 7],
]

BALANCE_SHEET_ROWS = [
    ["Balance Sheet"],
    ["Non-current assets"],
    ["Property, plant and equipment", 800, 850, 900],
    ["Total Non-Current Assets", 800, 850, 900],
    ["Current assets"],
    ["Inventory", 100, 120, 140],
    ["Trade and other receivables", 150, 160, 170],
    ["Cash and cash equivalents", 250, 270, 290],
    ["Total Current Assets", 500, 550, 600],
    ["Total Assets", 1300, 1400, 1500],
    ["Equity"],
    ["Share capital", 500, 500, 500],
    ["Retained earnings", 300, 350, 400],
    ["Total Equity", 800, 850, 900],
    ["Non-current liabilities"],
    ["Long-term borrowings", 200, 200, 200],
    ["Current liabilities"],
    ["Trade and other payables", 300, 350, 400],
    ["Total Current Liabilities", 300, 350, 400],
    ["Total Liabilities", 500, 550, 600],
    ["Total Equity and Liabilities", 1300, 1400, 1500],
]

CASH_FLOW_ROWS = [
    ["Cash Flow Statement"],
    ["Cash flows from operating activities"],
    ["Cash generated from operations", 300, 320, 340],
    ["Net cash from operating activities", 300, 320, 340],
    ["Cash flows from investing activities"],
    ["Purchase of property, plant and equipment", -100, -100, -100],
    ["Net cash used in investing activities", -100, -100, -100],
    ["Cash flows from financing activities"],
    ["Dividends paid", -50, -200, -180],
    ["Net cash used in financing activities", -50, -200, -180],
    ["Cash and cash equivalents at end of period", 250, 270, 290],
]

BLANK = [None]


def build_template_rows() -> list:
    return (
        [["Company XYZ"], ["Amounts in ZAR"], HEADER]
        + INCOME_ROWS
        + [BLANK]
        + RATIO_ROWS
        + [BLANK]
        + BALANCE_SHEET_ROWS
        + [BLANK]
        + CASH_FLOW_ROWS
    )


@pytest.fixture
def template_rows() -> list:
    return build_template_rows()


@pytest.fixture
def template_grid(template_rows) -> FrameGrid:
    return FrameGrid.from_rows(template_rows, "Financials")


@pytest.fixture
def settings() -> ParserSettings:
    """Settings for the three-period template."""
    return ParserSettings(expected_column_count=3)


@pytest.fixture
def template_xlsx(tmp_path, template_rows):
    path = tmp_path / "financials.xlsx"
    rows = [r for r in template_rows if r != BLANK]
    pd.DataFrame(rows).to_excel(
        path, sheet_name="Financials", header=False, index=False, engine="openpyxl"
    )
    return path
