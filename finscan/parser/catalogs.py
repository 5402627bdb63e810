"""
Label catalogs for the financial statement template.

Catalog order matters: matching takes the first fuzzy hit. Balance sheet
grand totals come before subsection totals so that a bare "Equity" or
"Current Assets" row lands on the total it stands for.
"""

from typing import NamedTuple, Optional


# ── Income statement ──────────────────────────────────────────────────────────
REVENUE = "Revenue"
COST_OF_SALES = "Cost of sales"
GROSS_PROFIT = "Gross Profit"
ADMIN_EXPENSES = "Administrative expenses"
OTHER_OPEX = "Other Operating Expenses (Excl depreciation & amortisation)"
SALARIES = "Salaries & Staff Cost"
EBITDA = "EBITDA"
INTEREST_INCOME = "Interest Income"
FINANCE_COST = "Finances Cost"
DEPRECIATION = "Depreciation & Amortisation"
PROFIT_BEFORE_TAX = "Profit before tax"
INCOME_TAX = "Income tax expense"
PROFIT_FOR_PERIOD = "Profit/(Loss) for the period"

EXPECTED_INCOME_STATEMENT_ROWS = (
    REVENUE,
    COST_OF_SALES,
    GROSS_PROFIT,
    ADMIN_EXPENSES,
    OTHER_OPEX,
    SALARIES,
    EBITDA,
    INTEREST_INCOME,
    FINANCE_COST,
    DEPRECIATION,
    PROFIT_BEFORE_TAX,
    INCOME_TAX,
    PROFIT_FOR_PERIOD,
)

CALCULATED_INCOME_FIELDS = (GROSS_PROFIT, EBITDA, PROFIT_BEFORE_TAX)

# ── Financial ratios (labels mirror metrics/ratios.py) ────────────────────────
ROE = "Return on Equity (ROE)"
ROA = "Return on Assets (ROA)"
GROSS_MARGIN = "Gross profit margin"
OPERATING_MARGIN = "Operating margin (EBITDA)"
NET_MARGIN = "Net Operating Profit Margin"
CURRENT_RATIO = "Current Ratio"
QUICK_RATIO = "Acid Test Ratio (Quick Ratio)"
DEBT_EQUITY = "Debt Equity Ratio (Total liabilities)"
INTEREST_COVER = "Interest Cover Ratio"
COST_TO_INCOME = "Cost to Income ratio"
ROI = "Return on Investment (ROI)"
SALES_GROWTH = "Sales Growth"
EQUITY_VALUE = "Equity Investment Value"
DEBTORS_DAYS = "Debtors Days"
CREDITORS_DAYS = "Creditors Days"

EXPECTED_RATIO_ROWS = (
    ROE,
    ROA,
    GROSS_MARGIN,
    OPERATING_MARGIN,
    NET_MARGIN,
    CURRENT_RATIO,
    QUICK_RATIO,
    DEBT_EQUITY,
    INTEREST_COVER,
    COST_TO_INCOME,
    ROI,
    SALES_GROWTH,
    EQUITY_VALUE,
    DEBTORS_DAYS,
    CREDITORS_DAYS,
)


# ── Balance sheet ─────────────────────────────────────────────────────────────

class BalanceSheetEntry(NamedTuple):
    label: str
    category: str
    subcategory: Optional[str] = None


TOTAL_ASSETS = "Total Assets"
TOTAL_LIABILITIES = "Total Liabilities"
TOTAL_EQUITY = "Total Equity"
INVENTORY = "Inventory"
RECEIVABLES = "Trade and other receivables"
PAYABLES = "Trade and other payables"
CASH = "Cash and cash equivalents"

BALANCE_SHEET_CATALOG = (
    BalanceSheetEntry(TOTAL_ASSETS, "assets"),
    BalanceSheetEntry("Total Current Assets", "assets", "current"),
    BalanceSheetEntry("Total Non-Current Assets", "assets", "non-current"),
    BalanceSheetEntry(TOTAL_LIABILITIES, "liabilities"),
    BalanceSheetEntry("Total Current Liabilities", "liabilities", "current"),
    BalanceSheetEntry("Total Non-Current Liabilities", "liabilities", "non-current"),
    BalanceSheetEntry(TOTAL_EQUITY, "equity"),
    BalanceSheetEntry("Total Shareholders Equity", "equity"),
    BalanceSheetEntry("Total Equity and Liabilities", "liabilities"),
    BalanceSheetEntry("Total Equities and Liabilities", "liabilities"),
    # reached by exact match; kept after the grand totals so a bare
    # "Liabilities" or "Equity" row still lands on its own total
    BalanceSheetEntry("Total Liabilities and Equity", "liabilities"),
    BalanceSheetEntry("Total Liabilities and Shareholders Equity", "liabilities"),
    BalanceSheetEntry("Property, plant and equipment", "assets", "non-current"),
    BalanceSheetEntry("Intangible assets", "assets", "non-current"),
    BalanceSheetEntry("Right-of-use assets", "assets", "non-current"),
    BalanceSheetEntry("Deferred tax assets", "assets", "non-current"),
    BalanceSheetEntry(INVENTORY, "assets", "current"),
    BalanceSheetEntry(RECEIVABLES, "assets", "current"),
    BalanceSheetEntry(CASH, "assets", "current"),
    BalanceSheetEntry("Share capital", "equity"),
    BalanceSheetEntry("Retained earnings", "equity"),
    BalanceSheetEntry("Long-term borrowings", "liabilities", "non-current"),
    BalanceSheetEntry("Deferred tax liabilities", "liabilities", "non-current"),
    BalanceSheetEntry(PAYABLES, "liabilities", "current"),
    BalanceSheetEntry("Short-term borrowings", "liabilities", "current"),
    BalanceSheetEntry("Current tax payable", "liabilities", "current"),
)

EXPECTED_BALANCE_SHEET_ROWS = tuple(e.label for e in BALANCE_SHEET_CATALOG)

# Rows a usable balance sheet is expected to carry; the item catalog above is
# wider than any single template
KEY_BALANCE_SHEET_ROWS = (
    TOTAL_ASSETS,
    "Total Current Assets",
    "Total Non-Current Assets",
    TOTAL_LIABILITIES,
    "Total Current Liabilities",
    TOTAL_EQUITY,
    INVENTORY,
    RECEIVABLES,
    CASH,
    PAYABLES,
)

# Compared by exact (case-insensitive) label
CALCULATED_BALANCE_FIELDS = (
    "Total Assets",
    "Total Equities and Liabilities",
    "Total Equity and Liabilities",
    "Total Liabilities and Equity",
    "Total Liabilities and Shareholders Equity",
    "Total Current Assets",
    "Total Non-Current Assets",
    "Total Liabilities",
    "Total Current Liabilities",
    "Total Non-Current Liabilities",
    "Total Equity",
    "Total Shareholders Equity",
)


# ── Cash flow ─────────────────────────────────────────────────────────────────

class CashFlowEntry(NamedTuple):
    label: str
    category: str


NET_OPERATING_CASH = "Net cash from operating activities"
NET_INVESTING_CASH = "Net cash used in investing activities"
NET_FINANCING_CASH = "Net cash used in financing activities"
NET_CHANGE_IN_CASH = "Net increase in cash and cash equivalents"
OPENING_CASH = "Cash and cash equivalents at beginning of period"
CLOSING_CASH = "Cash and cash equivalents at end of period"

CASH_FLOW_CATALOG = (
    CashFlowEntry(NET_OPERATING_CASH, "operating"),
    CashFlowEntry("Cash generated from operations", "operating"),
    CashFlowEntry("Interest received", "operating"),
    CashFlowEntry("Interest paid", "operating"),
    CashFlowEntry("Income taxes paid", "operating"),
    CashFlowEntry(NET_INVESTING_CASH, "investing"),
    CashFlowEntry("Purchase of property, plant and equipment", "investing"),
    CashFlowEntry("Proceeds from sale of property, plant and equipment", "investing"),
    CashFlowEntry("Purchase of investments", "investing"),
    CashFlowEntry(NET_FINANCING_CASH, "financing"),
    CashFlowEntry("Proceeds from borrowings", "financing"),
    CashFlowEntry("Repayment of borrowings", "financing"),
    CashFlowEntry("Proceeds from issue of shares", "financing"),
    CashFlowEntry("Dividends paid", "financing"),
    CashFlowEntry(NET_CHANGE_IN_CASH, "summary"),
    CashFlowEntry(OPENING_CASH, "summary"),
    CashFlowEntry(CLOSING_CASH, "summary"),
)

EXPECTED_CASH_FLOW_ROWS = tuple(e.label for e in CASH_FLOW_CATALOG)

# Compared by containment, so "Net cash from investing activities" also counts
CALCULATED_CASH_FLOW_FIELDS = (
    "Net cash from operating activities",
    "Net cash used in operating activities",
    "Net cash from investing activities",
    "Net cash used in investing activities",
    "Net cash from financing activities",
    "Net cash used in financing activities",
    "Net increase in cash and cash equivalents",
    "Net decrease in cash and cash equivalents",
    "Cash and cash equivalents at end of period",
)


# ── Section header patterns (normalized containment unless noted) ─────────────
INCOME_SECTION_HEADERS = [
    "income statement", "statement of profit", "profit and loss",
    "profit or loss", "comprehensive income",
]
# Income statement titles that end a balance sheet or cash flow pass. Narrower
# than the list above: "profit or loss" and "comprehensive income" also occur
# inside balance sheet line items ("... at fair value through profit or loss")
INCOME_STATEMENT_TITLES = [
    "income statement", "statement of profit", "statement of comprehensive income",
    "profit and loss statement", "statement of financial performance",
]
# Matched by exact normalized label only
INCOME_STATEMENT_EXACT_TITLES = ["profit and loss", "profit or loss", "comprehensive income"]
RATIO_SECTION_HEADERS = ["financial ratio", "key ratios", "ratio analysis"]
NEUTRAL_HEADERS = ["amounts in", "all figures in"]
BALANCE_SHEET_HEADERS = ["balance sheet", "financial position"]
CASH_FLOW_HEADERS = ["cash flow statement", "statement of cash flows", "cash flows statement"]

# Balance sheet: checked in order, non-current before current
BS_SUBSECTION_HEADERS = [
    (["non-current asset", "noncurrent asset", "fixed asset"], "assets", "non-current"),
    (["current asset"], "assets", "current"),
    (["non-current liabilit", "long-term liabilit", "noncurrent liabilit"], "liabilities", "non-current"),
    (["current liabilit"], "liabilities", "current"),
    (["shareholders equity", "shareholders funds", "capital and reserves", "owners equity"], "equity", None),
]
# Matched by exact normalized label only; these words appear inside line items
BS_EXACT_HEADERS = {
    "assets": ("assets", None),
    "liabilities": ("liabilities", None),
    "equity": ("equity", None),
    "equities": ("equity", None),
    "equity and liabilities": (None, None),
    "equities and liabilities": (None, None),
    "liabilities and equity": (None, None),
}

CF_ACTIVITY_HEADERS = [
    (["operating activit"], "operating"),
    (["investing activit"], "investing"),
    (["financing activit"], "financing"),
]
CF_EXACT_HEADERS = {
    "operating": "operating",
    "investing": "investing",
    "financing": "financing",
}


# ── Ratio display type for extracted rows ────────────────────────────────────

def get_ratio_type(label: str) -> str:
    """Display type for a ratio row that is not in the formula registry."""
    lower = label.lower()
    if "days" in lower:
        return "ratio"
    if "value" in lower:
        return "currency"
    if any(k in lower for k in ("margin", "growth", "roe", "roa", "roi", "return on")):
        return "percentage"
    return "ratio"
