"""
finscan: financial statement extraction from uploaded spreadsheets.
"""

from finscan.config import ConfigError, ParserSettings, load_settings
from finscan.metrics.calculated_fields import get_calculated_fields, recalculate_income_statement
from finscan.metrics.consistency import (
    validate_balance_sheet_equation,
    validate_cash_flow_reconciliation,
)
from finscan.metrics.ratios import recalculate_ratios
from finscan.metrics.recalculation import apply_cell_edit, data_completeness, recalculate_all
from finscan.models import (
    BalanceSheetRow,
    CashFlowRow,
    ParsedFinancialData,
    ParseProgress,
    ParseResult,
    ParseValidation,
    RatioRow,
    StatementRow,
)
from finscan.parser.excel_parser import (
    FinancialParseError,
    parse_financial_sheets,
    parse_financial_workbook,
    read_workbook,
    validate_parsed_data,
)
from finscan.parser.grid import FrameGrid

__version__ = "0.1.0"
