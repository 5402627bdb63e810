"""
Financial statement workbook parser.

Reads an uploaded workbook, finds the financial sheet(s) and runs the three
statement passes, then recomputes subtotals and ratios and validates the
result. Progress is reported through an optional callback at fixed stages.

Layout handled:
- one sheet holding the income statement, the ratio block, the balance sheet
  and the cash flow statement, one after another under a period header row
- or dedicated "Balance Sheet" / "Cash Flow" sheets next to the main sheet
"""

import logging
import mimetypes
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Callable, Mapping, Optional

import pandas as pd

from finscan.config import DEFAULT_SETTINGS, ParserSettings
from finscan.metrics.consistency import run_consistency_checks
from finscan.metrics.recalculation import recalculate_all
from finscan.models import (
    ParsedFinancialData,
    ParseProgress,
    ParseResult,
    ParseValidation,
    UploadedFileInfo,
)
from finscan.parser.catalogs import EXPECTED_INCOME_STATEMENT_ROWS, KEY_BALANCE_SHEET_ROWS
from finscan.parser.extractor import (
    BalanceSheetExtractor,
    CashFlowExtractor,
    ExtractionResult,
    IncomeStatementExtractor,
)
from finscan.parser.grid import FrameGrid
from finscan.parser.periods import detect_period_headers

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ParseProgress], None]

# Main sheet, by priority; the first sheet otherwise
SHEET_PRIORITY = ["Financial Analysis", "F. Ratios", "Financials", "Income Statement"]
BALANCE_SHEET_SHEET_NAMES = ["balance", "financial position"]
CASH_FLOW_SHEET_NAMES = ["cash"]

CSV_ENCODINGS = ["utf-8", "utf-8-sig", "latin1"]

NO_DATA_ERROR = "No financial data found in the template"


class FinancialParseError(ValueError):
    """The workbook cannot be read or holds no usable financial data."""


# ── Reading ───────────────────────────────────────────────────────────────────

def _read_source(source) -> tuple:
    """(file name, bytes, path or None) for a path or an uploaded file object."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.name, path.read_bytes(), path
        except OSError as e:
            raise FinancialParseError(f"Could not read {path}: {e}") from e

    name = getattr(source, "name", "") or ""
    content = source.read()
    if hasattr(source, "seek"):
        source.seek(0)
    return Path(str(name)).name, content, None


def _frames_to_grids(frames: Mapping[str, pd.DataFrame]) -> dict[str, FrameGrid]:
    return {str(name): FrameGrid(df, str(name)) for name, df in frames.items()}


def read_workbook(source) -> dict[str, FrameGrid]:
    """
    Read every sheet of an .xlsx/.xlsm workbook, or a single .csv, as raw grids.
    No header row is assumed: cell (0, 0) is the top-left cell of the sheet.
    """
    name, content, _ = _read_source(source)
    lower = name.lower()

    if lower.endswith(".csv"):
        for enc in CSV_ENCODINGS:
            try:
                df = pd.read_csv(BytesIO(content), encoding=enc, header=None)
            except UnicodeDecodeError:
                continue
            except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
                raise FinancialParseError(f"Could not read CSV file {name}: {e}") from e
            return _frames_to_grids({Path(name).stem: df})
        raise FinancialParseError(f"Could not read CSV file {name}")

    if lower.endswith((".xlsx", ".xlsm")):
        try:
            frames = pd.read_excel(BytesIO(content), sheet_name=None, header=None, engine="openpyxl")
        except Exception as e:
            raise FinancialParseError(f"Could not read workbook {name}: {e}") from e
        return _frames_to_grids(frames)

    raise FinancialParseError(f"Unsupported file type: {name}")


def _file_info(source) -> Optional[UploadedFileInfo]:
    if isinstance(source, (str, Path)):
        path = Path(source)
        return UploadedFileInfo(
            file_name=path.name,
            file_path=str(path),
            file_size=path.stat().st_size,
            mime_type=mimetypes.guess_type(path.name)[0],
        )
    name = getattr(source, "name", None)
    if not name:
        return None
    size = getattr(source, "size", None)
    return UploadedFileInfo(
        file_name=Path(str(name)).name,
        file_size=size,
        mime_type=getattr(source, "type", None) or mimetypes.guess_type(str(name))[0],
    )


# ── Sheet selection ───────────────────────────────────────────────────────────

def find_financial_sheet(sheet_names) -> Optional[str]:
    """Priority names first (case-insensitive containment), then the first sheet."""
    names = list(sheet_names)
    if not names:
        return None
    for target in SHEET_PRIORITY:
        for name in names:
            if target.lower() in name.lower():
                return name
    logger.warning("No specific financial sheet found, using first sheet")
    return names[0]


def find_statement_sheet(sheet_names, fragments, exclude=()) -> Optional[str]:
    for name in sheet_names:
        if name in exclude:
            continue
        if any(f in name.lower() for f in fragments):
            return name
    return None


def _bounds(grid, settings: ParserSettings) -> tuple:
    max_row = min(grid.max_row, settings.max_rows_to_scan - 1)
    max_col = min(grid.max_col, settings.max_columns_to_scan)
    return max_row, max_col


def _next_start(result: ExtractionResult, settings: ParserSettings) -> int:
    """Row where the following statement's scan begins on the same sheet."""
    start = result.last_row + 1 + settings.anchor_buffer
    if result.stopped_at is not None:
        # Start on the header that ended the previous pass so it is consumed
        start = min(start, result.stopped_at)
    return start


def _own_sheet_start(grid, settings: ParserSettings, max_col: int) -> int:
    periods = detect_period_headers(grid, settings, max_col)
    return periods.header_row + 1 if periods.detected else 0


def _report(on_progress: Optional[ProgressCallback], stage: str, progress: int, message: str):
    if on_progress is not None:
        on_progress(ParseProgress(stage, progress, message))


# ── Validation ────────────────────────────────────────────────────────────────

def _has_any_value(data: ParsedFinancialData) -> bool:
    rows = data.income_statement + data.balance_sheet + data.cash_flow + data.financial_ratios
    return any(v != 0 for row in rows for v in row.values)


def validate_parsed_data(data: ParsedFinancialData, settings: Optional[ParserSettings] = None,
                         headers_detected: bool = True) -> ParseValidation:
    """
    Structural report on a parse result.
    Only "no data at all" is an error; everything else, including the
    consistency checks, is a warning.
    """
    settings = settings or DEFAULT_SETTINGS
    errors, warnings = [], []

    found_income = {r.label for r in data.income_statement}
    missing_income = [label for label in EXPECTED_INCOME_STATEMENT_ROWS if label not in found_income]
    if len(missing_income) > settings.missing_row_slack:
        warnings.append(f"Missing {len(missing_income)} income statement rows")

    if not data.balance_sheet:
        warnings.append("No Balance Sheet data found")
    else:
        found_bs = {r.label for r in data.balance_sheet}
        missing_bs = [label for label in KEY_BALANCE_SHEET_ROWS if label not in found_bs]
        if len(missing_bs) > settings.missing_row_slack:
            warnings.append(f"Missing {len(missing_bs)} balance sheet rows")

    if not data.cash_flow:
        warnings.append("No Cash Flow data found")

    if not _has_any_value(data):
        errors.append(NO_DATA_ERROR)

    if len(data.column_headers) != settings.expected_column_count:
        warnings.append(
            f"Expected {settings.expected_column_count} time periods, found {len(data.column_headers)}"
        )
    if not headers_detected:
        warnings.append("No period header row found, default years used")

    consistency = run_consistency_checks(data, settings.consistency_tolerance)
    warnings.extend(consistency.warnings)

    return ParseValidation(is_valid=not errors, errors=errors, warnings=warnings)


# ── Public parse functions ────────────────────────────────────────────────────

def parse_financial_sheets(sheets: Mapping[str, object],
                           on_progress: Optional[ProgressCallback] = None,
                           settings: Optional[ParserSettings] = None,
                           uploaded_file: Optional[UploadedFileInfo] = None) -> ParseResult:
    """
    Parse already-loaded sheets (name -> CellGrid).
    Raises FinancialParseError when there is no usable sheet or no data.
    """
    settings = settings or DEFAULT_SETTINGS
    _report(on_progress, "parsing", 30, "Parsing workbook structure...")

    names = [name for name, grid in sheets.items() if grid.max_row >= 0 and grid.max_col >= 0]
    main_name = find_financial_sheet(names)
    if main_name is None:
        raise FinancialParseError(
            "Could not find financial data sheet. Expected sheet with income statement data."
        )
    logger.info(f"Using sheet '{main_name}' of {list(sheets)}")
    grid = sheets[main_name]

    _report(on_progress, "extracting", 50, "Extracting financial data...")
    max_row, max_col = _bounds(grid, settings)
    periods = detect_period_headers(grid, settings, max_col)
    column_count = len(periods.headers)

    income = IncomeStatementExtractor(column_count, settings).extract(
        grid, periods.header_row + 1, max_row, max_col
    )

    bs_name = find_statement_sheet(names, BALANCE_SHEET_SHEET_NAMES, exclude=(main_name,))
    if bs_name:
        bs_grid = sheets[bs_name]
        bs_max_row, bs_max_col = _bounds(bs_grid, settings)
        bs_start = _own_sheet_start(bs_grid, settings, bs_max_col)
        logger.info(f"Balance sheet read from sheet '{bs_name}'")
    else:
        bs_grid, bs_max_row, bs_max_col = grid, max_row, max_col
        bs_start = _next_start(income, settings)
    balance = BalanceSheetExtractor(column_count, settings).extract(
        bs_grid, bs_start, bs_max_row, bs_max_col
    )

    cf_name = find_statement_sheet(names, CASH_FLOW_SHEET_NAMES, exclude=(main_name, bs_name))
    if cf_name:
        cf_grid = sheets[cf_name]
        cf_max_row, cf_max_col = _bounds(cf_grid, settings)
        cf_start = _own_sheet_start(cf_grid, settings, cf_max_col)
        logger.info(f"Cash flow read from sheet '{cf_name}'")
    else:
        cf_grid, cf_max_row, cf_max_col = bs_grid, bs_max_row, bs_max_col
        cf_start = _next_start(balance, settings)
    cash_flow = CashFlowExtractor(column_count, settings).extract(
        cf_grid, cf_start, cf_max_row, cf_max_col
    )

    data = ParsedFinancialData(
        income_statement=income.rows,
        balance_sheet=balance.rows,
        cash_flow=cash_flow.rows,
        financial_ratios=income.ratios + balance.ratios + cash_flow.ratios,
        column_headers=periods.headers,
        last_updated=datetime.now(timezone.utc).isoformat(),
        uploaded_file=uploaded_file,
    )
    data = recalculate_all(data)

    _report(on_progress, "validating", 80, "Validating data structure...")
    validation = validate_parsed_data(data, settings, periods.detected)
    if not validation.is_valid:
        raise FinancialParseError(f"Validation failed: {', '.join(validation.errors)}")
    for warning in validation.warnings:
        logger.warning(warning)

    _report(on_progress, "complete", 100, "Parse complete!")
    logger.info(
        f"Parse successful: {len(data.income_statement)} income rows, "
        f"{len(data.balance_sheet)} balance sheet rows, {len(data.cash_flow)} cash flow rows, "
        f"{len(data.financial_ratios)} ratios"
    )
    return ParseResult(data, validation)


def parse_financial_workbook(source, on_progress: Optional[ProgressCallback] = None,
                             settings: Optional[ParserSettings] = None) -> ParseResult:
    """
    Parse a financial statements workbook.
    source is a path or an uploaded file object with .name and .read().
    """
    _report(on_progress, "reading", 10, "Reading Excel file...")
    sheets = read_workbook(source)
    return parse_financial_sheets(sheets, on_progress, settings, uploaded_file=_file_info(source))
