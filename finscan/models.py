"""
Data structures shared by the parser and the metric engines.

Rows are never mutated once handed out: recalculation builds new lists and new
row objects with dataclasses.replace.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional


# ── Statement rows ────────────────────────────────────────────────────────────

@dataclass
class StatementRow:
    """One labelled line of a statement with a value per period."""
    label: str
    values: list[float]
    editable: bool = True


@dataclass
class BalanceSheetRow(StatementRow):
    category: str = "assets"            # 'assets', 'liabilities', 'equity'
    subcategory: Optional[str] = None   # 'current', 'non-current'


@dataclass
class CashFlowRow(StatementRow):
    category: str = "operating"         # 'operating', 'investing', 'financing', 'summary'


@dataclass
class RatioRow(StatementRow):
    type: str = "ratio"                 # 'ratio', 'percentage', 'currency'
    category: Optional[str] = None      # 'profitability', 'liquidity', ...
    editable: bool = False


# ── Parse results ─────────────────────────────────────────────────────────────

@dataclass
class UploadedFileInfo:
    file_name: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    document_key: Optional[str] = None
    public_url: Optional[str] = None


@dataclass
class ParsedFinancialData:
    """Complete parse output: three statements, ratios and period headers."""
    income_statement: list[StatementRow] = field(default_factory=list)
    balance_sheet: list[BalanceSheetRow] = field(default_factory=list)
    cash_flow: list[CashFlowRow] = field(default_factory=list)
    financial_ratios: list[RatioRow] = field(default_factory=list)
    column_headers: list[str] = field(default_factory=list)
    last_updated: str = ""
    uploaded_file: Optional[UploadedFileInfo] = None

    @property
    def column_count(self) -> int:
        for rows in (self.income_statement, self.balance_sheet, self.cash_flow):
            if rows:
                return len(rows[0].values)
        return len(self.column_headers)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ParseValidation:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ConsistencyResult:
    """Outcome of a single cross-statement check. Never blocks a parse."""
    is_valid: bool = True
    warnings: list[str] = field(default_factory=list)


@dataclass
class ParseProgress:
    stage: str          # 'reading', 'parsing', 'extracting', 'validating', 'complete'
    progress: int       # 0-100
    message: str


@dataclass
class ParseResult:
    data: ParsedFinancialData
    validation: ParseValidation
