"""
Tabular export of a parse result.

Each statement becomes a DataFrame indexed by row label with one column per
period; balance sheet, cash flow and ratio rows keep their classification in
leading columns. write_excel() puts the four frames on four worksheets.
"""

import logging
from typing import Sequence

import pandas as pd

from finscan.models import BalanceSheetRow, CashFlowRow, ParsedFinancialData, RatioRow, StatementRow

logger = logging.getLogger(__name__)

SHEET_NAMES = {
    "income_statement": "Income Statement",
    "balance_sheet": "Balance Sheet",
    "cash_flow": "Cash Flow",
    "financial_ratios": "Financial Ratios",
}


def _period_columns(column_headers: Sequence[str], count: int) -> list[str]:
    columns = [str(h) for h in list(column_headers)[:count]]
    columns += [f"period {i + 1}" for i in range(len(columns), count)]
    return columns


def _meta_columns(row: StatementRow) -> dict:
    if isinstance(row, BalanceSheetRow):
        return {"category": row.category, "subcategory": row.subcategory}
    if isinstance(row, CashFlowRow):
        return {"category": row.category}
    if isinstance(row, RatioRow):
        return {"type": row.type, "category": row.category}
    return {}


def statement_to_frame(rows: Sequence[StatementRow], column_headers: Sequence[str]) -> pd.DataFrame:
    count = len(rows[0].values) if rows else len(column_headers)
    columns = _period_columns(column_headers, count)

    df = pd.DataFrame(
        [r.values for r in rows],
        index=pd.Index([r.label for r in rows], name="label"),
        columns=columns,
        dtype=float,
    )
    if rows:
        meta = pd.DataFrame([_meta_columns(r) for r in rows], index=df.index)
        df = pd.concat([meta, df], axis=1)
    return df


def ratios_to_frame(ratios: Sequence[RatioRow], column_headers: Sequence[str]) -> pd.DataFrame:
    return statement_to_frame(ratios, column_headers)


def to_frames(data: ParsedFinancialData) -> dict[str, pd.DataFrame]:
    headers = data.column_headers
    return {
        "income_statement": statement_to_frame(data.income_statement, headers),
        "balance_sheet": statement_to_frame(data.balance_sheet, headers),
        "cash_flow": statement_to_frame(data.cash_flow, headers),
        "financial_ratios": ratios_to_frame(data.financial_ratios, headers),
    }


def write_excel(data: ParsedFinancialData, target) -> None:
    """Write the four statement frames to an .xlsx path or binary buffer."""
    frames = to_frames(data)
    with pd.ExcelWriter(target, engine="xlsxwriter") as writer:
        number_fmt = writer.book.add_format({"num_format": "#,##0.00;(#,##0.00)"})
        for key, df in frames.items():
            sheet = SHEET_NAMES[key]
            df.to_excel(writer, sheet_name=sheet)
            worksheet = writer.sheets[sheet]
            worksheet.set_column(0, 0, 45)
            worksheet.set_column(1, len(df.columns), 14, number_fmt)
    logger.info(f"Exported {len(frames)} statements to Excel")
