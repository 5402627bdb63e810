"""Command line entry point: finscan parse FILE."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from finscan.config import ConfigError, load_settings
from finscan.exports.frames import to_frames, write_excel
from finscan.models import ParseProgress, ParseResult
from finscan.parser.excel_parser import FinancialParseError, parse_financial_workbook
from finscan.utils.formatters import format_amount, format_ratio_value

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="finscan",
        description="Extract financial statements and ratios from a spreadsheet.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    parse = sub.add_parser("parse", help="Parse a .xlsx/.xlsm/.csv financial statements file")
    parse.add_argument("file", type=Path)
    parse.add_argument("--json", type=Path, default=None, help="Write the full result as JSON")
    parse.add_argument("--xlsx", type=Path, default=None, help="Write the normalized statements to Excel")
    parse.add_argument("--env-file", type=Path, default=None, help=".env file with FINSCAN_* settings")
    parse.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def _print_result(result: ParseResult) -> None:
    data = result.data
    frames = to_frames(data)
    periods = list(data.column_headers)
    print(f"Periods: {', '.join(periods)}")

    for key, title in (
        ("income_statement", "Income Statement"),
        ("balance_sheet", "Balance Sheet"),
        ("cash_flow", "Cash Flow"),
    ):
        df = frames[key]
        print(f"\n── {title} ({len(df)} rows) ──")
        if df.empty:
            continue
        value_cols = df.columns[-len(periods):] if periods else df.columns
        print(df[value_cols].apply(lambda col: col.map(format_amount)).to_string())

    print(f"\n── Financial Ratios ({len(data.financial_ratios)} rows) ──")
    for ratio in data.financial_ratios:
        values = "  ".join(format_ratio_value(ratio.label, v, ratio.type) for v in ratio.values)
        print(f"{ratio.label:<45} {values}")

    if result.validation.warnings:
        print("\nWarnings:")
        for w in result.validation.warnings:
            print(f"  - {w}")


def _log_progress(progress: ParseProgress) -> None:
    logger.info(f"[{progress.progress:3d}%] {progress.message}")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        result = parse_financial_workbook(args.file, on_progress=_log_progress, settings=settings)
    except FinancialParseError as e:
        print(f"Could not parse {args.file}: {e}", file=sys.stderr)
        return 1

    _print_result(result)

    if args.json:
        payload = {"data": result.data.to_dict(), "validation": asdict(result.validation)}
        args.json.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info(f"Wrote {args.json}")
    if args.xlsx:
        write_excel(result.data, args.xlsx)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
