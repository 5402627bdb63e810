"""Tests for the finscan command line."""

from __future__ import annotations

import json

import pandas as pd

from finscan.cli import main, parse_args


def test_parse_args():
    args = parse_args(["parse", "book.xlsx", "--json", "out.json", "--log-level", "INFO"])
    assert args.command == "parse"
    assert str(args.file) == "book.xlsx"
    assert str(args.json) == "out.json"
    assert args.xlsx is None


def test_parse_prints_statements(template_xlsx, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("FINSCAN_EXPECTED_COLUMN_COUNT", "3")
    out = tmp_path / "result.json"
    xlsx = tmp_path / "normalized.xlsx"

    code = main(["parse", str(template_xlsx), "--json", str(out), "--xlsx", str(xlsx)])

    assert code == 0
    printed = capsys.readouterr().out
    assert "Periods: 2022, 2023, 2024" in printed
    assert "Income Statement (13 rows)" in printed
    assert "Custom KPI" in printed

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["validation"]["is_valid"] is True
    assert payload["data"]["column_headers"] == ["2022", "2023", "2024"]
    assert payload["data"]["income_statement"][0]["label"] == "Revenue"
    assert "Financial Ratios" in pd.ExcelFile(xlsx, engine="openpyxl").sheet_names


def test_unreadable_file_exit_code(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    assert main(["parse", str(path)]) == 1
    assert "Unsupported file type" in capsys.readouterr().err


def test_bad_setting_exit_code(template_xlsx, monkeypatch, capsys):
    monkeypatch.setenv("FINSCAN_MAX_ROWS_TO_SCAN", "lots")
    assert main(["parse", str(template_xlsx)]) == 2
    assert "Configuration error" in capsys.readouterr().err
