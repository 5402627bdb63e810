"""
Cell grid abstraction over a raw worksheet.

The scanners only ever ask for one cell at a time and get back None, a number
or a string. FrameGrid serves those cells from a header-less DataFrame as
produced by pd.read_excel(..., header=None).
"""

from datetime import date, datetime
from typing import Protocol, Union

import numpy as np
import pandas as pd

Cell = Union[None, int, float, str]


class CellGrid(Protocol):
    max_row: int    # last used row, zero-based; -1 when empty
    max_col: int

    def cell_at(self, row: int, col: int) -> Cell:
        ...


def _to_cell(value) -> Cell:
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (datetime, date)):
        if pd.isna(value):
            return None
        return value.date().isoformat() if isinstance(value, datetime) else value.isoformat()
    if isinstance(value, float):
        return None if np.isnan(value) else value
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    return str(value)


class FrameGrid:
    """Read-only CellGrid backed by a DataFrame with positional rows and columns."""

    def __init__(self, df: pd.DataFrame, name: str = ""):
        self.df = df
        self.name = name
        self.max_row = len(df.index) - 1
        self.max_col = len(df.columns) - 1

    @classmethod
    def from_rows(cls, rows: list, name: str = "") -> "FrameGrid":
        return cls(pd.DataFrame(rows), name)

    def cell_at(self, row: int, col: int) -> Cell:
        if row < 0 or col < 0 or row > self.max_row or col > self.max_col:
            return None
        return _to_cell(self.df.iat[row, col])

    def __repr__(self):
        return f"FrameGrid({self.name!r}, rows={self.max_row + 1}, cols={self.max_col + 1})"
