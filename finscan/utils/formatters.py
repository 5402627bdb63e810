"""
Number formatting for statement and ratio output.

Conventions:
  Amount    →  1,234,567 / (400)  (whole units, negatives in brackets)
  Currency  →  R 1,234,567        (whole units, symbol optional)
  Percent   →  42.3%              (1 decimal place)
  Ratio     →  1.85x              (2 decimal places)
  Days      →  47 days            (whole number)

Anything that is not a finite number renders as N/A.
"""

import math
from typing import Optional

MISSING = "N/A"


def _number(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        v = float(v)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def format_amount(v) -> str:
    """Statement amount in accounting style: 1,234 or (400)"""
    n = _number(v)
    if n is None:
        return MISSING
    return f"({abs(n):,.0f})" if n < 0 else f"{n:,.0f}"


def format_currency(v, symbol: str = "$") -> str:
    n = _number(v)
    if n is None:
        return MISSING
    sep = " " if len(symbol) > 1 else ""
    sign = "-" if n < 0 else ""
    return f"{sign}{symbol}{sep}{abs(n):,.0f}"


def format_percent(v) -> str:
    n = _number(v)
    return MISSING if n is None else f"{n:.1f}%"


def format_ratio(v) -> str:
    n = _number(v)
    return MISSING if n is None else f"{n:.2f}x"


def format_days(v) -> str:
    n = _number(v)
    return MISSING if n is None else f"{round(n)} days"


_BY_TYPE = {
    "currency": format_currency,
    "percentage": format_percent,
    "ratio": format_ratio,
    "days": format_days,
}


def format_metric(v, format_type: str) -> str:
    """Format by a ratio row's type; unknown types fall back to str()."""
    formatter = _BY_TYPE.get(format_type)
    if formatter is not None:
        return formatter(v)
    return MISSING if v is None else str(v)


def format_ratio_value(label: str, v, format_type: str) -> str:
    # Debtors/Creditors Days are typed 'ratio' but read as days
    if "days" in label.lower():
        return format_days(v)
    return format_metric(v, format_type)
