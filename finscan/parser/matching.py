"""
Label matching and cell amount cleaning.

Matching is case- and punctuation-insensitive substring matching: both sides are
reduced to lower-case alphanumerics ("&" read as "and") and either may contain
the other. There is no scoring; the first candidate in catalog order wins.
"""

import re
from typing import Iterable, Optional

import numpy as np


_NON_ALNUM = re.compile(r"[^a-z0-9]")
_EMPTY_AMOUNTS = {"", "-", "--", "—", "n/a", "na", "nil"}


def normalize_label(text) -> str:
    if text is None:
        return ""
    return _NON_ALNUM.sub("", str(text).lower().replace("&", "and"))


def fuzzy_match(observed, canonical) -> bool:
    a = normalize_label(observed)
    b = normalize_label(canonical)
    if not a or not b:
        return False
    return a in b or b in a


def find_matching_label(observed, candidates: Iterable[str]) -> Optional[str]:
    """Return the first candidate that fuzzy-matches observed, or None."""
    for candidate in candidates:
        if fuzzy_match(observed, candidate):
            return candidate
    return None


def find_exact_label(observed, candidates: Iterable[str]) -> Optional[str]:
    """Return the candidate equal to observed after normalization, or None."""
    key = normalize_label(observed)
    if not key:
        return None
    for candidate in candidates:
        if normalize_label(candidate) == key:
            return candidate
    return None


def resolve_label(observed, candidates) -> Optional[str]:
    """
    Exact normalized match first, then first fuzzy match.
    Keeps "Total Equity" from resolving to an earlier entry such as
    "Total Equity and Liabilities" that merely contains it.
    """
    candidates = list(candidates)
    return find_exact_label(observed, candidates) or find_matching_label(observed, candidates)


def contains_any(text, fragments: Iterable[str]) -> bool:
    """One-directional check: does normalized text contain any normalized fragment."""
    t = normalize_label(text)
    if not t:
        return False
    return any(normalize_label(f) in t for f in fragments if normalize_label(f))


def clean_amount(value) -> float:
    """
    Convert a grid cell to a number.
    Numbers are used as-is; text is parsed after stripping thousands separators,
    whitespace and '$', with accounting parentheses read as negatives.
    Anything unparseable or non-finite is 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, np.number)):
        result = float(value)
        return result if np.isfinite(result) else 0.0

    s = str(value).strip()
    if s.lower() in _EMPTY_AMOUNTS:
        return 0.0
    negative = s.startswith("(") and s.endswith(")")
    s = s.replace("(", "").replace(")", "")
    s = re.sub(r"[,\s$]", "", s)
    try:
        result = float(s)
    except ValueError:
        return 0.0
    if not np.isfinite(result):
        return 0.0
    return -result if negative else result
