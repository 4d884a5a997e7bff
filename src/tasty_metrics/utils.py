"""Shared utilities for the harmonization pipeline.

This module provides small reusable helpers used across modules:

- Date parsing: standardized YYYY-MM-DD parsing
- Join key normalization: trimmed, canonical-case comparison keys
- Column contracts: required-column checks for source datasets

Examples:
    >>> from tasty_metrics.utils import normalize_key, parse_date
    >>> normalize_key("  Hamburg  ")
    'hamburg'
    >>> parse_date("2022-02-10")
    datetime.date(2022, 2, 10)

"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from tasty_metrics.exceptions import DataQualityError

# Unicode characters that should be stripped from key text
NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

_ZW_RE = re.compile(r"[%s]" % re.escape(ZW))
_SPACE_RE = re.compile(r"\s+")


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Args:
        s: Date string in ISO format (YYYY-MM-DD).

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2022-02-10")
        datetime.date(2022, 2, 10)

    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def normalize_key(x: Any) -> Optional[str]:
    """Normalize a text join key for exact comparison.

    Process:
    1. Strip carriage returns, tabs, non-breaking and zero-width characters
    2. Collapse whitespace and trim
    3. Unicode NFKC normalization
    4. Casefold to a canonical case

    Accents are kept, so "Köln" and "Koln" remain different keys.

    Args:
        x: Value to normalize (string, number, or None).

    Returns:
        Normalized key, or None if input is None/NaN or blank.

    Examples:
        >>> normalize_key(" HAMBURG ")
        'hamburg'
        >>> normalize_key(None) is None
        True
    """
    if x is None or x is pd.NA or (isinstance(x, float) and pd.isna(x)):
        return None
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = _ZW_RE.sub("", s)
    s = _SPACE_RE.sub(" ", s).strip()
    if not s:
        return None
    return unicodedata.normalize("NFKC", s).casefold()


def normalize_key_series(series: pd.Series) -> pd.Series:
    """Vectorised wrapper around normalize_key for a join key column."""
    return series.map(normalize_key).astype("object")


def normalize_id(x: Any) -> Optional[str]:
    """Normalize an identifier (order id, customer id, postal code) to text.

    Integral floats produced by CSV/NaN upcasting lose their ".0" so that
    ``1.0`` and ``"1"`` compare equal. Text is trimmed but otherwise kept.

    Examples:
        >>> normalize_id(1.0)
        '1'
        >>> normalize_id(" 02115 ")
        '02115'
    """
    if x is None or x is pd.NA or (isinstance(x, float) and pd.isna(x)):
        return None
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    s = str(x).strip()
    return s or None


def normalize_id_series(series: pd.Series) -> pd.Series:
    """Vectorised wrapper around normalize_id."""
    return series.map(normalize_id).astype("object")


def to_date_series(series: pd.Series) -> pd.Series:
    """Truncate timestamps (or date strings) to calendar dates.

    Unparseable values become NaT/None and therefore never match a join key.
    """
    return pd.to_datetime(series, errors="coerce").dt.date


def require_columns(df: pd.DataFrame, required: Iterable[str], dataset: str) -> None:
    """Raise DataQualityError if any required column is missing.

    Args:
        df: DataFrame to check.
        required: Column names the dataset must carry.
        dataset: Dataset name used in the error message.

    Raises:
        DataQualityError: If one or more columns are missing.
    """
    required = list(required)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataQualityError(
            f"Missing required columns in {dataset}: {missing}. Required: {required}"
        )
