"""Scalar function library: unit conversions used by aggregation.

Both conversions are pure and total over the real numbers. They accept
input of any precision and return a value at the fixed storage scale of
``RESULT_PLACES`` decimal places (rounded half away from zero), matching a
``NUMBER(35,4)`` column in the warehouse.

Each function can be called on a single value (returns ``Decimal``) or on a
``pandas.Series`` (returns a float Series). That lets callers choose between
converting each observation before an aggregate and converting an already
aggregated value. Because every conversion lands on the 4-place scale, the
two orders generally give different results; see
``tasty_metrics.analytics.aggregate``.

Examples:
    >>> fahrenheit_to_celsius(212)
    Decimal('100.0000')
    >>> fahrenheit_to_celsius(33)
    Decimal('0.5556')
    >>> inch_to_millimeter("1")
    Decimal('25.4000')
    >>> round_half_away_from_zero(2.675)
    Decimal('2.68')
"""

from __future__ import annotations

import math
import numbers
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union, overload

import numpy as np
import pandas as pd

from tasty_metrics.exceptions import DomainError

FREEZING_POINT_F = Decimal(32)
MILLIMETERS_PER_INCH = Decimal("25.4")

# Scale of a conversion result
RESULT_PLACES = 4

# Display precision for every rounded metric
DISPLAY_PLACES = 2

Number = Union[int, float, Decimal, str]


def _to_decimal(value: Any, func: str) -> Optional[Decimal]:
    """Coerce a scalar to Decimal, mapping nulls to None.

    Raises:
        DomainError: If the value is not a finite real number.
    """
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, (bool, np.bool_)):
        raise DomainError(f"{func}() expects a number, got boolean {value!r}")

    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, numbers.Real):
        if isinstance(value, float) and math.isnan(value):
            return None
        # str() gives the shortest repr, so 41.1 stays 41.1 rather than its binary expansion
        d = Decimal(str(value))
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip())
        except InvalidOperation as e:
            raise DomainError(f"{func}() expects a number, got {value!r}") from e
    else:
        raise DomainError(f"{func}() expects a number, got {type(value).__name__}")

    if d.is_nan():
        return None
    if d.is_infinite():
        raise DomainError(f"{func}() expects a finite number, got {value!r}")
    return d


def _quantize(d: Decimal, places: int) -> Decimal:
    # ROUND_HALF_UP in the decimal module rounds ties away from zero
    return d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _to_float(d: Optional[Decimal]) -> float:
    return float(d) if d is not None else np.nan


def as_numeric(series: pd.Series, func: str = "as_numeric") -> pd.Series:
    """Coerce a Series to float64, mapping nulls to NaN.

    Raises:
        DomainError: If any element is not a finite real number.
    """
    if pd.api.types.is_bool_dtype(series):
        raise DomainError(f"{func}() expects numbers, got a boolean series")
    try:
        out = pd.to_numeric(series, errors="raise").astype("float64")
    except (ValueError, TypeError) as e:
        raise DomainError(f"{func}() expects numbers: {e}") from e
    if np.isinf(out).any():
        raise DomainError(f"{func}() expects finite numbers, got an infinite value")
    return out


@overload
def fahrenheit_to_celsius(temp_f: pd.Series) -> pd.Series: ...


@overload
def fahrenheit_to_celsius(temp_f: Number | None) -> Optional[Decimal]: ...


def fahrenheit_to_celsius(temp_f):
    """Convert degrees Fahrenheit to degrees Celsius: ``(f - 32) * 5/9``.

    Args:
        temp_f: Temperature in Fahrenheit. A scalar (int, float, Decimal or
            numeric string) or a Series of them. Nulls propagate.

    Returns:
        Decimal at RESULT_PLACES for scalar input (None for null input),
        float Series for Series input.

    Raises:
        DomainError: If the input is not numeric.

    Examples:
        >>> fahrenheit_to_celsius(32)
        Decimal('0.0000')
        >>> fahrenheit_to_celsius(41)
        Decimal('5.0000')
    """
    if isinstance(temp_f, pd.Series):
        values = as_numeric(temp_f, "fahrenheit_to_celsius")
        return values.map(lambda v: _to_float(fahrenheit_to_celsius(v))).astype("float64")

    d = _to_decimal(temp_f, "fahrenheit_to_celsius")
    if d is None:
        return None
    # Multiply before dividing so whole-degree results stay exact
    return _quantize((d - FREEZING_POINT_F) * 5 / 9, RESULT_PLACES)


@overload
def inch_to_millimeter(inch: pd.Series) -> pd.Series: ...


@overload
def inch_to_millimeter(inch: Number | None) -> Optional[Decimal]: ...


def inch_to_millimeter(inch):
    """Convert inches to millimeters: ``inch * 25.4``.

    Args:
        inch: Length in inches, scalar or Series. Nulls propagate.

    Returns:
        Decimal at RESULT_PLACES for scalar input (None for null input),
        float Series for Series input.

    Raises:
        DomainError: If the input is not numeric.

    Examples:
        >>> inch_to_millimeter(1)
        Decimal('25.4000')
        >>> inch_to_millimeter(0.0001)
        Decimal('0.0025')
    """
    if isinstance(inch, pd.Series):
        values = as_numeric(inch, "inch_to_millimeter")
        return values.map(lambda v: _to_float(inch_to_millimeter(v))).astype("float64")

    d = _to_decimal(inch, "inch_to_millimeter")
    if d is None:
        return None
    return _quantize(d * MILLIMETERS_PER_INCH, RESULT_PLACES)


def round_half_away_from_zero(value: Any, places: int = DISPLAY_PLACES) -> Optional[Decimal]:
    """Round to a fixed number of decimal places, halves away from zero.

    Python's ``round`` and pandas' ``Series.round`` use banker's rounding
    (2.5 -> 2), which is not what a report reader expects.

    Args:
        value: Number to round. Nulls propagate.
        places: Decimal places to keep (default: 2).

    Returns:
        Rounded Decimal, or None for null input.

    Examples:
        >>> round_half_away_from_zero(0.125)
        Decimal('0.13')
        >>> round_half_away_from_zero(-0.125)
        Decimal('-0.13')
    """
    d = _to_decimal(value, "round_half_away_from_zero")
    if d is None:
        return None
    return _quantize(d, places)


def round_series(series: pd.Series, places: int = DISPLAY_PLACES) -> pd.Series:
    """Apply round_half_away_from_zero element-wise, returning floats."""
    return series.map(lambda x: _to_float(round_half_away_from_zero(x, places))).astype("float64")
