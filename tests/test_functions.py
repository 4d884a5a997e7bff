"""Tests for unit conversions and rounding."""

from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from tasty_metrics.analytics.aggregate import average_then_convert, convert_then_average
from tasty_metrics.exceptions import DomainError
from tasty_metrics.functions import (
    as_numeric,
    fahrenheit_to_celsius,
    inch_to_millimeter,
    round_half_away_from_zero,
    round_series,
)


def test_fahrenheit_to_celsius_reference_points() -> None:
    """Freezing and boiling points convert exactly."""
    assert fahrenheit_to_celsius(32) == Decimal("0")
    assert fahrenheit_to_celsius(212) == Decimal("100")
    assert fahrenheit_to_celsius(41.0) == Decimal("5")
    assert fahrenheit_to_celsius(-40) == Decimal("-40")


def test_inch_to_millimeter_reference_point() -> None:
    assert inch_to_millimeter(1) == Decimal("25.4")
    assert inch_to_millimeter(Decimal("0.5")) == Decimal("12.7")
    assert inch_to_millimeter(0) == Decimal("0")


def test_conversions_accept_numeric_strings() -> None:
    assert fahrenheit_to_celsius(" 212 ") == Decimal("100")
    assert inch_to_millimeter("2") == Decimal("50.8")


def test_conversions_return_four_decimal_places() -> None:
    assert fahrenheit_to_celsius(33) == Decimal("0.5556")
    assert inch_to_millimeter(0.0001) == Decimal("0.0025")


@pytest.mark.parametrize("value", [None, float("nan"), np.nan, pd.NA, "NaN"])
def test_conversions_propagate_null(value) -> None:
    assert fahrenheit_to_celsius(value) is None
    assert inch_to_millimeter(value) is None


@pytest.mark.parametrize("value", ["warm", "", True, float("inf"), "-Infinity", [1]])
def test_conversions_reject_non_numeric(value) -> None:
    with pytest.raises(DomainError):
        fahrenheit_to_celsius(value)
    with pytest.raises(DomainError):
        inch_to_millimeter(value)


def test_domain_error_is_value_error() -> None:
    """Callers catching ValueError also catch conversion errors."""
    with pytest.raises(ValueError):
        fahrenheit_to_celsius("warm")


def test_series_conversion_is_row_wise() -> None:
    result = fahrenheit_to_celsius(pd.Series([32.0, None, 212.0], index=[5, 6, 7]))

    assert result.dtype == "float64"
    assert list(result.index) == [5, 6, 7]
    assert result.iloc[0] == 0.0
    assert np.isnan(result.iloc[1])
    assert result.iloc[2] == 100.0

    mm = inch_to_millimeter(pd.Series(["1", "0.5"]))
    assert list(mm) == [25.4, 12.7]


def test_series_conversion_rejects_text() -> None:
    with pytest.raises(DomainError):
        fahrenheit_to_celsius(pd.Series(["41.0", "warm"]))


def test_as_numeric_rejects_booleans_and_infinity() -> None:
    with pytest.raises(DomainError):
        as_numeric(pd.Series([True, False]))
    with pytest.raises(DomainError):
        as_numeric(pd.Series([1.0, np.inf]))


def test_round_half_away_from_zero() -> None:
    """Halves move away from zero, unlike Python's banker's rounding."""
    assert round_half_away_from_zero(0.125) == Decimal("0.13")
    assert round_half_away_from_zero(-0.125) == Decimal("-0.13")
    assert round_half_away_from_zero(2.675) == Decimal("2.68")
    assert round_half_away_from_zero(2.5, places=0) == Decimal("3")
    assert round_half_away_from_zero(None) is None


def test_round_series_keeps_nulls() -> None:
    result = round_series(pd.Series([0.125, None, 1.005]))
    assert result.iloc[0] == 0.13
    assert np.isnan(result.iloc[1])
    assert result.iloc[2] == 1.01


def test_convert_then_average_differs_from_average_then_convert() -> None:
    """The two call orders are distinct operations on non-constant input."""
    values = pd.Series([32.0, 34.0])

    per_row = convert_then_average(values, fahrenheit_to_celsius)
    on_average = average_then_convert(values, fahrenheit_to_celsius)

    assert per_row == pytest.approx(0.55555)
    assert on_average == pytest.approx(0.5556)
    assert per_row != on_average


def test_call_orders_agree_on_constant_input() -> None:
    values = pd.Series([41.0, 41.0, 41.0])
    assert convert_then_average(values, fahrenheit_to_celsius) == 5.0
    assert average_then_convert(values, fahrenheit_to_celsius) == 5.0


def test_average_then_convert_of_nulls_is_null() -> None:
    assert np.isnan(average_then_convert(pd.Series([None, None], dtype=object), inch_to_millimeter))
