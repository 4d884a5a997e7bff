"""Analytics layer: aggregate the sales/weather correlation into daily_city_metrics_v.

One row per (date, city, country) with zero-filled sales and rounded
weather averages. Nothing is materialized: every call re-derives the
metrics from the current state of the sources.

Conversion order matters. ``avg_temperature_celsius`` and
``avg_precipitation_millimeters`` convert each observation first and
average afterwards (convert_then_average). Reporting code that converts an
already averaged value uses average_then_convert instead; on non-constant
input the two give different results and they are kept as separate
operations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from tasty_metrics.functions import (
    as_numeric,
    fahrenheit_to_celsius,
    inch_to_millimeter,
    round_series,
)
from tasty_metrics.harmonized.correlation import WEATHER_ROW_ID, correlate_sales_weather
from tasty_metrics.harmonized.weather import build_daily_weather_v
from tasty_metrics.utils import normalize_id, require_columns

if TYPE_CHECKING:
    from tasty_metrics.audit import ExclusionAudit
    from tasty_metrics.sources.adapters import SourceAdapters

logger = logging.getLogger(__name__)

GROUP_KEYS = ["date", "city", "country"]

METRIC_COLUMNS = [
    "daily_sales",
    "avg_temperature_fahrenheit",
    "avg_temperature_celsius",
    "avg_precipitation_inches",
    "avg_precipitation_millimeters",
    "max_wind_speed_mph",
]

DAILY_CITY_METRICS_COLUMNS = GROUP_KEYS + METRIC_COLUMNS

_CORRELATION_COLUMNS = [
    WEATHER_ROW_ID,
    "date_valid_std",
    "city",
    "country_desc",
    "avg_temperature_air_2m_f",
    "tot_precipitation_in",
    "max_wind_speed_100m_mph",
    "order_id",
    "order_total",
]
_WEATHER_GROUP = ["date_valid_std", "city", "country_desc"]


def convert_then_average(values: pd.Series, convert: Callable) -> float:
    """Convert every value, then take the mean (nulls skipped).

    Examples:
        >>> convert_then_average(pd.Series([32.0, 34.0]), fahrenheit_to_celsius)
        0.55555
    """
    return float(convert(values).mean())


def average_then_convert(values: pd.Series, convert: Callable) -> float:
    """Take the mean (nulls skipped), then convert the single averaged value.

    Examples:
        >>> average_then_convert(pd.Series([32.0, 34.0]), fahrenheit_to_celsius)
        0.5556
    """
    mean = as_numeric(values).mean()
    if pd.isna(mean):
        return np.nan
    return float(convert(float(mean)))


def _decimal_sum(values: pd.Series) -> float:
    """Sum money amounts exactly, so 0.1 + 0.2 reports as 0.3."""
    return float(sum((Decimal(str(v)) for v in values), Decimal(0)))


def aggregate_daily_city_metrics(correlation: pd.DataFrame) -> pd.DataFrame:
    """Group the sales/weather correlation by (date, city, country).

    Per group:
    - daily_sales = sum(order_total), 0.0 when no order matched
    - avg_temperature_fahrenheit = round(avg(avg_temperature_air_2m_f), 2)
    - avg_temperature_celsius = round(avg(fahrenheit_to_celsius(f)), 2)
    - avg_precipitation_inches = round(avg(tot_precipitation_in), 2)
    - avg_precipitation_millimeters = round(avg(inch_to_millimeter(in)), 2)
    - max_wind_speed_mph = max(max_wind_speed_100m_mph)

    Rounding is half away from zero and happens once, on the aggregate.

    The left join repeats a weather row once per matching order, and the
    same order matches every weather row of its city (one per postal code).
    Weather metrics are therefore computed over distinct weather rows and
    sales over distinct orders per group.

    Args:
        correlation: Output of correlate_sales_weather.

    Returns:
        DataFrame with DAILY_CITY_METRICS_COLUMNS, sorted by key.

    Raises:
        DataQualityError: If required columns are missing.
        DomainError: If a weather measure is not numeric.
    """
    require_columns(correlation, _CORRELATION_COLUMNS, "sales/weather correlation")

    if correlation.empty:
        return pd.DataFrame(columns=DAILY_CITY_METRICS_COLUMNS)

    weather = correlation.drop_duplicates(subset=[WEATHER_ROW_ID]).copy()
    temp_f = as_numeric(weather["avg_temperature_air_2m_f"], "avg_temperature_air_2m_f")
    precip_in = as_numeric(weather["tot_precipitation_in"], "tot_precipitation_in")

    weather["_temp_f"] = temp_f
    weather["_temp_c"] = fahrenheit_to_celsius(temp_f)
    weather["_precip_in"] = precip_in
    weather["_precip_mm"] = inch_to_millimeter(precip_in)
    weather["_wind"] = as_numeric(weather["max_wind_speed_100m_mph"], "max_wind_speed_100m_mph")

    # Mean of the converted column: conversion happens per observation
    metrics = weather.groupby(_WEATHER_GROUP, as_index=False).agg(
        avg_temperature_fahrenheit=("_temp_f", "mean"),
        avg_temperature_celsius=("_temp_c", "mean"),
        avg_precipitation_inches=("_precip_in", "mean"),
        avg_precipitation_millimeters=("_precip_mm", "mean"),
        max_wind_speed_mph=("_wind", "max"),
    )

    sales = correlation.dropna(subset=["order_id"]).copy()
    sales["_order_key"] = sales["order_id"].map(normalize_id)
    sales = sales.drop_duplicates(subset=_WEATHER_GROUP + ["_order_key"])
    daily_sales = (
        sales.groupby(_WEATHER_GROUP)["order_total"]
        .agg(_decimal_sum)
        .rename("daily_sales")
        .reset_index()
    )

    result = metrics.merge(daily_sales, on=_WEATHER_GROUP, how="left")
    result["daily_sales"] = result["daily_sales"].fillna(0.0).astype("float64")

    for col in (
        "avg_temperature_fahrenheit",
        "avg_temperature_celsius",
        "avg_precipitation_inches",
        "avg_precipitation_millimeters",
    ):
        result[col] = round_series(result[col])

    result = result.rename(columns={"date_valid_std": "date", "country_desc": "country"})
    result = result[DAILY_CITY_METRICS_COLUMNS].sort_values(GROUP_KEYS).reset_index(drop=True)

    logger.info("Aggregated %d daily city metric row(s)", len(result))
    return result


def build_daily_city_metrics(
    adapters: SourceAdapters,
    audit: ExclusionAudit | None = None,
) -> pd.DataFrame:
    """Derive daily_city_metrics_v from the current state of the sources.

    Args:
        adapters: Source adapters to read from.
        audit: Optional exclusion audit collecting dropped-row counts.

    Returns:
        DataFrame with DAILY_CITY_METRICS_COLUMNS.
    """
    weather_v = build_daily_weather_v(adapters, audit)
    orders = adapters.valid_orders(audit)
    correlation = correlate_sales_weather(weather_v, orders)
    return aggregate_daily_city_metrics(correlation)
