"""Reporting queries over the derived datasets.

In-memory equivalents of the reads a dashboard issues: date range, city
and country filters over daily_city_metrics_v, plus the exploratory
per-city queries on orders and enriched weather. None of these functions
read or write files.
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from tasty_metrics.functions import (
    as_numeric,
    fahrenheit_to_celsius,
    inch_to_millimeter,
    round_series,
)
from tasty_metrics.utils import normalize_key, normalize_key_series, require_columns, to_date_series

logger = logging.getLogger(__name__)


def _equals_key(series: pd.Series, value: str) -> pd.Series:
    return normalize_key_series(series) == normalize_key(value)


def _date_range_mask(
    dates: pd.Series,
    start_date: Optional[str],
    end_date: Optional[str],
) -> pd.Series:
    dates = to_date_series(dates)
    mask = pd.Series(True, index=dates.index)
    if start_date is not None:
        mask &= dates >= pd.to_datetime(start_date).date()
    if end_date is not None:
        mask &= dates <= pd.to_datetime(end_date).date()
    return mask


def _month_mask(dates: pd.Series, year: int, month: int) -> pd.Series:
    ts = pd.to_datetime(dates, errors="coerce")
    return (ts.dt.year == year) & (ts.dt.month == month)


def filter_daily_city_metrics(
    metrics: pd.DataFrame,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
    ascending: bool = False,
) -> pd.DataFrame:
    """Filter daily_city_metrics_v the way the reporting dashboard does.

    Args:
        metrics: daily_city_metrics_v DataFrame.
        start_date: Start date in YYYY-MM-DD format (inclusive), optional.
        end_date: End date in YYYY-MM-DD format (inclusive), optional.
        city: City name to keep, compared as a normalized key, optional.
        country: Display country name to keep, optional.
        ascending: Sort order of ``date`` (default: newest first).

    Returns:
        Filtered copy of ``metrics``.

    Examples:
        >>> filter_daily_city_metrics(
        ...     metrics, "2022-02-01", "2022-02-24", city="Hamburg", country="Germany"
        ... )

    """
    require_columns(metrics, ["date", "city", "country"], "daily_city_metrics_v")
    mask = _date_range_mask(metrics["date"], start_date, end_date)
    if city is not None:
        mask &= _equals_key(metrics["city"], city)
    if country is not None:
        mask &= _equals_key(metrics["country"], country)

    result = metrics[mask].sort_values("date", ascending=ascending, kind="stable")
    return result.reset_index(drop=True)


def daily_sales(
    orders: pd.DataFrame,
    city: str,
    country: str,
    start_date: str,
    end_date: str,
) -> pd.DataFrame:
    """Total order sales per day for one city, from the order side only.

    Unlike daily_city_metrics_v, days without orders are absent rather than
    zero-filled, since no weather rows drive this query.

    Args:
        orders: Valid orders (SourceAdapters.valid_orders).
        city: Order ``primary_city`` to keep.
        country: Order ``country`` to keep.
        start_date: Start date in YYYY-MM-DD format (inclusive).
        end_date: End date in YYYY-MM-DD format (inclusive).

    Returns:
        DataFrame with columns ``date`` and ``daily_sales``, oldest first.
    """
    require_columns(orders, ["order_ts", "order_total", "primary_city", "country"], "orders")
    mask = (
        _equals_key(orders["primary_city"], city)
        & _equals_key(orders["country"], country)
        & _date_range_mask(orders["order_ts"], start_date, end_date)
    )
    subset = orders[mask].assign(date=to_date_series(orders.loc[mask, "order_ts"]))
    if subset.empty:
        return pd.DataFrame(columns=["date", "daily_sales"])

    result = subset.groupby("date", as_index=False).agg(daily_sales=("order_total", "sum"))
    return result.sort_values("date").reset_index(drop=True)


def _weather_for_city_month(
    weather_v: pd.DataFrame, city: str, country: str, year: int, month: int
) -> pd.DataFrame:
    require_columns(weather_v, ["date_valid_std", "city", "country_desc"], "daily_weather_v")
    mask = (
        _equals_key(weather_v["city"], city)
        & _equals_key(weather_v["country_desc"], country)
        & _month_mask(weather_v["date_valid_std"], year, month)
    )
    return weather_v[mask]


def daily_temperature(
    weather_v: pd.DataFrame,
    city: str,
    country: str,
    year: int,
    month: int,
) -> pd.DataFrame:
    """Average air temperature (°F) per day for one city and month.

    Returns:
        DataFrame with columns country, city, date, avg_temperature_air_2m_f,
        newest first.
    """
    subset = _weather_for_city_month(weather_v, city, country, year, month).copy()
    subset["_temp_f"] = as_numeric(subset["avg_temperature_air_2m_f"], "avg_temperature_air_2m_f")
    result = subset.groupby(["country_desc", "city", "date_valid_std"], as_index=False).agg(
        avg_temperature_air_2m_f=("_temp_f", "mean")
    )
    result = result.rename(columns={"country_desc": "country", "date_valid_std": "date"})
    return result.sort_values("date", ascending=False).reset_index(drop=True)


def daily_max_wind(
    weather_v: pd.DataFrame,
    city: str,
    country: str,
    year: int,
    month: int,
) -> pd.DataFrame:
    """Maximum wind speed (mph at 100m) per day for one city and month.

    Returns:
        DataFrame with columns country, city, date, max_wind_speed_100m_mph,
        newest first.
    """
    subset = _weather_for_city_month(weather_v, city, country, year, month).copy()
    subset["_wind"] = as_numeric(subset["max_wind_speed_100m_mph"], "max_wind_speed_100m_mph")
    result = subset.groupby(["country_desc", "city", "date_valid_std"], as_index=False).agg(
        max_wind_speed_100m_mph=("_wind", "max")
    )
    result = result.rename(columns={"country_desc": "country", "date_valid_std": "date"})
    return result.sort_values("date", ascending=False).reset_index(drop=True)


def monthly_city_weather(weather_v: pd.DataFrame) -> pd.DataFrame:
    """Monthly weather summary per (yyyy_mm, city, country).

    Here the unit conversions are applied to the monthly averages
    (average-then-convert), so the Celsius and millimeter columns are exact
    conversions of the reported Fahrenheit and inch averages. Compare
    aggregate_daily_city_metrics, which converts each observation first.

    Returns:
        DataFrame with columns yyyy_mm, city, country,
        avg_temperature_fahrenheit, avg_temperature_celsius,
        avg_precipitation_inches, avg_precipitation_millimeters,
        max_wind_speed_mph.
    """
    require_columns(
        weather_v,
        [
            "yyyy_mm",
            "city",
            "country_desc",
            "avg_temperature_air_2m_f",
            "tot_precipitation_in",
            "max_wind_speed_100m_mph",
        ],
        "daily_weather_v",
    )
    columns = [
        "yyyy_mm",
        "city",
        "country",
        "avg_temperature_fahrenheit",
        "avg_temperature_celsius",
        "avg_precipitation_inches",
        "avg_precipitation_millimeters",
        "max_wind_speed_mph",
    ]
    if weather_v.empty:
        return pd.DataFrame(columns=columns)

    df = weather_v.copy()
    df["_temp_f"] = as_numeric(df["avg_temperature_air_2m_f"], "avg_temperature_air_2m_f")
    df["_precip_in"] = as_numeric(df["tot_precipitation_in"], "tot_precipitation_in")
    df["_wind"] = as_numeric(df["max_wind_speed_100m_mph"], "max_wind_speed_100m_mph")

    result = df.groupby(["yyyy_mm", "city", "country_desc"], as_index=False).agg(
        avg_temperature_fahrenheit=("_temp_f", "mean"),
        avg_precipitation_inches=("_precip_in", "mean"),
        max_wind_speed_mph=("_wind", "max"),
    )
    # Convert the averages, not the observations
    result["avg_temperature_celsius"] = round_series(
        fahrenheit_to_celsius(result["avg_temperature_fahrenheit"])
    )
    result["avg_precipitation_millimeters"] = round_series(
        inch_to_millimeter(result["avg_precipitation_inches"])
    )
    result["avg_temperature_fahrenheit"] = round_series(result["avg_temperature_fahrenheit"])
    result["avg_precipitation_inches"] = round_series(result["avg_precipitation_inches"])

    result = result.rename(columns={"country_desc": "country"})
    logger.debug("Summarized %d city month(s)", len(result))
    return result[columns].sort_values(["yyyy_mm", "city", "country"]).reset_index(drop=True)
