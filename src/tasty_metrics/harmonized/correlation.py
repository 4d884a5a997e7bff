"""Harmonized layer: sales/weather correlation.

Weather is the driving side: every enriched weather row survives the join,
with null order columns where no sale matches. Aggregation then zero-fills
the sales side only.
"""

from __future__ import annotations

import logging

import pandas as pd

from tasty_metrics.utils import normalize_key_series, require_columns, to_date_series

logger = logging.getLogger(__name__)

# Identifies one enriched weather row across the fan-out of the left join
WEATHER_ROW_ID = "weather_row_id"

_JOIN_KEYS = ["_k_date", "_k_city", "_k_country"]
_ORDER_COLUMNS = ["order_id", "order_ts", "order_total", "primary_city", "country"]


def correlate_sales_weather(weather_v: pd.DataFrame, orders: pd.DataFrame) -> pd.DataFrame:
    """LEFT JOIN enriched weather to valid orders on (date, city, country).

    Match conditions:
    - weather ``date_valid_std`` = calendar date of ``order_ts``
    - weather ``city`` = order ``primary_city``
    - weather ``country_desc`` = order ``country``

    Text keys are compared after normalize_key (trimmed, casefolded).

    Args:
        weather_v: Output of build_daily_weather_v.
        orders: Valid orders (SourceAdapters.valid_orders).

    Returns:
        One row per (weather row, matching order) pair, or one row with null
        order columns for weather rows without sales. The order's country
        is returned as ``order_country``. Each weather row keeps a stable
        ``weather_row_id``.
    """
    require_columns(weather_v, ["date_valid_std", "city", "country_desc"], "daily_weather_v")
    require_columns(orders, _ORDER_COLUMNS, "orders")

    weather = weather_v.reset_index(drop=True).copy()
    weather[WEATHER_ROW_ID] = range(len(weather))
    weather["_k_date"] = weather["date_valid_std"]
    weather["_k_city"] = normalize_key_series(weather["city"])
    weather["_k_country"] = normalize_key_series(weather["country_desc"])

    sales = orders[_ORDER_COLUMNS].rename(columns={"country": "order_country"})
    sales["_k_date"] = to_date_series(sales["order_ts"])
    sales["_k_city"] = normalize_key_series(sales["primary_city"])
    sales["_k_country"] = normalize_key_series(sales["order_country"])
    # Orders with a null key can never match; dropping them keeps null weather keys unmatched too
    sales = sales.dropna(subset=_JOIN_KEYS)

    correlated = weather.merge(sales, on=_JOIN_KEYS, how="left")
    correlated = correlated.drop(columns=_JOIN_KEYS)

    unmatched = correlated.loc[correlated["order_id"].isna(), WEATHER_ROW_ID].nunique()
    logger.info(
        "Correlated %d weather row(s) with %d order(s); %d weather row(s) without sales",
        len(weather),
        correlated["order_id"].nunique(),
        unmatched,
    )
    return correlated
