"""Analytics layer: aggregation engine and reporting queries.

- **daily_city_metrics_v**: one row per (date, city, country) with
  zero-filled daily sales and rounded weather averages
- reporting queries: dashboard filter, per-city daily sales, temperature
  and wind, monthly weather summary

Example:
    >>> from tasty_metrics.analytics import build_daily_city_metrics, filter_daily_city_metrics
    >>>
    >>> metrics = build_daily_city_metrics(adapters)
    >>> hamburg = filter_daily_city_metrics(
    ...     metrics, "2022-02-01", "2022-02-24", city="Hamburg", country="Germany"
    ... )
"""

from tasty_metrics.analytics.aggregate import (
    DAILY_CITY_METRICS_COLUMNS,
    aggregate_daily_city_metrics,
    average_then_convert,
    build_daily_city_metrics,
    convert_then_average,
)
from tasty_metrics.analytics.queries import (
    daily_max_wind,
    daily_sales,
    daily_temperature,
    filter_daily_city_metrics,
    monthly_city_weather,
)

__all__ = [
    "DAILY_CITY_METRICS_COLUMNS",
    "aggregate_daily_city_metrics",
    "average_then_convert",
    "build_daily_city_metrics",
    "convert_then_average",
    "daily_max_wind",
    "daily_sales",
    "daily_temperature",
    "filter_daily_city_metrics",
    "monthly_city_weather",
]
