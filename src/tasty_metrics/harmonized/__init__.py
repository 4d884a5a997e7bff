"""Harmonization engine.

Builds the intermediate, never-persisted datasets that correlate first-party
POS data with third-party weather data:

- **orders_v**: valid orders + customers + city lookup + menu line items,
  one row per order line item
- **daily_weather_v**: weather observations resolved to city and display
  country, one row per observation
- **sales/weather correlation**: daily_weather_v LEFT JOIN valid orders on
  (date, city, country)

Join keys are compared as trimmed, casefolded text; order timestamps are
truncated to calendar dates.
"""

from tasty_metrics.harmonized.correlation import WEATHER_ROW_ID, correlate_sales_weather
from tasty_metrics.harmonized.orders import build_orders_v
from tasty_metrics.harmonized.weather import build_daily_weather_v

__all__ = [
    "WEATHER_ROW_ID",
    "build_daily_weather_v",
    "build_orders_v",
    "correlate_sales_weather",
]
