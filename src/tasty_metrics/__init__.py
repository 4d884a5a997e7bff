"""Tasty Metrics - harmonized POS and weather metrics with role-aware masking.

This package correlates food truck orders, loyalty customers and
marketplace weather observations into derived datasets, and masks
protected columns at read time according to the caller's role:

- **Sources**: raw orders, line items, customers, weather, postal codes, countries
- **Harmonized**: orders_v and daily_weather_v (never persisted)
- **Analytics**: daily_city_metrics_v, one row per (date, city, country)

Module Structure:
    tasty_metrics.functions: Unit conversions and rounding
    tasty_metrics.sources: Source store and typed adapters
    tasty_metrics.harmonized: Join logic for orders and weather
    tasty_metrics.analytics: Aggregation engine and reporting queries
    tasty_metrics.masking: Roles, masking policies and masked readers
    tasty_metrics.catalog: Named derived datasets
    tasty_metrics.api: Masked read boundary
    tasty_metrics.config: DataPaths configuration

Quick Start:
    >>> from tasty_metrics import DataPaths
    >>> from tasty_metrics.api import get_daily_city_metrics, open_adapters
    >>> from tasty_metrics.masking import EnvRoleProvider, load_role_config
    >>>
    >>> paths = DataPaths.from_root("data", "config/roles.json")
    >>> metrics = get_daily_city_metrics(
    ...     open_adapters(paths),
    ...     load_role_config(paths.roles_json),
    ...     EnvRoleProvider(),
    ...     start_date="2022-02-01",
    ...     end_date="2022-02-24",
    ...     city="Hamburg",
    ...     country="Germany",
    ... )
"""

__version__ = "0.1.0"

from tasty_metrics.config import DataPaths
from tasty_metrics.exceptions import (
    ConfigError,
    DataQualityError,
    DatasetNotFoundError,
    DomainError,
    TastyMetricsError,
)

__all__ = [
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "DatasetNotFoundError",
    "DomainError",
    "TastyMetricsError",
    "__version__",
]
