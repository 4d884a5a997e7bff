"""Public API for derived datasets.

This module provides the read boundary consumers use. Every dataset returned
here is re-derived from the sources and masked for the caller's role.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import pandas as pd

from tasty_metrics.analytics.queries import filter_daily_city_metrics
from tasty_metrics.catalog import DAILY_CITY_METRICS_V, DatasetCatalog, default_catalog
from tasty_metrics.masking.policy import PII_COLUMNS, PolicySet, policies_for
from tasty_metrics.masking.reader import MaskedReader
from tasty_metrics.sources.adapters import SourceAdapters
from tasty_metrics.sources.store import CsvSourceStore
from tasty_metrics.utils import parse_date

if TYPE_CHECKING:
    from tasty_metrics.audit import ExclusionAudit
    from tasty_metrics.config import DataPaths
    from tasty_metrics.masking.reader import RoleProvider
    from tasty_metrics.masking.roles import RoleConfig

logger = logging.getLogger(__name__)


def open_adapters(paths: DataPaths) -> SourceAdapters:
    """Source adapters over the CSV files under ``paths.raw_root``.

    Examples:
        >>> from tasty_metrics import DataPaths
        >>> paths = DataPaths.from_root("data", "config/roles.json")
        >>> adapters = open_adapters(paths)
    """
    return SourceAdapters(CsvSourceStore(paths))


def get_dataset(
    adapters: SourceAdapters,
    name: str,
    config: RoleConfig,
    role_provider: RoleProvider,
    catalog: DatasetCatalog | None = None,
    policies: PolicySet | None = None,
    audit: ExclusionAudit | None = None,
) -> pd.DataFrame:
    """Derive a named dataset and return it masked for the current role.

    Args:
        adapters: Source adapters to derive from.
        name: Qualified dataset name (e.g., "harmonized.orders_v").
        config: Role configuration.
        role_provider: Supplies the caller's role, asked once per call.
        catalog: Catalog to resolve ``name`` in (default: default_catalog()).
        policies: Column policies to apply (default: one per PII column;
            policies for columns the dataset does not carry are ignored).
        audit: Optional exclusion audit collecting dropped-row counts.

    Returns:
        Masked copy of the derived dataset.

    Raises:
        DatasetNotFoundError: If ``name`` is not registered.

    Examples:
        >>> orders = get_dataset(
        ...     adapters, "harmonized.orders_v", config, StaticRoleProvider("tasty_bi")
        ... )
        >>> orders["email"].unique()
        array(['**~MASKED~**'], dtype=object)

    """
    catalog = catalog or default_catalog()
    dataset = catalog.resolve(name)
    if policies is None:
        policies = policies_for(PII_COLUMNS)

    reader = MaskedReader(
        lambda: catalog.build(dataset.name, adapters, audit),
        policies,
        config,
        role_provider,
    )
    return reader.read()


def get_daily_city_metrics(
    adapters: SourceAdapters,
    config: RoleConfig,
    role_provider: RoleProvider,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
    audit: ExclusionAudit | None = None,
) -> pd.DataFrame:
    """Read daily_city_metrics_v filtered the way the dashboard does.

    Args:
        adapters: Source adapters to derive from.
        config: Role configuration.
        role_provider: Supplies the caller's role.
        start_date: Start date in YYYY-MM-DD format (inclusive), optional.
        end_date: End date in YYYY-MM-DD format (inclusive), optional.
        city: City to keep, optional.
        country: Display country to keep, optional.
        audit: Optional exclusion audit collecting dropped-row counts.

    Returns:
        Masked, filtered metrics, newest date first.

    Raises:
        ValueError: If a date is not in YYYY-MM-DD format.

    Examples:
        >>> get_daily_city_metrics(
        ...     adapters, config, EnvRoleProvider(),
        ...     start_date="2022-02-01", end_date="2022-02-24",
        ...     city="Hamburg", country="Germany",
        ... )

    """
    for value in (start_date, end_date):
        if value is not None:
            try:
                parse_date(value)
            except ValueError as e:
                raise ValueError(f"Invalid date format: {e}") from e

    metrics = get_dataset(adapters, DAILY_CITY_METRICS_V, config, role_provider, audit=audit)
    result = filter_daily_city_metrics(metrics, start_date, end_date, city, country)
    logger.info("Returning %d daily city metric row(s)", len(result))
    return result
