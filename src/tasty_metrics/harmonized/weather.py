"""Harmonized layer: weather enrichment (daily_weather_v).

Resolves marketplace weather observations to a known city and a display
country name. Observations that cannot be resolved are unusable downstream
and are excluded, never zero-filled or kept with a null city.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

from tasty_metrics.audit import (
    WEATHER_UNKNOWN_COUNTRY,
    WEATHER_UNKNOWN_POSTAL_CODE,
    ExclusionAudit,
    record_exclusion,
)
from tasty_metrics.utils import normalize_key_series

if TYPE_CHECKING:
    from tasty_metrics.sources.adapters import SourceAdapters

logger = logging.getLogger(__name__)

_POSTAL_KEYS = ["_k_postal", "_k_country"]
_COUNTRY_KEYS = ["_k_country", "_k_city"]


def _postal_lookup(geo: pd.DataFrame) -> pd.DataFrame:
    lookup = geo.rename(columns={"city_name": "city"})
    lookup["_k_postal"] = normalize_key_series(lookup["postal_code"])
    lookup["_k_country"] = normalize_key_series(lookup["country"])
    lookup = lookup.dropna(subset=_POSTAL_KEYS)

    duplicated = lookup.duplicated(subset=_POSTAL_KEYS)
    if duplicated.any():
        logger.warning(
            "Postal code lookup has %d duplicate (postal_code, country) key(s); keeping first",
            int(duplicated.sum()),
        )
        lookup = lookup[~duplicated]
    return lookup[_POSTAL_KEYS + ["city"]]


def _country_lookup(countries: pd.DataFrame) -> pd.DataFrame:
    lookup = countries.rename(columns={"country": "country_desc"})
    lookup["_k_country"] = normalize_key_series(lookup["iso_country"])
    lookup["_k_city"] = normalize_key_series(lookup["city"])
    lookup = lookup.dropna(subset=_COUNTRY_KEYS)
    lookup = lookup.drop_duplicates(subset=_COUNTRY_KEYS, keep="first")
    return lookup[_COUNTRY_KEYS + ["country_desc"]]


def build_daily_weather_v(
    adapters: SourceAdapters,
    audit: ExclusionAudit | None = None,
) -> pd.DataFrame:
    """Build the enriched daily weather dataset.

    Join plan:
    1. observations INNER JOIN postal codes ON (postal_code, country),
       attaching ``city`` (the lookup's city name).
    2. INNER JOIN countries ON (iso_country = observation country,
       city = observation city_name), attaching ``country_desc``.

    Adds ``yyyy_mm`` (month of date_valid_std) for monthly reporting.

    Args:
        adapters: Source adapters to read from.
        audit: Optional exclusion audit to record dropped observations on.

    Returns:
        DataFrame with every observation column plus city, country_desc
        and yyyy_mm; one row per resolvable observation.
    """
    obs = adapters.weather_observations()
    total = len(obs)

    obs["_k_postal"] = normalize_key_series(obs["postal_code"])
    obs["_k_country"] = normalize_key_series(obs["country"])
    obs["_k_city"] = normalize_key_series(obs["city_name"])

    resolved = obs.dropna(subset=_POSTAL_KEYS).merge(
        _postal_lookup(adapters.geo_references()), on=_POSTAL_KEYS, how="inner"
    )
    record_exclusion(audit, WEATHER_UNKNOWN_POSTAL_CODE, total - len(resolved))

    with_country = resolved.dropna(subset=_COUNTRY_KEYS).merge(
        _country_lookup(adapters.country_references()), on=_COUNTRY_KEYS, how="inner"
    )
    record_exclusion(audit, WEATHER_UNKNOWN_COUNTRY, len(resolved) - len(with_country))

    with_country["yyyy_mm"] = pd.to_datetime(with_country["date_valid_std"]).dt.strftime("%Y-%m")
    with_country = with_country.drop(columns=["_k_postal", "_k_country", "_k_city"])

    logger.info("Built daily_weather_v: %d of %d observation(s) resolved", len(with_country), total)
    return with_country.reset_index(drop=True)
