"""Source adapter layer: typed, read-only views over the raw datasets.

No join logic lives here. The adapters only check each dataset's column
contract, coerce identifiers, timestamps and amounts to consistent types,
apply the order validity predicate and deduplicate customers.
"""

from __future__ import annotations

import logging

import pandas as pd

from tasty_metrics.audit import (
    DUPLICATE_CUSTOMER_ROW,
    INVALID_ORDER_TOTAL,
    ExclusionAudit,
    record_exclusion,
)
from tasty_metrics.sources.store import (
    COUNTRIES,
    CUSTOMERS,
    ORDER_LINE_ITEMS,
    ORDERS,
    POSTAL_CODES,
    WEATHER_OBSERVATIONS,
    SourceStore,
)
from tasty_metrics.utils import normalize_id_series, require_columns, to_date_series

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    "order_id",
    "truck_id",
    "customer_id",
    "order_ts",
    "order_total",
    "primary_city",
    "country",
]
LINE_ITEM_COLUMNS = ["order_id", "menu_item_name", "quantity", "price"]
CUSTOMER_COLUMNS = ["customer_id", "first_name", "last_name", "city", "country", "email"]
WEATHER_COLUMNS = [
    "postal_code",
    "country",
    "city_name",
    "date_valid_std",
    "avg_temperature_air_2m_f",
    "tot_precipitation_in",
    "max_wind_speed_100m_mph",
]
GEO_COLUMNS = ["postal_code", "country", "city_name"]
COUNTRY_COLUMNS = ["iso_country", "city", "country"]


class SourceAdapters:
    """Typed accessors over the six raw datasets of a SourceStore.

    Every accessor reads the store afresh and returns a new DataFrame, so
    the adapters hold no state besides the store reference.

    Example:
        >>> adapters = SourceAdapters(InMemorySourceStore(frames))
        >>> orders = adapters.valid_orders()
        >>> (orders["order_total"] > 0).all()
        True
    """

    def __init__(self, store: SourceStore) -> None:
        self.store = store

    def _read(self, name: str, required: list[str]) -> pd.DataFrame:
        df = self.store.read(name)
        require_columns(df, required, name)
        return df.copy()

    def orders(self) -> pd.DataFrame:
        """All orders, typed: text ids, timestamp order_ts, numeric order_total.

        Totals that do not parse as numbers become NaN and fail the
        validity predicate in valid_orders().
        """
        df = self._read(ORDERS, ORDER_COLUMNS)
        for col in ("order_id", "truck_id", "customer_id"):
            df[col] = normalize_id_series(df[col])
        df["order_ts"] = pd.to_datetime(df["order_ts"], errors="coerce")
        df["order_total"] = pd.to_numeric(df["order_total"], errors="coerce")
        return df

    def valid_orders(self, audit: ExclusionAudit | None = None) -> pd.DataFrame:
        """Orders with ``order_total > 0``; null and non-positive totals are excluded."""
        df = self.orders()
        valid = df["order_total"] > 0
        record_exclusion(audit, INVALID_ORDER_TOTAL, int((~valid).sum()))
        return df[valid].reset_index(drop=True)

    def order_line_items(self) -> pd.DataFrame:
        """Menu line items per order, used to attach item names."""
        df = self._read(ORDER_LINE_ITEMS, LINE_ITEM_COLUMNS)
        df["order_id"] = normalize_id_series(df["order_id"])
        df["quantity"] = pd.to_numeric(df["quantity"], errors="coerce")
        df["price"] = pd.to_numeric(df["price"], errors="coerce")
        return df

    def unique_customers(self, audit: ExclusionAudit | None = None) -> pd.DataFrame:
        """Customers deduplicated on full-row identity.

        Two rows collapse only when every field is equal. Rows that share a
        customer_id but differ anywhere else are both kept.
        """
        df = self._read(CUSTOMERS, CUSTOMER_COLUMNS)
        df["customer_id"] = normalize_id_series(df["customer_id"])
        unique = df.drop_duplicates().reset_index(drop=True)
        record_exclusion(audit, DUPLICATE_CUSTOMER_ROW, len(df) - len(unique))
        return unique

    def weather_observations(self) -> pd.DataFrame:
        """Daily weather observations with date_valid_std as a calendar date.

        Measure columns are passed through untouched; they are validated
        where the unit conversions consume them.
        """
        df = self._read(WEATHER_OBSERVATIONS, WEATHER_COLUMNS)
        df["postal_code"] = normalize_id_series(df["postal_code"])
        df["date_valid_std"] = to_date_series(df["date_valid_std"])
        return df

    def geo_references(self) -> pd.DataFrame:
        """Postal code lookup: (postal_code, country) -> city_name."""
        df = self._read(POSTAL_CODES, GEO_COLUMNS)
        df["postal_code"] = normalize_id_series(df["postal_code"])
        return df.drop_duplicates().reset_index(drop=True)

    def country_references(self) -> pd.DataFrame:
        """Country lookup: (iso_country, city) -> display country name."""
        df = self._read(COUNTRIES, COUNTRY_COLUMNS)
        return df.drop_duplicates().reset_index(drop=True)
