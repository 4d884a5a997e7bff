"""Harmonized layer: order enrichment (orders_v).

Correlates valid orders with loyalty customers, the postal code lookup and
menu line items into one row per order line item.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

from tasty_metrics.audit import (
    ORDER_WITHOUT_CUSTOMER,
    ORDER_WITHOUT_LINE_ITEMS,
    ExclusionAudit,
    record_exclusion,
)
from tasty_metrics.utils import normalize_key_series

if TYPE_CHECKING:
    from tasty_metrics.sources.adapters import SourceAdapters

logger = logging.getLogger(__name__)


def _city_lookup(geo: pd.DataFrame) -> pd.DataFrame:
    """Reduce the postal code lookup to one row per normalized city name.

    A city has many postal codes; joining customers on city against the raw
    lookup would multiply every order by that count.
    """
    lookup = geo.rename(
        columns={"city_name": "customer_geo_city", "country": "customer_geo_country"}
    )
    lookup["_k_city"] = normalize_key_series(lookup["customer_geo_city"])
    lookup = lookup.dropna(subset=["_k_city"])
    lookup = lookup.sort_values(["customer_geo_country", "postal_code"], kind="stable")
    lookup = lookup.drop_duplicates(subset=["_k_city"], keep="first")
    return lookup[["_k_city", "customer_geo_city", "customer_geo_country"]]


def build_orders_v(
    adapters: SourceAdapters,
    audit: ExclusionAudit | None = None,
) -> pd.DataFrame:
    """Build the enriched order dataset at order line item grain.

    Join plan:
    1. valid orders INNER JOIN unique customers ON customer_id. Orders with
       no identifiable customer (null or unknown customer_id) are dropped:
       this dataset only describes orders attributable to a loyalty member.
    2. LEFT JOIN the city lookup ON customer city, attaching the canonical
       city name and ISO country. Customers in unknown cities are kept.
    3. INNER JOIN order line items ON order_id, attaching menu item names.

    Args:
        adapters: Source adapters to read from.
        audit: Optional exclusion audit to record dropped orders on.

    Returns:
        DataFrame with one row per order line item, carrying order,
        customer and menu item columns.
    """
    orders = adapters.valid_orders(audit)
    customers = adapters.unique_customers(audit)
    geo = adapters.geo_references()
    items = adapters.order_line_items()

    # Null ids would match each other in a pandas merge
    orders_with_id = orders.dropna(subset=["customer_id"])
    customers = customers.dropna(subset=["customer_id"]).rename(
        columns={"city": "customer_city", "country": "customer_country"}
    )

    enriched = orders_with_id.merge(customers, on="customer_id", how="inner")
    matched_orders = enriched["order_id"].nunique()
    record_exclusion(audit, ORDER_WITHOUT_CUSTOMER, len(orders) - matched_orders)

    enriched["_k_city"] = normalize_key_series(enriched["customer_city"])
    enriched = enriched.merge(_city_lookup(geo), on="_k_city", how="left")

    items = items.dropna(subset=["order_id"])
    enriched = enriched.merge(items, on="order_id", how="inner")
    record_exclusion(
        audit, ORDER_WITHOUT_LINE_ITEMS, matched_orders - enriched["order_id"].nunique()
    )

    enriched["order_date"] = enriched["order_ts"].dt.date
    enriched = enriched.drop(columns=["_k_city"])

    logger.info(
        "Built orders_v: %d line item row(s) from %d valid order(s)", len(enriched), len(orders)
    )
    return enriched.reset_index(drop=True)
