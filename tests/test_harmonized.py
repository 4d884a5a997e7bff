"""Tests for the harmonization joins: orders_v, daily_weather_v and the correlation."""

from datetime import date

import pandas as pd

from tasty_metrics.audit import (
    ORDER_WITHOUT_CUSTOMER,
    ORDER_WITHOUT_LINE_ITEMS,
    WEATHER_UNKNOWN_COUNTRY,
    WEATHER_UNKNOWN_POSTAL_CODE,
    ExclusionAudit,
)
from tasty_metrics.harmonized import (
    WEATHER_ROW_ID,
    build_daily_weather_v,
    build_orders_v,
    correlate_sales_weather,
)
from tasty_metrics.sources import InMemorySourceStore, SourceAdapters


class TestOrdersV:
    """orders_v: one row per order line item of an order with a known customer."""

    def test_grain_is_order_line_item(self, adapters: SourceAdapters) -> None:
        orders_v = build_orders_v(adapters)

        assert len(orders_v) == 3
        assert orders_v.groupby("order_id").size().to_dict() == {"1": 2, "2": 1}
        assert set(orders_v["menu_item_name"]) == {
            "Lobster Mac & Cheese",
            "Fried Pickles",
            "Hot Ham & Cheese",
        }

    def test_orders_without_customer_are_dropped(self, adapters: SourceAdapters) -> None:
        audit = ExclusionAudit()
        orders_v = build_orders_v(adapters, audit)

        assert "5" not in set(orders_v["order_id"])
        assert audit.get(ORDER_WITHOUT_CUSTOMER) == 1
        assert audit.get(ORDER_WITHOUT_LINE_ITEMS) == 0

    def test_duplicate_customer_rows_do_not_fan_out(self, adapters: SourceAdapters) -> None:
        orders_v = build_orders_v(adapters)
        assert (orders_v["order_id"] == "1").sum() == 2

    def test_city_lookup_is_left_joined_once_per_city(self, adapters: SourceAdapters) -> None:
        """Hamburg has two postal codes; the lookup must not double the rows."""
        orders_v = build_orders_v(adapters)

        assert set(orders_v["customer_geo_city"]) == {"Hamburg"}
        assert set(orders_v["customer_geo_country"]) == {"DE"}

    def test_customer_in_unknown_city_is_kept(self, frames) -> None:
        frames["customers"].loc[1, "city"] = "Atlantis"
        orders_v = build_orders_v(SourceAdapters(InMemorySourceStore(frames)))

        ben = orders_v[orders_v["order_id"] == "2"]
        assert len(ben) == 1
        assert pd.isna(ben["customer_geo_city"].iloc[0])

    def test_order_without_line_items_is_counted(self, frames) -> None:
        frames["order_line_items"] = frames["order_line_items"][
            frames["order_line_items"]["order_id"] != "2"
        ]
        audit = ExclusionAudit()
        orders_v = build_orders_v(SourceAdapters(InMemorySourceStore(frames)), audit)

        assert set(orders_v["order_id"]) == {"1"}
        assert audit.get(ORDER_WITHOUT_LINE_ITEMS) == 1

    def test_order_date_is_calendar_date(self, adapters: SourceAdapters) -> None:
        orders_v = build_orders_v(adapters)
        assert set(orders_v["order_date"]) == {date(2022, 2, 10)}


class TestDailyWeatherV:
    """daily_weather_v: observations resolved to city and display country."""

    def test_unresolvable_observations_are_excluded(self, adapters: SourceAdapters) -> None:
        audit = ExclusionAudit()
        weather_v = build_daily_weather_v(adapters, audit)

        assert len(weather_v) == 3
        assert "99999" not in set(weather_v["postal_code"])
        assert "Paris" not in set(weather_v["city"])
        assert audit.get(WEATHER_UNKNOWN_POSTAL_CODE) == 1
        assert audit.get(WEATHER_UNKNOWN_COUNTRY) == 1

    def test_adds_city_country_and_month(self, adapters: SourceAdapters) -> None:
        weather_v = build_daily_weather_v(adapters)

        assert set(weather_v["city"]) == {"Hamburg"}
        assert set(weather_v["country_desc"]) == {"Germany"}
        assert set(weather_v["yyyy_mm"]) == {"2022-02"}
        assert not any(col.startswith("_k_") for col in weather_v.columns)

    def test_postal_country_must_match(self, frames) -> None:
        """Postal code 20095 exists only in DE, so an AT observation is unknown."""
        frames["weather_observations"].loc[0, "country"] = "AT"
        audit = ExclusionAudit()
        weather_v = build_daily_weather_v(SourceAdapters(InMemorySourceStore(frames)), audit)

        assert len(weather_v) == 2
        assert audit.get(WEATHER_UNKNOWN_POSTAL_CODE) == 2

    def test_keys_compare_normalized(self, frames) -> None:
        frames["weather_observations"].loc[0, "city_name"] = " HAMBURG "
        frames["countries"].loc[0, "iso_country"] = "de"
        weather_v = build_daily_weather_v(SourceAdapters(InMemorySourceStore(frames)))

        assert len(weather_v) == 3


class TestCorrelation:
    """Weather-driven LEFT JOIN of daily_weather_v to valid orders."""

    def test_every_weather_row_survives(self, adapters: SourceAdapters) -> None:
        weather_v = build_daily_weather_v(adapters)
        correlation = correlate_sales_weather(weather_v, adapters.valid_orders())

        assert correlation[WEATHER_ROW_ID].nunique() == len(weather_v)

    def test_rows_without_sales_have_null_orders(self, adapters: SourceAdapters) -> None:
        weather_v = build_daily_weather_v(adapters)
        correlation = correlate_sales_weather(weather_v, adapters.valid_orders())

        feb_11 = correlation[correlation["date_valid_std"] == date(2022, 2, 11)]
        assert len(feb_11) == 1
        assert feb_11["order_id"].isna().all()

    def test_orders_match_every_weather_row_of_their_city(self, adapters: SourceAdapters) -> None:
        weather_v = build_daily_weather_v(adapters)
        correlation = correlate_sales_weather(weather_v, adapters.valid_orders())

        feb_10 = correlation[correlation["date_valid_std"] == date(2022, 2, 10)]
        # Two postal codes times two orders
        assert len(feb_10) == 4
        assert set(feb_10["order_id"]) == {"1", "2"}
        assert set(feb_10["order_country"]) == {"Germany"}

    def test_cities_without_weather_do_not_appear(self, adapters: SourceAdapters) -> None:
        weather_v = build_daily_weather_v(adapters)
        correlation = correlate_sales_weather(weather_v, adapters.valid_orders())

        assert "5" not in set(correlation["order_id"].dropna())

    def test_city_key_ignores_case_and_padding(self, frames) -> None:
        frames["orders"].loc[0, "primary_city"] = "  hamburg "
        adapters = SourceAdapters(InMemorySourceStore(frames))
        correlation = correlate_sales_weather(
            build_daily_weather_v(adapters), adapters.valid_orders()
        )

        assert "1" in set(correlation["order_id"].dropna())
        # Display values are never rewritten
        assert "  hamburg " in set(correlation["primary_city"].dropna())
