"""Tests for the source store and typed adapters."""

from pathlib import Path

import pandas as pd
import pytest

from tasty_metrics import DataPaths
from tasty_metrics.audit import DUPLICATE_CUSTOMER_ROW, INVALID_ORDER_TOTAL, ExclusionAudit
from tasty_metrics.exceptions import DataQualityError
from tasty_metrics.sources import CsvSourceStore, InMemorySourceStore, SourceAdapters


class TestValidOrders:
    """Order validity predicate: order_total > 0."""

    def test_keeps_only_positive_totals(self, adapters: SourceAdapters) -> None:
        orders = adapters.valid_orders()

        assert sorted(orders["order_id"]) == ["1", "2", "5"]
        assert (orders["order_total"] > 0).all()

    def test_counts_exclusions(self, adapters: SourceAdapters) -> None:
        audit = ExclusionAudit()
        adapters.valid_orders(audit)
        assert audit.get(INVALID_ORDER_TOTAL) == 2

    def test_null_and_unparseable_totals_are_invalid(self, frames) -> None:
        frames["orders"].loc[0, "order_total"] = None
        frames["orders"].loc[1, "order_total"] = "n/a"
        adapters = SourceAdapters(InMemorySourceStore(frames))

        assert sorted(adapters.valid_orders()["order_id"]) == ["5"]

    def test_types_are_coerced(self, adapters: SourceAdapters) -> None:
        orders = adapters.orders()
        assert pd.api.types.is_datetime64_any_dtype(orders["order_ts"])
        assert orders.loc[orders["order_id"] == "1", "order_total"].iloc[0] == 10.5
        assert pd.isna(orders.loc[orders["order_id"] == "5", "customer_id"].iloc[0])


class TestUniqueCustomers:
    """Customers are deduplicated on full-row identity, not on customer_id."""

    def test_identical_rows_collapse(self, adapters: SourceAdapters) -> None:
        audit = ExclusionAudit()
        customers = adapters.unique_customers(audit)

        assert len(customers) == 2
        assert audit.get(DUPLICATE_CUSTOMER_ROW) == 1

    def test_rows_differing_in_one_field_are_kept(self, frames) -> None:
        frames["customers"].loc[2, "email"] = "anna.schmidt@example.com"
        adapters = SourceAdapters(InMemorySourceStore(frames))

        customers = adapters.unique_customers()

        assert len(customers) == 3
        assert (customers["customer_id"] == "100").sum() == 2


def test_missing_column_raises_data_quality_error(frames) -> None:
    frames["weather_observations"] = frames["weather_observations"].drop(
        columns=["tot_precipitation_in"]
    )
    adapters = SourceAdapters(InMemorySourceStore(frames))

    with pytest.raises(DataQualityError, match="tot_precipitation_in"):
        adapters.weather_observations()


def test_missing_dataset_raises_data_quality_error() -> None:
    adapters = SourceAdapters(InMemorySourceStore({}))
    with pytest.raises(DataQualityError):
        adapters.valid_orders()


def test_in_memory_store_returns_copies(frames) -> None:
    store = InMemorySourceStore(frames)
    df = store.read("orders")
    df.loc[0, "order_total"] = "999"

    assert store.read("orders").loc[0, "order_total"] == "10.50"


def test_adapters_do_not_mutate_store(frames) -> None:
    original = frames["orders"].copy()
    SourceAdapters(InMemorySourceStore(frames)).valid_orders()
    pd.testing.assert_frame_equal(frames["orders"], original)


def test_csv_store_reads_every_file_as_text(tmp_path: Path, frames, write_csvs) -> None:
    frames["postal_codes"].loc[len(frames["postal_codes"])] = ["02115", "US", "Boston"]
    write_csvs(frames, tmp_path)
    extra = tmp_path / "a_raw" / "countries" / "part-001.csv"
    pd.DataFrame({"iso_country": ["US"], "city": ["Boston"], "country": ["United States"]}).to_csv(
        extra, index=False
    )
    paths = DataPaths.from_root(tmp_path, tmp_path / "roles.json")
    adapters = SourceAdapters(CsvSourceStore(paths))

    assert "02115" in set(adapters.geo_references()["postal_code"])
    assert len(adapters.country_references()) == 3


def test_csv_store_without_files_raises(tmp_path: Path) -> None:
    paths = DataPaths.from_root(tmp_path, tmp_path / "roles.json")
    with pytest.raises(DataQualityError, match="No CSV files"):
        CsvSourceStore(paths).read("orders")
