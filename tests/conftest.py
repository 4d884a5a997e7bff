"""Shared fixtures: a small in-memory copy of the raw sources.

Scenario (all values as text, like the CSV exports):
- Hamburg, 2022-02-10: two weather rows (postal codes 20095 and 20097),
  orders 1 (10.50) and 2 (5.00) -> daily sales 15.50, 41.0 °F = 5.0 °C
- Hamburg, 2022-02-11: one weather row, no orders -> daily sales 0
- Orders 3 and 4 have non-positive totals and are invalid
- Order 5 (Berlin) has no customer and no Berlin weather
- Weather for postal code 99999 is unknown; Paris has no country reference
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from tasty_metrics.masking.roles import RoleConfig
from tasty_metrics.sources import InMemorySourceStore, SourceAdapters


def make_frames() -> dict[str, pd.DataFrame]:
    """Fresh copies of the six raw source datasets."""
    orders = pd.DataFrame(
        {
            "order_id": ["1", "2", "3", "4", "5"],
            "truck_id": ["10", "10", "11", "11", "12"],
            "customer_id": ["100", "101", "100", None, None],
            "order_ts": [
                "2022-02-10 11:00:00",
                "2022-02-10 13:30:00",
                "2022-02-10 12:00:00",
                "2022-02-10 14:00:00",
                "2022-02-11 09:00:00",
            ],
            "order_total": ["10.50", "5.00", "0", "-3.00", "7.25"],
            "primary_city": ["Hamburg", "Hamburg", "Hamburg", "Hamburg", "Berlin"],
            "country": ["Germany", "Germany", "Germany", "Germany", "Germany"],
        }
    )
    order_line_items = pd.DataFrame(
        {
            "order_id": ["1", "1", "2", "5"],
            "menu_item_name": [
                "Lobster Mac & Cheese",
                "Fried Pickles",
                "Hot Ham & Cheese",
                "Iced Tea",
            ],
            "quantity": ["1", "1", "1", "1"],
            "price": ["6.50", "4.00", "5.00", "7.25"],
        }
    )
    customers = pd.DataFrame(
        {
            "customer_id": ["100", "101", "100"],
            "first_name": ["Anna", "Ben", "Anna"],
            "last_name": ["Schmidt", "Weber", "Schmidt"],
            "city": ["Hamburg", "Hamburg", "Hamburg"],
            "country": ["Germany", "Germany", "Germany"],
            "email": ["anna@example.com", "ben@example.com", "anna@example.com"],
            "phone_number": ["040-111", "040-222", "040-111"],
        }
    )
    weather_observations = pd.DataFrame(
        {
            "postal_code": ["20095", "20097", "20095", "99999", "75001"],
            "country": ["DE", "DE", "DE", "DE", "FR"],
            "city_name": ["Hamburg", "Hamburg", "Hamburg", "Hamburg", "Paris"],
            "date_valid_std": [
                "2022-02-10",
                "2022-02-10",
                "2022-02-11",
                "2022-02-10",
                "2022-02-10",
            ],
            "avg_temperature_air_2m_f": ["41.0", "41.0", "32.0", "100.0", "50.0"],
            "tot_precipitation_in": ["0.10", "0.20", "0.00", "5.00", "0.00"],
            "max_wind_speed_100m_mph": ["20.0", "25.5", "10.0", "99.0", "8.0"],
        }
    )
    postal_codes = pd.DataFrame(
        {
            "postal_code": ["20095", "20097", "75001", "10115"],
            "country": ["DE", "DE", "FR", "DE"],
            "city_name": ["Hamburg", "Hamburg", "Paris", "Berlin"],
        }
    )
    countries = pd.DataFrame(
        {
            "iso_country": ["DE", "DE"],
            "city": ["Hamburg", "Berlin"],
            "country": ["Germany", "Germany"],
        }
    )
    return {
        "orders": orders,
        "order_line_items": order_line_items,
        "customers": customers,
        "weather_observations": weather_observations,
        "postal_codes": postal_codes,
        "countries": countries,
    }


def write_raw_csvs(frames: dict[str, pd.DataFrame], data_root: Path) -> None:
    """Write each frame to <data_root>/a_raw/<name>/part-000.csv."""
    for name, df in frames.items():
        directory = data_root / "a_raw" / name
        directory.mkdir(parents=True, exist_ok=True)
        df.to_csv(directory / "part-000.csv", index=False)


ROLES = {
    "roles": {
        "tasty_admin": {"permitted_columns": ["first_name", "last_name", "email", "phone_number"]},
        "tasty_data_engineer": {"permitted_columns": ["first_name", "last_name"]},
        "tasty_bi": {"permitted_columns": []},
    }
}


@pytest.fixture
def frames() -> dict[str, pd.DataFrame]:
    return make_frames()


@pytest.fixture
def adapters(frames: dict[str, pd.DataFrame]) -> SourceAdapters:
    return SourceAdapters(InMemorySourceStore(frames))


@pytest.fixture
def write_csvs():
    """The write_raw_csvs helper, for tests that tweak frames before writing."""
    return write_raw_csvs


@pytest.fixture
def role_config() -> RoleConfig:
    return RoleConfig.from_mapping(
        {name: rec["permitted_columns"] for name, rec in ROLES["roles"].items()}
    )


@pytest.fixture
def roles_json(tmp_path: Path) -> Path:
    path = tmp_path / "roles.json"
    path.write_text(json.dumps(ROLES), encoding="utf-8")
    return path
