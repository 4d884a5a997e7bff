"""Storage collaborator: set-based read access to raw source datasets.

The engine never owns storage. It reads whole datasets by name through the
``SourceStore`` protocol and treats the result as an immutable snapshot for
the duration of one derivation.
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol

import pandas as pd

from tasty_metrics.exceptions import DataQualityError

if TYPE_CHECKING:
    from tasty_metrics.config import DataPaths

logger = logging.getLogger(__name__)

# Raw datasets delivered by ingestion
ORDERS = "orders"
ORDER_LINE_ITEMS = "order_line_items"
CUSTOMERS = "customers"
WEATHER_OBSERVATIONS = "weather_observations"
POSTAL_CODES = "postal_codes"
COUNTRIES = "countries"

SOURCE_DATASETS = (
    ORDERS,
    ORDER_LINE_ITEMS,
    CUSTOMERS,
    WEATHER_OBSERVATIONS,
    POSTAL_CODES,
    COUNTRIES,
)


class SourceStore(Protocol):
    """Read access to raw datasets, implemented by the storage layer."""

    def read(self, name: str) -> pd.DataFrame:
        """Return the full contents of dataset ``name``."""
        ...


class InMemorySourceStore:
    """SourceStore over a mapping of dataset name to DataFrame.

    Every read returns a copy, so callers cannot mutate the stored frames.

    Example:
        >>> store = InMemorySourceStore({"orders": pd.DataFrame({"order_id": ["1"]})})
        >>> len(store.read("orders"))
        1
    """

    def __init__(self, frames: Mapping[str, pd.DataFrame]) -> None:
        self._frames = dict(frames)

    def read(self, name: str) -> pd.DataFrame:
        if name not in self._frames:
            raise DataQualityError(f"Source dataset '{name}' is not available in the store")
        return self._frames[name].copy()


class CsvSourceStore:
    """SourceStore reading every CSV file under ``DataPaths.raw_dir(name)``.

    All columns are read as text; typing happens in the source adapters so
    that identifiers like postal codes keep their leading zeros.
    """

    def __init__(self, paths: DataPaths) -> None:
        self.paths = paths

    def read(self, name: str) -> pd.DataFrame:
        directory = self.paths.raw_dir(name)
        csv_files = sorted(glob.glob(str(directory / "*.csv")))

        if not csv_files:
            raise DataQualityError(f"No CSV files found for source '{name}' in {directory}")

        logger.debug("Reading %d CSV file(s) for %s", len(csv_files), name)
        dfs = [pd.read_csv(f, encoding="utf-8-sig", dtype=str) for f in csv_files]
        return pd.concat(dfs, ignore_index=True)
