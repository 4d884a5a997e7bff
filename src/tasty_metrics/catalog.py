"""Catalog of named derived datasets.

A derived dataset is a name bound to a pure build function over the source
adapters. Nothing is materialized: ``build`` re-derives the rows from the
current state of the sources on every call. What the catalog does persist is
each dataset's definition (name, comment, dependencies, version) as JSON, so
later callers can resolve the name without the rows ever being stored.

Definitions are stored as ``<catalog_dir>/<name>.json``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import pandas as pd

from tasty_metrics.analytics.aggregate import build_daily_city_metrics
from tasty_metrics.exceptions import DatasetNotFoundError
from tasty_metrics.harmonized.orders import build_orders_v
from tasty_metrics.harmonized.weather import build_daily_weather_v
from tasty_metrics.sources.store import (
    COUNTRIES,
    CUSTOMERS,
    ORDER_LINE_ITEMS,
    ORDERS,
    POSTAL_CODES,
    WEATHER_OBSERVATIONS,
)

if TYPE_CHECKING:
    from tasty_metrics.audit import ExclusionAudit
    from tasty_metrics.sources.adapters import SourceAdapters

logger = logging.getLogger(__name__)

ORDERS_V = "harmonized.orders_v"
DAILY_WEATHER_V = "harmonized.daily_weather_v"
DAILY_CITY_METRICS_V = "analytics.daily_city_metrics_v"

BuildFn = Callable[["SourceAdapters", Optional["ExclusionAudit"]], pd.DataFrame]


@dataclass
class DatasetDefinition:
    """Persisted definition of a derived dataset.

    Attributes:
        name: Qualified dataset name (e.g., "analytics.daily_city_metrics_v").
        comment: Human-readable description.
        depends_on: Source datasets and derived datasets read by the build.
        version: Definition version identifier (e.g., "v1").
    """

    name: str
    comment: str
    depends_on: list[str]
    version: str

    def to_dict(self) -> dict:
        """Convert definition to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> DatasetDefinition:
        """Create definition from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class DerivedDataset:
    """A named derived dataset and the function that re-derives it."""

    name: str
    comment: str
    build: BuildFn
    depends_on: tuple[str, ...] = ()
    version: str = "v1"

    def definition(self) -> DatasetDefinition:
        return DatasetDefinition(
            name=self.name,
            comment=self.comment,
            depends_on=list(self.depends_on),
            version=self.version,
        )


@dataclass
class DatasetCatalog:
    """Registry of derived datasets, resolvable by name.

    Example:
        >>> catalog = default_catalog()
        >>> metrics = catalog.build("analytics.daily_city_metrics_v", adapters)
        >>> catalog.persist(paths.catalog_dir)
    """

    datasets: dict[str, DerivedDataset] = field(default_factory=dict)

    def register(self, dataset: DerivedDataset) -> None:
        """Add ``dataset``, replacing any previous definition of the same name."""
        if dataset.name in self.datasets:
            logger.debug("Replacing definition of %s", dataset.name)
        self.datasets[dataset.name] = dataset

    def names(self) -> list[str]:
        """Registered dataset names, sorted."""
        return sorted(self.datasets)

    def resolve(self, name: str) -> DerivedDataset:
        """Return the dataset registered as ``name``.

        Raises:
            DatasetNotFoundError: If no dataset of that name is registered.
        """
        try:
            return self.datasets[name]
        except KeyError:
            raise DatasetNotFoundError(
                f"Unknown derived dataset '{name}'. Available: {self.names()}"
            ) from None

    def build(
        self,
        name: str,
        adapters: SourceAdapters,
        audit: ExclusionAudit | None = None,
    ) -> pd.DataFrame:
        """Re-derive dataset ``name`` from the current state of the sources."""
        dataset = self.resolve(name)
        logger.info("Deriving %s (%s)", dataset.name, dataset.version)
        return dataset.build(adapters, audit)

    def persist(self, directory: Path) -> list[Path]:
        """Write every definition as JSON under ``directory``.

        Only definitions are written, never rows.

        Args:
            directory: Target directory (e.g., DataPaths.catalog_dir).

        Returns:
            Paths of the written definition files, in name order.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        written = []
        for name in self.names():
            path = definition_path(directory, name)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.datasets[name].definition().to_dict(), f, indent=2, ensure_ascii=False)
            written.append(path)

        logger.info("Persisted %d dataset definition(s) to %s", len(written), directory)
        return written


def definition_path(directory: Path, name: str) -> Path:
    """Path of the JSON definition file for dataset ``name``."""
    return Path(directory) / f"{name}.json"


def read_definition(directory: Path, name: str) -> DatasetDefinition:
    """Read a persisted definition.

    Raises:
        DatasetNotFoundError: If the definition file does not exist or
            cannot be parsed.
    """
    path = definition_path(directory, name)
    if not path.exists():
        raise DatasetNotFoundError(f"No persisted definition for '{name}' in {directory}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return DatasetDefinition.from_dict(data)
    except (json.JSONDecodeError, TypeError) as e:
        raise DatasetNotFoundError(f"Corrupted definition for '{name}' at {path}: {e}") from e


def default_catalog() -> DatasetCatalog:
    """Catalog holding the three derived datasets of the engine."""
    catalog = DatasetCatalog()
    catalog.register(
        DerivedDataset(
            name=ORDERS_V,
            comment="Orders enriched with loyalty customers, city lookup and menu items",
            build=build_orders_v,
            depends_on=(ORDERS, CUSTOMERS, POSTAL_CODES, ORDER_LINE_ITEMS),
        )
    )
    catalog.register(
        DerivedDataset(
            name=DAILY_WEATHER_V,
            comment="Daily weather observations resolved to city and country",
            build=build_daily_weather_v,
            depends_on=(WEATHER_OBSERVATIONS, POSTAL_CODES, COUNTRIES),
        )
    )
    catalog.register(
        DerivedDataset(
            name=DAILY_CITY_METRICS_V,
            comment="Daily Weather Source Metrics and Orders Data for our Cities",
            build=build_daily_city_metrics,
            depends_on=(DAILY_WEATHER_V, ORDERS),
        )
    )
    return catalog
