"""Unified configuration for tasty_metrics.

This module provides a single, simple configuration class for the
filesystem locations used by the CSV-backed source store and the derived
dataset catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Environment variable consulted by EnvRoleProvider
ROLE_ENV_VAR = "TASTY_METRICS_ROLE"


@dataclass(frozen=True)
class DataPaths:
    """All filesystem paths used by the engine.

    Attributes:
        data_root: Root directory for raw sources and catalog definitions.
        roles_json: Path to the role/permitted-columns configuration file.

    Directory Structure:
        data_root/
        ├── a_raw/                   # Raw sources, one folder per dataset
        │   ├── orders/
        │   ├── order_line_items/
        │   ├── customers/
        │   ├── weather_observations/
        │   ├── postal_codes/
        │   └── countries/
        └── c_processed/
            └── _catalog/            # Derived dataset definitions (no rows)
    """

    data_root: Path
    roles_json: Path

    @classmethod
    def from_root(
        cls,
        data_root: str | Path,
        roles_json: str | Path,
    ) -> DataPaths:
        """Create DataPaths from root directory and role configuration file.

        Args:
            data_root: Root directory for data.
            roles_json: Path to roles.json configuration.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data", "config/roles.json")
            >>> paths.data_root
            PosixPath('data')
        """
        return cls(data_root=Path(data_root), roles_json=Path(roles_json))

    @property
    def raw_root(self) -> Path:
        """Raw layer: source datasets delivered by ingestion."""
        return self.data_root / "a_raw"

    def raw_dir(self, name: str) -> Path:
        """Directory holding the CSV files of one raw source dataset."""
        return self.raw_root / name

    @property
    def catalog_dir(self) -> Path:
        """Derived dataset definitions persisted by the catalog."""
        return self.data_root / "c_processed" / "_catalog"

    def ensure_dirs(self) -> None:
        """Create the raw root and catalog directories."""
        for path in [self.raw_root, self.catalog_dir]:
            path.mkdir(parents=True, exist_ok=True)
