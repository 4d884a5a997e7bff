"""Source adapter layer.

Raw datasets are read through a ``SourceStore`` (the storage collaborator)
and exposed as typed views by ``SourceAdapters``:

- **valid_orders**: orders with ``order_total > 0``
- **unique_customers**: customers deduplicated on full-row identity
- **weather_observations**: marketplace daily weather per postal code
- **geo_references**: postal code -> city lookup
- **country_references**: ISO country + city -> display country
- **order_line_items**: menu items per order

Example:
    >>> from tasty_metrics import DataPaths
    >>> from tasty_metrics.sources import CsvSourceStore, SourceAdapters
    >>>
    >>> paths = DataPaths.from_root("data", "config/roles.json")
    >>> adapters = SourceAdapters(CsvSourceStore(paths))
    >>> orders = adapters.valid_orders()
"""

from tasty_metrics.sources.adapters import SourceAdapters
from tasty_metrics.sources.store import (
    SOURCE_DATASETS,
    CsvSourceStore,
    InMemorySourceStore,
    SourceStore,
)

__all__ = [
    "SOURCE_DATASETS",
    "CsvSourceStore",
    "InMemorySourceStore",
    "SourceAdapters",
    "SourceStore",
]
