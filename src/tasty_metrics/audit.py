"""Data-quality audit for rows excluded during harmonization.

Exclusions (a non-positive order total, a weather row whose postal code or
country cannot be resolved) are not errors: the row is dropped and the drop
is counted here so it can be reported. An audit object is created per
invocation and passed down explicitly; nothing is shared between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Exclusion reasons
INVALID_ORDER_TOTAL = "invalid_order_total"
DUPLICATE_CUSTOMER_ROW = "duplicate_customer_row"
ORDER_WITHOUT_CUSTOMER = "order_without_customer"
ORDER_WITHOUT_LINE_ITEMS = "order_without_line_items"
WEATHER_UNKNOWN_POSTAL_CODE = "weather_unknown_postal_code"
WEATHER_UNKNOWN_COUNTRY = "weather_unknown_country"


@dataclass
class ExclusionAudit:
    """Counts of rows excluded per reason during one pipeline run.

    Attributes:
        counts: Mapping of exclusion reason to number of excluded rows.

    Example:
        >>> audit = ExclusionAudit()
        >>> audit.record(INVALID_ORDER_TOTAL, 3)
        >>> audit.counts
        {'invalid_order_total': 3}
    """

    counts: dict[str, int] = field(default_factory=dict)

    def record(self, reason: str, count: int) -> None:
        """Add ``count`` excluded rows under ``reason``."""
        count = int(count)
        self.counts[reason] = self.counts.get(reason, 0) + count
        if count:
            logger.info("Excluded %d row(s): %s", count, reason)

    def get(self, reason: str) -> int:
        """Return the number of rows excluded for a reason (0 if none)."""
        return self.counts.get(reason, 0)

    @property
    def total(self) -> int:
        """Total number of excluded rows across all reasons."""
        return sum(self.counts.values())

    def summary(self) -> dict:
        """Summary dictionary suitable for logging or reporting."""
        return {"total_excluded": self.total, **dict(sorted(self.counts.items()))}


def record_exclusion(audit: ExclusionAudit | None, reason: str, count: int) -> None:
    """Record an exclusion on ``audit`` if given, otherwise only log it."""
    if audit is not None:
        audit.record(reason, count)
    elif count:
        logger.info("Excluded %d row(s): %s", count, reason)
