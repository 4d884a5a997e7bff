"""Column masking policies.

A policy is bound to one column and decides, per access, whether the
current role sees the stored value or the redaction marker. There is no
stored state: the decision is a pure function of (column, role, config).
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

import pandas as pd

from tasty_metrics.masking.roles import RoleConfig

logger = logging.getLogger(__name__)

REDACTED_MARKER = "**~MASKED~**"

# Customer attributes protected in exposed datasets
PII_COLUMNS = ("first_name", "last_name", "email", "phone_number")


class MaskState(enum.Enum):
    """Outcome of evaluating a policy for one access."""

    VISIBLE = "visible"
    MASKED = "masked"


@dataclass(frozen=True)
class MaskingPolicy:
    """Masking policy attached to a single column.

    Attributes:
        column: Column identifier the policy protects.
        marker: Value returned in place of the stored value when masked.

    Example:
        >>> policy = MaskingPolicy("email")
        >>> config = RoleConfig.from_mapping({"tasty_admin": ["email"]})
        >>> policy.apply("jo@example.com", "tasty_admin", config)
        'jo@example.com'
        >>> policy.apply("jo@example.com", "tasty_bi", config)
        '**~MASKED~**'
    """

    column: str
    marker: Any = REDACTED_MARKER

    def state(self, role: str, config: RoleConfig) -> MaskState:
        """VISIBLE if ``role`` is permitted this column, MASKED otherwise."""
        if config.permits(role, self.column):
            return MaskState.VISIBLE
        return MaskState.MASKED

    def apply(self, value: Any, role: str, config: RoleConfig) -> Any:
        """Return ``value`` for a permitted role, the marker otherwise.

        The marker is returned regardless of the value, including None.
        """
        if self.state(role, config) is MaskState.VISIBLE:
            return value
        return self.marker

    def apply_series(self, series: pd.Series, role: str, config: RoleConfig) -> pd.Series:
        """Column-wise apply: the series itself, or a series of markers."""
        if self.state(role, config) is MaskState.VISIBLE:
            return series
        return pd.Series([self.marker] * len(series), index=series.index, dtype="object")


PolicySet = Union[Mapping[str, MaskingPolicy], Iterable[MaskingPolicy]]


def apply_policy(policy: MaskingPolicy, value: Any, role: str, config: RoleConfig) -> Any:
    """Evaluate ``policy`` for one value and role."""
    return policy.apply(value, role, config)


def policies_for(columns: Iterable[str], marker: Any = REDACTED_MARKER) -> dict[str, MaskingPolicy]:
    """Build a policy per column, keyed by column identifier."""
    return {column: MaskingPolicy(column=column, marker=marker) for column in columns}


def as_policy_map(policies: PolicySet) -> dict[str, MaskingPolicy]:
    """Normalize a policy collection to a mapping keyed by column."""
    if isinstance(policies, Mapping):
        return dict(policies)
    return {policy.column: policy for policy in policies}


def mask_frame(
    df: pd.DataFrame,
    policies: PolicySet,
    role: str,
    config: RoleConfig,
) -> pd.DataFrame:
    """Return a copy of ``df`` with every protected column evaluated for ``role``.

    Each column's policy is evaluated on its own; one column being masked
    or visible has no bearing on another. Columns with a policy but absent
    from ``df`` are skipped. ``df`` itself is never modified.
    """
    out = df.copy()
    masked_columns = []
    for column, policy in as_policy_map(policies).items():
        if column not in out.columns:
            continue
        if policy.state(role, config) is MaskState.MASKED:
            masked_columns.append(column)
            out[column] = pd.Series([policy.marker] * len(out), index=out.index, dtype="object")

    if masked_columns:
        logger.debug("Masked column(s) %s for role %r", masked_columns, role)
    return out
