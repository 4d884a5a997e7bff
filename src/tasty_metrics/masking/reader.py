"""Read boundary: wrap a raw dataset accessor with column masking.

The role is asked for on every read, so a reader never caches a decision.
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import pandas as pd

from tasty_metrics.config import ROLE_ENV_VAR
from tasty_metrics.masking.policy import PolicySet, as_policy_map, mask_frame
from tasty_metrics.masking.roles import RoleConfig


class RoleProvider(Protocol):
    """Identity collaborator supplying the caller's current role."""

    def current_role(self) -> str:
        """Return the role of the caller making the current read."""
        ...


@dataclass(frozen=True)
class StaticRoleProvider:
    """Role provider that always returns the same role."""

    role: str

    def current_role(self) -> str:
        return self.role


class EnvRoleProvider:
    """Role provider reading the role from an environment variable.

    The variable is read on every call. An unset variable yields the
    default, or an empty role name, which no configuration permits.
    """

    def __init__(self, var: str = ROLE_ENV_VAR, default: Optional[str] = None) -> None:
        self.var = var
        self.default = default

    def current_role(self) -> str:
        return os.environ.get(self.var, self.default or "")


class MaskedReader:
    """Accessor wrapper applying masking policies to every frame it returns.

    Example:
        >>> reader = MaskedReader(
        ...     lambda: customers_df,
        ...     policies_for(PII_COLUMNS),
        ...     config,
        ...     StaticRoleProvider("tasty_bi"),
        ... )
        >>> reader.read()["email"].unique()
        array(['**~MASKED~**'], dtype=object)
    """

    def __init__(
        self,
        accessor: Callable[..., pd.DataFrame],
        policies: PolicySet,
        config: RoleConfig,
        role_provider: RoleProvider,
    ) -> None:
        self.accessor = accessor
        self.policies = as_policy_map(policies)
        self.config = config
        self.role_provider = role_provider
        functools.update_wrapper(self, accessor)

    def read(self, *args: Any, **kwargs: Any) -> pd.DataFrame:
        """Call the accessor and mask its result for the current role."""
        role = self.role_provider.current_role()
        frame = self.accessor(*args, **kwargs)
        return mask_frame(frame, self.policies, role, self.config)

    __call__ = read


def masked(
    policies: PolicySet,
    config: RoleConfig,
    role_provider: RoleProvider,
) -> Callable[[Callable[..., pd.DataFrame]], MaskedReader]:
    """Decorator form of MaskedReader.

    Example:
        >>> @masked(policies_for(["email"]), config, EnvRoleProvider())
        ... def customers() -> pd.DataFrame:
        ...     return adapters.unique_customers()
    """

    def decorator(accessor: Callable[..., pd.DataFrame]) -> MaskedReader:
        return MaskedReader(accessor, policies, config, role_provider)

    return decorator
