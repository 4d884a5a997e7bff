"""Masking policy engine.

Role-aware column masking applied at read time. Stored data is never
modified: readers return masked copies.

Example:
    >>> from tasty_metrics.masking import (
    ...     MaskedReader, StaticRoleProvider, load_role_config, policies_for, PII_COLUMNS
    ... )
    >>>
    >>> config = load_role_config(paths.roles_json)
    >>> reader = MaskedReader(
    ...     adapters.unique_customers, policies_for(PII_COLUMNS), config,
    ...     StaticRoleProvider("tasty_bi"),
    ... )
    >>> customers = reader.read()
"""

from tasty_metrics.masking.policy import (
    PII_COLUMNS,
    REDACTED_MARKER,
    MaskingPolicy,
    MaskState,
    apply_policy,
    mask_frame,
    policies_for,
)
from tasty_metrics.masking.reader import (
    EnvRoleProvider,
    MaskedReader,
    RoleProvider,
    StaticRoleProvider,
    masked,
)
from tasty_metrics.masking.roles import Role, RoleConfig, load_role_config

__all__ = [
    "PII_COLUMNS",
    "REDACTED_MARKER",
    "EnvRoleProvider",
    "MaskState",
    "MaskedReader",
    "MaskingPolicy",
    "Role",
    "RoleConfig",
    "RoleProvider",
    "StaticRoleProvider",
    "apply_policy",
    "load_role_config",
    "mask_frame",
    "masked",
    "policies_for",
]
