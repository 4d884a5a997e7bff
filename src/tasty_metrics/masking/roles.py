"""Role configuration for column masking.

Roles and the columns each may see unmasked are process-wide configuration:
loaded once at startup (usually from roles.json), never mutated, and passed
explicitly to the masking layer.

roles.json format::

    {
      "roles": {
        "tasty_admin": {"permitted_columns": ["first_name", "last_name", "email", "phone_number"]},
        "tasty_data_engineer": {"permitted_columns": ["first_name", "last_name"]},
        "tasty_bi": {"permitted_columns": []}
      }
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from tasty_metrics.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Role:
    """A role and the protected columns it may read unmasked.

    Attributes:
        name: Role identifier as returned by the role provider.
        permitted_columns: Column names visible to this role.
    """

    name: str
    permitted_columns: frozenset[str] = frozenset()

    def permits(self, column: str) -> bool:
        """Return True if ``column`` is visible to this role."""
        return column in self.permitted_columns


@dataclass(frozen=True)
class RoleConfig:
    """Immutable mapping of role name to Role.

    Unknown roles are permitted nothing: every protected column is masked
    for them. This is logged, never raised.

    Example:
        >>> config = RoleConfig.from_mapping({"tasty_admin": ["email"]})
        >>> config.permits("tasty_admin", "email")
        True
        >>> config.permits("intruder", "email")
        False
    """

    roles: Mapping[str, Role] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", MappingProxyType(dict(self.roles)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[str]]) -> RoleConfig:
        """Build a RoleConfig from ``{role_name: [column, ...]}``."""
        roles = {
            name: Role(name=name, permitted_columns=frozenset(columns))
            for name, columns in data.items()
        }
        return cls(roles=roles)

    def role(self, name: str) -> Role | None:
        """Return the Role called ``name``, or None if it is not configured."""
        return self.roles.get(name)

    def permitted_columns(self, role_name: str) -> frozenset[str]:
        """Columns visible to ``role_name``; empty for unknown roles."""
        role = self.role(role_name)
        if role is None:
            logger.warning("Unknown role %r: masking every protected column", role_name)
            return frozenset()
        return role.permitted_columns

    def permits(self, role_name: str, column: str) -> bool:
        """Return True if ``role_name`` may see ``column`` unmasked."""
        return column in self.permitted_columns(role_name)


def load_role_config(path: Path) -> RoleConfig:
    """Load role configuration from a roles.json file.

    Args:
        path: Path to the JSON file.

    Returns:
        RoleConfig instance.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or has an
            unexpected shape.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Role configuration not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Role configuration is not valid JSON: {path}: {e}") from e

    roles = data.get("roles") if isinstance(data, dict) else None
    if not isinstance(roles, dict):
        raise ConfigError(f"Role configuration {path} must contain a 'roles' object")

    mapping: dict[str, list[str]] = {}
    for name, rec in roles.items():
        columns = rec.get("permitted_columns") if isinstance(rec, dict) else None
        if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
            raise ConfigError(
                f"Role '{name}' in {path} must define 'permitted_columns' as a list of strings"
            )
        mapping[name] = columns

    logger.debug("Loaded %d role(s) from %s", len(mapping), path)
    return RoleConfig.from_mapping(mapping)
