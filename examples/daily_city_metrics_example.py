"""Example: reading daily_city_metrics_v and orders_v as different roles.

Expects CSV exports under data/a_raw/<dataset>/ and the role
configuration in config/roles.json.
"""

from pathlib import Path

from tasty_metrics import DataPaths
from tasty_metrics.api import get_daily_city_metrics, get_dataset, open_adapters
from tasty_metrics.audit import ExclusionAudit
from tasty_metrics.masking import StaticRoleProvider, load_role_config

# Setup
paths = DataPaths.from_root(Path("data"), Path("config/roles.json"))
adapters = open_adapters(paths)
config = load_role_config(paths.roles_json)

# Example 1: Hamburg dashboard read
print("Example 1: Hamburg, 2022-02-01 to 2022-02-24")
print("-" * 60)
audit = ExclusionAudit()
hamburg = get_daily_city_metrics(
    adapters,
    config,
    StaticRoleProvider("tasty_bi"),
    start_date="2022-02-01",
    end_date="2022-02-24",
    city="Hamburg",
    country="Germany",
    audit=audit,
)
print(hamburg.to_string(index=False))
print(f"Excluded rows: {audit.summary()}\n")

# Example 2: Same orders, different roles
for role in ("tasty_admin", "tasty_data_engineer", "tasty_bi"):
    print(f"Example 2: orders_v as {role}")
    print("-" * 60)
    orders_v = get_dataset(adapters, "harmonized.orders_v", config, StaticRoleProvider(role))
    print(orders_v[["order_id", "first_name", "last_name", "email"]].head().to_string(index=False))
    print()
