"""Command-line interface for tasty_metrics.

Usage:
    tasty-metrics daily --data-root data --roles config/roles.json \\
        --start 2022-02-01 --end 2022-02-24 --city Hamburg --country Germany
    tasty-metrics daily --role tasty_bi --out hamburg.csv
    tasty-metrics catalog --data-root data

``daily`` derives daily_city_metrics_v from the CSV sources under
``<data-root>/a_raw``, masks it for the caller's role (``--role`` or the
TASTY_METRICS_ROLE environment variable) and prints or writes it.
``catalog`` persists the derived dataset definitions under
``<data-root>/c_processed/_catalog``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from tasty_metrics.api import get_daily_city_metrics, open_adapters
from tasty_metrics.audit import ExclusionAudit
from tasty_metrics.catalog import default_catalog
from tasty_metrics.config import ROLE_ENV_VAR, DataPaths
from tasty_metrics.exceptions import TastyMetricsError
from tasty_metrics.masking.reader import EnvRoleProvider, StaticRoleProvider
from tasty_metrics.masking.roles import load_role_config

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tasty-metrics",
        description="Derive sales/weather metrics per city and day, masked per role.",
    )
    p.add_argument(
        "--data-root",
        default="data",
        help="Root directory holding a_raw/ sources (default: 'data').",
    )
    p.add_argument(
        "--roles",
        default="config/roles.json",
        help="Role configuration JSON (default: config/roles.json).",
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Less logging output.",
    )
    p.add_argument(
        "--verbose",
        "--debug",
        action="store_true",
        dest="verbose",
        help="Verbose/debug logging output.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    daily = sub.add_parser("daily", help="Print or write daily_city_metrics_v.")
    daily.add_argument(
        "--role",
        default=None,
        help=f"Role to read as. Defaults to ${ROLE_ENV_VAR}.",
    )
    daily.add_argument("--start", default=None, help="Start date YYYY-MM-DD (inclusive).")
    daily.add_argument("--end", default=None, help="End date YYYY-MM-DD (inclusive).")
    daily.add_argument("--city", default=None, help="City to keep (e.g. 'Hamburg').")
    daily.add_argument("--country", default=None, help="Country to keep (e.g. 'Germany').")
    daily.add_argument(
        "-o",
        "--out",
        default=None,
        help="Output CSV path. Prints to stdout when omitted.",
    )

    sub.add_parser("catalog", help="Persist derived dataset definitions.")
    return p


def _run_daily(args: argparse.Namespace, paths: DataPaths) -> None:
    config = load_role_config(paths.roles_json)
    provider = StaticRoleProvider(args.role) if args.role else EnvRoleProvider()
    audit = ExclusionAudit()

    result = get_daily_city_metrics(
        open_adapters(paths),
        config,
        provider,
        start_date=args.start,
        end_date=args.end,
        city=args.city,
        country=args.country,
        audit=audit,
    )
    logger.info("Exclusions: %s", audit.summary())

    if args.out:
        result.to_csv(args.out, index=False, encoding="utf-8")
        print(f"Wrote {len(result)} row(s) to: {args.out}")
    else:
        print(result.to_string(index=False))


def _run_catalog(paths: DataPaths) -> None:
    paths.ensure_dirs()
    written = default_catalog().persist(paths.catalog_dir)
    for path in written:
        print(path)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    paths = DataPaths.from_root(args.data_root, args.roles)
    try:
        if args.command == "daily":
            _run_daily(args, paths)
        else:
            _run_catalog(paths)
        return 0
    except (TastyMetricsError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
