"""Command-line interface for retail_core.

Examples:
    $ retail-core summarize sales.json --metric revenue
    $ retail-core summarize sales.json --metric all --topology topology.json
    $ retail-core summarize sales.json --metric quantity --store 8
    $ RETAIL_API_URL=https://reports.example.com retail-core fetch --start 2025-01-01 --end 2025-01-18
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from retail_core.config import ApiSettings, StoreTopology
from retail_core.exceptions import DataQualityError, RetailAPIError
from retail_core.formatting import indian_standard_format
from retail_core.sales.aggregate import METRICS, aggregate, aggregate_frame

logger = logging.getLogger(__name__)


def _load_topology(path: str | None) -> StoreTopology:
    return StoreTopology.from_json(path) if path else StoreTopology.default()


def _load_records(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DataQualityError(f"Cannot read sales records from {path}: {e}") from e
    if not isinstance(data, list):
        raise DataQualityError(f"{path} must contain a JSON array of sales records")
    return data


def cmd_summarize(args: argparse.Namespace) -> None:
    """Print per-store totals for a JSON file of sales records."""
    topology = _load_topology(args.topology)
    records = _load_records(Path(args.input))
    logger.info("Loaded %d sales records from %s", len(records), args.input)

    if args.store is not None:
        metrics = list(METRICS) if args.metric == "all" else [args.metric]
        for name in metrics:
            total = aggregate(records, name, args.store, topology)
            print(f"{name}: {indian_standard_format(total)}")
        return

    frame = aggregate_frame(records, topology)
    if args.metric != "all":
        frame = frame[[args.metric]]

    if frame.empty:
        print("No sales records.")
        return

    with pd.option_context("display.float_format", "{:,.2f}".format):
        print(frame.sort_index().to_string())


def cmd_fetch(args: argparse.Namespace) -> None:
    """Fetch the dashboard slices from the API and print the KPI block."""
    from retail_core.api import QueryState, ReportClient, load_snapshot
    from retail_core.dashboard import compute_dashboard_metrics

    topology = _load_topology(args.topology)
    client = ReportClient(ApiSettings.from_env(), topology=topology)
    snapshot = load_snapshot(client, args.start, args.end, QueryState())

    metrics = compute_dashboard_metrics(snapshot, args.stores or (), topology)
    for key, value in asdict(metrics).items():
        print(f"{key:>18}: {indian_standard_format(value)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retail-core",
        description="Store sales aggregation for the retail analytics dashboard.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--topology",
        default=None,
        help="Store topology JSON (name aliases and merge rules). Default: built-in tables.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    summarize = sub.add_parser("summarize", help="Per-store totals from a JSON file of sales records.")
    summarize.add_argument("input", help="JSON array of sales records")
    summarize.add_argument(
        "--metric",
        default="revenue",
        choices=[*METRICS, "all"],
        help="Metric to report (default: revenue)",
    )
    summarize.add_argument("--store", type=int, default=None, help="Only report this store code")
    summarize.set_defaults(func=cmd_summarize)

    fetch = sub.add_parser("fetch", help="Fetch dashboard KPIs from the reporting API.")
    fetch.add_argument("--start", required=True, help="MTD start date (YYYY-MM-DD)")
    fetch.add_argument("--end", required=True, help="MTD end date (YYYY-MM-DD)")
    fetch.add_argument(
        "--stores",
        type=int,
        nargs="*",
        default=None,
        help="Store codes to include (default: all)",
    )
    fetch.set_defaults(func=cmd_fetch)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``retail-core`` command.

    Exits with code 1 on configuration, data or fetch errors.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except RetailAPIError as e:
        logger.error("%s", e)
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
