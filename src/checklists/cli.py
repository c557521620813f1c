"""
Command-line interface for the checklist analytics engine.

Subcommands summarize exported list dumps, score a single item tree, fetch
a live per-store daypart grid, build one store's daily food safety report,
or list a month of safety audits.
"""

import argparse
import calendar
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from src.config.secrets import MissingAPIKeyError, get_proxy_url
from src.config.settings import ConfigError, load_config
from src.ingest.jolt_client import FetchError, GraphQLError, JoltClient
from src.logging_config import configure_logging

from .integrity import compute_integrity
from .metrics import compute_duration
from .models import ListInstance, parse_item_results, parse_list_instances
from .report import build_daypart_report
from .summary import build_store_row, sort_lists, summarize_audits, summarize_list

logger = logging.getLogger(__name__)


def _load_json(path: str) -> Any:
    with open(path, "r") as f:
        return json.load(f)


def _emit(payload: Any, output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        with open(output, "w") as f:
            f.write(text)
        print(f"Written to {output}")
    else:
        print(text)


def _parse_date(value: Optional[str]) -> date:
    return date.fromisoformat(value) if value else date.today()


def day_bounds(day: date) -> tuple:
    """Local-time [00:00:00, 23:59:59] of ``day`` as Unix seconds."""
    start = datetime(day.year, day.month, day.day, 0, 0, 0)
    end = datetime(day.year, day.month, day.day, 23, 59, 59)
    return int(start.timestamp()), int(end.timestamp())


def cmd_summarize(args: argparse.Namespace) -> int:
    """Summarize every list in a JSON dump."""
    try:
        instances = parse_list_instances(_load_json(args.file))
        today = _parse_date(args.today)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    now = args.now if args.now is not None else time.time()
    summaries = [summarize_list(li, now, today).to_dict() for li in sort_lists(instances)]
    logger.info(f"Summarized {len(summaries)} list(s) from {args.file}")

    _emit(summaries, args.output)
    return 0


def cmd_integrity(args: argparse.Namespace) -> int:
    """Score one item tree (a bare itemResults array or a single list instance)."""
    try:
        raw = _load_json(args.file)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(raw, dict):
        name = args.name or (raw.get("listTemplate") or {}).get("title") or raw.get("instanceTitle") or ""
        items = parse_item_results(raw.get("itemResults"))
    else:
        name = args.name or ""
        items = parse_item_results(raw)

    duration = compute_duration(items)
    result = compute_integrity(items, name, duration.seconds)

    _emit({"name": name, "duration": duration.to_dict(), **result.to_dict()}, args.output)
    return 0


def _fetch_rows(
    client: JoltClient,
    locations: List[Dict[str, Any]],
    day: date,
    now: float,
    chunk_size: int,
    chunk_delay: float,
) -> List[Dict[str, Any]]:
    """Fetch lists per location in parallel chunks; rows keep input order."""
    start_ts, end_ts = day_bounds(day)
    rows: List[Dict[str, Any]] = []

    def _row(loc: Dict[str, Any]) -> Dict[str, Any]:
        lists = client.fetch_lists_for_location(loc["id"], start_ts, end_ts)
        return build_store_row(loc, lists, now, day).to_dict()

    with ThreadPoolExecutor(max_workers=chunk_size) as pool:
        for i in range(0, len(locations), chunk_size):
            chunk = locations[i:i + chunk_size]
            logger.info(f"Processing stores {i + 1} - {i + len(chunk)} of {len(locations)}")
            rows.extend(pool.map(_row, chunk))
            if chunk_delay and i + chunk_size < len(locations):
                time.sleep(chunk_delay)

    return rows


def cmd_grid(args: argparse.Namespace) -> int:
    """Fetch the per-store daypart grid for one day."""
    try:
        config = load_config(args.config)
        client = JoltClient.from_config(config, get_proxy_url(config.get("endpoint", "")))
        day = _parse_date(args.date)

        if args.location:
            locations = [{"id": loc_id, "name": loc_id} for loc_id in args.location]
        else:
            locations = sorted(client.fetch_locations(), key=lambda loc: loc.get("name") or "")

        grid = config["grid"]
        rows = _fetch_rows(
            client,
            locations,
            day,
            time.time(),
            grid["chunk_size"],
            grid["chunk_delay_seconds"],
        )
    except (ConfigError, MissingAPIKeyError, FetchError, GraphQLError, ValueError) as e:
        logger.error(f"Grid failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _emit(rows, args.output)
    return 0


def month_bounds(year: int, month: int) -> tuple:
    """Local-time first day 00:00:00 to last day 23:59:59 of a month as Unix seconds."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, 0, 0, 0)
    end = datetime(year, month, last_day, 23, 59, 59)
    return int(start.timestamp()), int(end.timestamp())


def _parse_month(value: Optional[str]) -> tuple:
    if not value:
        today = date.today()
        return today.year, today.month
    parsed = datetime.strptime(value, "%Y-%m")
    return parsed.year, parsed.month


def _load_location_lists(args: argparse.Namespace, start_ts: int, end_ts: int) -> List[ListInstance]:
    """Lists from a JSON dump (--file) or fetched for --location."""
    if args.file:
        return parse_list_instances(_load_json(args.file))
    config = load_config(args.config)
    client = JoltClient.from_config(config, get_proxy_url(config.get("endpoint", "")))
    return client.fetch_lists_for_location(args.location, start_ts, end_ts)


def cmd_report(args: argparse.Namespace) -> int:
    """Build the daily food safety report for one store."""
    try:
        day = _parse_date(args.date)
        instances = _load_location_lists(args, *day_bounds(day))
    except (OSError, ConfigError, MissingAPIKeyError, ValueError) as e:
        logger.error(f"Report failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = build_daypart_report(instances, day, args.name or args.location or "")
    logger.info(f"Report for {report.location or args.file}: {sum(len(s.rows) for s in report.sections)} row(s)")

    _emit(report.to_dict(), args.output)
    return 0


def cmd_audits(args: argparse.Namespace) -> int:
    """List one store's safety audits for a month with their scores."""
    try:
        year, month = _parse_month(args.month)
        instances = _load_location_lists(args, *month_bounds(year, month))
    except (OSError, ConfigError, MissingAPIKeyError, ValueError) as e:
        logger.error(f"Audits failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    audits = [a.to_dict() for a in summarize_audits(instances)]
    logger.info(f"Found {len(audits)} audit(s) for {year}-{month:02d}")

    _emit(audits, args.output)
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="checklist-analytics",
        description="Food-safety checklist analytics"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # summarize command
    summarize_parser = subparsers.add_parser("summarize", help="Summarize lists from a JSON dump")
    summarize_parser.add_argument("file", help="GraphQL response or list of list instances (JSON)")
    summarize_parser.add_argument("--now", type=float, help="Current Unix time (default: system clock)")
    summarize_parser.add_argument("--today", help="Reference date YYYY-MM-DD (default: local today)")
    summarize_parser.add_argument("--output", "-o", help="Output file (JSON)")
    summarize_parser.set_defaults(func=cmd_summarize)

    # integrity command
    integrity_parser = subparsers.add_parser("integrity", help="Score one checklist item tree")
    integrity_parser.add_argument("file", help="itemResults array or list instance (JSON)")
    integrity_parser.add_argument("--name", help="List name (default: title from file)")
    integrity_parser.add_argument("--output", "-o", help="Output file (JSON)")
    integrity_parser.set_defaults(func=cmd_integrity)

    # grid command
    grid_parser = subparsers.add_parser("grid", help="Fetch per-store daypart grid")
    grid_parser.add_argument("--date", help="Day YYYY-MM-DD (default: local today)")
    grid_parser.add_argument("--location", action="append", help="Location ID (repeatable; default: all)")
    grid_parser.add_argument("--config", help="Config path (default: config/jolt.yaml)")
    grid_parser.add_argument("--output", "-o", help="Output file (JSON)")
    grid_parser.set_defaults(func=cmd_grid)

    # report command
    report_parser = subparsers.add_parser("report", help="Daily food safety report for one store")
    report_source = report_parser.add_mutually_exclusive_group(required=True)
    report_source.add_argument("--location", help="Location ID to fetch")
    report_source.add_argument("--file", help="JSON dump of the store's lists instead of fetching")
    report_parser.add_argument("--date", help="Day YYYY-MM-DD (default: local today)")
    report_parser.add_argument("--name", help="Store name for the header (default: location ID)")
    report_parser.add_argument("--config", help="Config path (default: config/jolt.yaml)")
    report_parser.add_argument("--output", "-o", help="Output file (JSON)")
    report_parser.set_defaults(func=cmd_report)

    # audits command
    audits_parser = subparsers.add_parser("audits", help="Monthly safety audits for one store")
    audits_source = audits_parser.add_mutually_exclusive_group(required=True)
    audits_source.add_argument("--location", help="Location ID to fetch")
    audits_source.add_argument("--file", help="JSON dump of the store's lists instead of fetching")
    audits_parser.add_argument("--month", help="Month YYYY-MM (default: current month)")
    audits_parser.add_argument("--config", help="Config path (default: config/jolt.yaml)")
    audits_parser.add_argument("--output", "-o", help="Output file (JSON)")
    audits_parser.set_defaults(func=cmd_audits)

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
