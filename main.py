"""
Kolonnen Dashboard — end-to-end pipeline smoke run.

Aggregates simulated crew reports for a period preset and, optionally,
imports an LV file and prints its validation report.

Usage:
    python main.py
    python main.py --preset this_week --lv path/to/lv.xlsx --auto-ids
    python main.py --template out/
"""

import argparse
import logging
import sys
from datetime import date, timedelta

from kolonnen_dashboard.config import PERIOD_PRESETS
from kolonnen_dashboard.dashboard import get_crew_breakdown, get_period_overview
from kolonnen_dashboard.loaders import (
    ImportFileError,
    parse_file,
    validate_and_transform,
    write_template,
)
from kolonnen_dashboard.numbers import format_currency, format_number
from kolonnen_dashboard.simulator import generate_daily_records

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Kolonnen dashboard smoke run")
    parser.add_argument("--preset", default="this_month", choices=list(PERIOD_PRESETS))
    parser.add_argument("--lv", help="LV file (.csv, .xlsx, .xls) to validate")
    parser.add_argument("--auto-ids", action="store_true",
                        help="generate AUTO-xxxx ids for rows without Positions-ID")
    parser.add_argument("--template", metavar="DIR",
                        help="write CSV and Excel LV templates into DIR and exit")
    return parser.parse_args(argv)


def run_overview(preset: str) -> None:
    """Aggregate simulated records for the preset and print KPI cards."""
    today = date.today()
    records = generate_daily_records(
        ["K-01", "K-02", "K-03", "K-04"],
        start=today - timedelta(days=today.weekday() + 28),
        days=42,
    )

    overview = get_period_overview(records, preset=preset, today=today)
    totals = overview["totals"]
    kpis = overview["kpis"]

    print(f"\n[ 1 ] PERIOD OVERVIEW — {overview['label']} ({overview['from']} .. {overview['to']})")
    print("-" * 40)
    print(f"  Contributing crews : {overview['contributing_crews']}")
    print(f"  Reports            : {totals['record_count']}")
    print(f"  Umsatz PLAN        : {format_currency(totals['total_planned'])}")
    print(f"  Umsatz IST         : {format_currency(totals['total_actual'])}")
    print(f"  Delta              : {format_currency(kpis['delta'])}"
          f" ({'+' if kpis['delta_positive'] else '-'})")
    print(f"  Umsatz/MA          : {format_currency(kpis['avg_rev_per_employee'])}")
    print(f"  Umsatz/Std         : {format_currency(kpis['avg_rev_per_hour'])}")
    print(f"  MA-Erfüllung       : {format_number(kpis['employees_fulfillment'], 1)} %")
    print(f"  Std-Erfüllung      : {format_number(kpis['hours_fulfillment'], 1)} %")

    breakdown = get_crew_breakdown(records, preset=preset, today=today)
    print("\nPer crew:")
    if breakdown.empty:
        print("  (no qualifying reports)")
    else:
        print(breakdown[["kolonne_id", "record_count", "planned_revenue", "actual_revenue",
                         "rev_per_hour"]].to_string(index=False))


def run_import(path: str, auto_ids: bool) -> int:
    """Parse and validate an LV file; return a process exit code."""
    print(f"\n[ 2 ] LV IMPORT — {path}")
    print("-" * 40)
    try:
        parsed = parse_file(path)
    except (ImportFileError, OSError) as e:
        logger.error("Could not read LV file: %s", e)
        return 1

    print(f"  Type: {parsed.file_type}, sheet: {parsed.selected_sheet}, "
          f"canonical headers: {parsed.is_canonical}")
    for header, index in parsed.mapping.items():
        source = parsed.headers[index] if index is not None else "—"
        print(f"  {header:14s} <- {source}")

    result = validate_and_transform(parsed.raw_data, parsed.mapping, generate_auto_ids=auto_ids)
    print(f"\n  {result.valid_rows} of {result.total_rows} rows accepted")
    for issue in result.errors + result.warnings:
        print(f"  [{issue.severity.upper():7s}] Zeile {issue.row}, {issue.column}: {issue.message}")

    return 0 if not result.errors else 2


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.template:
        for fmt in ("csv", "xlsx"):
            print(f"Wrote {write_template(args.template, fmt)}")
        return 0

    print("=" * 70)
    print("  KOLONNEN DASHBOARD — Pipeline Smoke Run")
    print("=" * 70)

    run_overview(args.preset)

    exit_code = 0
    if args.lv:
        exit_code = run_import(args.lv, args.auto_ids)

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
