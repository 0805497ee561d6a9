"""
Data transforms: filter daily records and reshape them into DataFrames
for report tables, per-crew breakdowns and CSV export.
"""

import logging
from datetime import date
from typing import Any, Iterable, Mapping

import pandas as pd

from .config import REPORT_EXPORT_HEADERS, REPORT_EXPORT_PREFIX
from .kpis import as_daily_record, is_date_in_range, record_has_entries, to_calendar_day
from .models import DailyRecord, DateRange
from .numbers import safe_divide, to_number_or_zero
from .periods import to_iso_date_string

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "id", "date", "kolonne_id", "kolonne_number", "project",
    "employees_count", "employees_plan", "hours_per_employee", "hours_plan",
    "planned_revenue", "actual_revenue", "rev_per_employee", "rev_per_hour",
    "has_entries",
]

CREW_SUMMARY_COLUMNS = [
    "kolonne_id", "kolonne_number", "project", "record_count",
    "planned_revenue", "actual_revenue", "delta",
    "employees", "employees_plan", "hours", "hours_plan",
    "rev_per_employee", "rev_per_hour",
]


def filter_records(
    records: Iterable[DailyRecord | Mapping[str, Any]],
    kolonne_id: str | None = None,
    project: str | None = None,
) -> list[DailyRecord]:
    """Keep records of one crew and/or one project. None means no filter."""
    result = []
    for raw in records:
        record = as_daily_record(raw)
        if kolonne_id and record.kolonne_id != kolonne_id:
            continue
        if project and record.project != project:
            continue
        result.append(record)
    return result


def records_to_frame(records: Iterable[DailyRecord | Mapping[str, Any]]) -> pd.DataFrame:
    """One row per daily record; 'date' becomes a datetime64 column.

    Missing numeric fields are 0, nullable ratios stay NaN.
    """
    rows = []
    for raw in records:
        r = as_daily_record(raw)
        day = to_calendar_day(r.date)
        rows.append({
            "id": r.id,
            "date": pd.Timestamp(day) if day is not None else pd.NaT,
            "kolonne_id": r.kolonne_id,
            "kolonne_number": r.kolonne_number,
            "project": r.project,
            "employees_count": to_number_or_zero(r.employees_count),
            "employees_plan": to_number_or_zero(r.employees_plan),
            "hours_per_employee": to_number_or_zero(r.hours_per_employee),
            "hours_plan": to_number_or_zero(r.hours_plan),
            "planned_revenue": to_number_or_zero(r.planned_revenue),
            "actual_revenue": to_number_or_zero(r.actual_revenue),
            "rev_per_employee": r.rev_per_employee,
            "rev_per_hour": r.rev_per_hour,
            "has_entries": r.has_entries,
        })

    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["rev_per_employee"] = pd.to_numeric(df["rev_per_employee"], errors="coerce")
    df["rev_per_hour"] = pd.to_numeric(df["rev_per_hour"], errors="coerce")
    return df


def summarise_by_crew(
    records: Iterable[DailyRecord | Mapping[str, Any]],
    date_range: DateRange,
) -> pd.DataFrame:
    """Per-crew totals over a period.

    Uses the same predicates as kpis.aggregate_period: in range and
    has entries. Hours are employees * hours per employee.

    Returns
    -------
    DataFrame with columns:
        kolonne_id, kolonne_number, project, record_count,
        planned_revenue, actual_revenue, delta, employees, employees_plan,
        hours, hours_plan, rev_per_employee, rev_per_hour
    sorted by kolonne_id.
    """
    qualifying = [
        r for r in map(as_daily_record, records)
        if is_date_in_range(r.date, date_range) and record_has_entries(r)
    ]
    if not qualifying:
        logger.warning("No qualifying records between %s and %s",
                       date_range.from_date, date_range.to_date)
        return pd.DataFrame(columns=CREW_SUMMARY_COLUMNS)

    df = records_to_frame(qualifying)
    df["hours"] = df["employees_count"] * df["hours_per_employee"]
    df["hours_plan_total"] = df["employees_plan"] * df["hours_plan"]

    grouped = df.groupby("kolonne_id", sort=True).agg(
        kolonne_number=("kolonne_number", "first"),
        project=("project", "first"),
        record_count=("id", "size"),
        planned_revenue=("planned_revenue", "sum"),
        actual_revenue=("actual_revenue", "sum"),
        employees=("employees_count", "sum"),
        employees_plan=("employees_plan", "sum"),
        hours=("hours", "sum"),
        hours_plan=("hours_plan_total", "sum"),
    ).reset_index()

    grouped["delta"] = grouped["actual_revenue"] - grouped["planned_revenue"]
    grouped["rev_per_employee"] = [
        safe_divide(a, e) for a, e in zip(grouped["actual_revenue"], grouped["employees"])
    ]
    grouped["rev_per_hour"] = [
        safe_divide(a, h) for a, h in zip(grouped["actual_revenue"], grouped["hours"])
    ]

    logger.info("Summarised %d records into %d crew rows", len(qualifying), len(grouped))
    return grouped[CREW_SUMMARY_COLUMNS]


def build_report_export(records: Iterable[DailyRecord | Mapping[str, Any]]) -> str:
    """Semicolon CSV of daily reports, one line per record.

    Null ratios are written as empty cells.
    """
    rows = []
    for raw in records:
        r = as_daily_record(raw)
        rows.append([
            to_iso_date_string(r.date),
            r.kolonne_number or "",
            r.project or "",
            r.employees_count,
            r.hours_per_employee,
            r.planned_revenue,
            r.actual_revenue,
            r.rev_per_employee if r.rev_per_employee is not None else "",
            r.rev_per_hour if r.rev_per_hour is not None else "",
        ])

    df = pd.DataFrame(rows, columns=REPORT_EXPORT_HEADERS)
    logger.info("Exported %d report rows", len(df))
    return df.to_csv(sep=";", index=False, lineterminator="\n")


def export_file_name(today: date | None = None) -> str:
    """leistungsmeldung_export_YYYY-MM-DD.csv"""
    return f"{REPORT_EXPORT_PREFIX}{to_iso_date_string(today or date.today())}.csv"
