"""
KPI computation functions — pure functions with no side effects.

Provides the has-entries predicate, date-range filtering, period
aggregation over daily records, and derived plan-vs-actual KPIs.
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping

import pandas as pd

from .models import DailyRecord, DateRange, PeriodAggregation, PeriodTotals
from .numbers import safe_divide, to_number_or_zero

logger = logging.getLogger(__name__)


def as_daily_record(record: DailyRecord | Mapping[str, Any]) -> DailyRecord:
    """Accept either a DailyRecord or a raw store row."""
    if isinstance(record, DailyRecord):
        return record
    return DailyRecord.from_mapping(record)


def to_calendar_day(value: str | date | datetime | pd.Timestamp | None) -> date | None:
    """Normalise an ISO string, date or timestamp to its calendar day.

    Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError):
        logger.warning("Could not parse record date: %s", value)
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def init_totals() -> PeriodTotals:
    """Return empty totals."""
    return PeriodTotals()


def add_daily_to_totals(totals: PeriodTotals, record: DailyRecord) -> PeriodTotals:
    """Fold one record into the running totals.

    Hours are always derived as employees * hours per employee, for
    both the actual and the planned side.
    """
    employees = to_number_or_zero(record.employees_count)
    employees_plan = to_number_or_zero(record.employees_plan)
    hours_per_employee = to_number_or_zero(record.hours_per_employee)
    hours_plan = to_number_or_zero(record.hours_plan)

    return PeriodTotals(
        total_planned=totals.total_planned + to_number_or_zero(record.planned_revenue),
        total_actual=totals.total_actual + to_number_or_zero(record.actual_revenue),
        total_employees=totals.total_employees + employees,
        total_employees_plan=totals.total_employees_plan + employees_plan,
        total_hours=totals.total_hours + employees * hours_per_employee,
        total_hours_plan=totals.total_hours_plan + employees_plan * hours_plan,
        record_count=totals.record_count + 1,
    )


def record_has_entries(record: DailyRecord) -> bool:
    """Return True when a record carries real data rather than default zeros.

    An explicit boolean `has_entries` is authoritative, even when it
    contradicts the values. Without it, any positive planned revenue,
    actual revenue or headcount counts as an entry.
    """
    if isinstance(record.has_entries, bool):
        return record.has_entries

    return (
        to_number_or_zero(record.planned_revenue) > 0
        or to_number_or_zero(record.actual_revenue) > 0
        or to_number_or_zero(record.employees_count) > 0
    )


def is_date_in_range(value: str | date | datetime, date_range: DateRange) -> bool:
    """Inclusive calendar-day comparison; time of day is ignored."""
    day = to_calendar_day(value)
    if day is None:
        return False
    start = to_calendar_day(date_range.from_date)
    end = to_calendar_day(date_range.to_date)
    if start is None or end is None:
        return False
    return start <= day <= end


def aggregate_period(
    records: Iterable[DailyRecord | Mapping[str, Any]],
    date_range: DateRange,
) -> PeriodAggregation:
    """Aggregate records for a period, counting only crews that provided values.

    Parameters
    ----------
    records : DailyRecord instances or raw store rows, in any order.
    date_range : Inclusive calendar range.

    Returns
    -------
    PeriodAggregation with summed totals and the set of contributing crews.
    Records outside the range or without entries contribute nothing.
    """
    crew_ids: set[str] = set()
    totals = init_totals()
    seen = 0

    for raw in records:
        seen += 1
        record = as_daily_record(raw)
        if not is_date_in_range(record.date, date_range):
            continue
        if not record_has_entries(record):
            continue

        crew_ids.add(record.kolonne_id)
        totals = add_daily_to_totals(totals, record)

    logger.debug(
        "Aggregated %d of %d records from %d crews (%s .. %s)",
        totals.record_count, seen, len(crew_ids),
        date_range.from_date, date_range.to_date,
    )
    return PeriodAggregation(totals=totals, contributing_crew_ids=frozenset(crew_ids))


def calculate_kpis(totals: PeriodTotals) -> dict:
    """Derive dashboard KPIs from period totals.

    Returns
    -------
    Dict with structure:
    {
        "delta": actual - planned revenue,
        "delta_positive": delta >= 0,
        "avg_rev_per_employee": ...,
        "avg_rev_per_hour": ...,
        "employees_delta": ...,
        "employees_fulfillment": percent of planned headcount,
        "hours_delta": ...,
        "hours_fulfillment": percent of planned hours,
    }
    Ratios with a zero denominator are 0.
    """
    delta = totals.total_actual - totals.total_planned

    return {
        "delta": delta,
        "delta_positive": delta >= 0,
        "avg_rev_per_employee": safe_divide(totals.total_actual, totals.total_employees),
        "avg_rev_per_hour": safe_divide(totals.total_actual, totals.total_hours),
        "employees_delta": totals.total_employees - totals.total_employees_plan,
        "employees_fulfillment": safe_divide(
            totals.total_employees, totals.total_employees_plan
        ) * 100,
        "hours_delta": totals.total_hours - totals.total_hours_plan,
        "hours_fulfillment": safe_divide(totals.total_hours, totals.total_hours_plan) * 100,
    }
