"""
Dashboard-ready output functions.

These are the entry points for a reporting front end. Each function
returns plain dicts or DataFrames suitable for rendering cards, tables
and dropdowns; none of them reads or writes storage.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Iterable, Mapping

import pandas as pd

from .config import PERIOD_PRESETS
from .kpis import aggregate_period, calculate_kpis
from .models import DailyRecord, DateRange
from .periods import get_date_range_for_preset, to_iso_date_string
from .transforms import filter_records, summarise_by_crew

logger = logging.getLogger(__name__)


def resolve_range(
    preset: str,
    custom_range: DateRange | None = None,
    today: date | None = None,
) -> DateRange:
    """Preset range, or the caller's bounds when the preset is 'custom'."""
    if preset == "custom" and custom_range is not None:
        return custom_range
    return get_date_range_for_preset(preset, today=today)


def get_period_overview(
    records: Iterable[DailyRecord | Mapping[str, Any]],
    preset: str = "this_month",
    custom_range: DateRange | None = None,
    kolonne_id: str | None = None,
    project: str | None = None,
    today: date | None = None,
) -> dict:
    """Single entry point a front end would call to populate KPI cards.

    Returns
    -------
    Dict with structure:
    {
        "preset": "this_month",
        "label": "Dieser Monat",
        "from": "2025-01-01",
        "to": "2025-01-31",
        "contributing_crews": 3,
        "totals": {"total_planned": ..., ..., "record_count": ...},
        "kpis": {"delta": ..., "delta_positive": ..., ...},
    }
    """
    date_range = resolve_range(preset, custom_range, today)
    selected = filter_records(records, kolonne_id=kolonne_id, project=project)
    aggregation = aggregate_period(selected, date_range)

    logger.info(
        "Overview %s (%s .. %s): %d records, %d crews",
        preset, date_range.from_date, date_range.to_date,
        aggregation.totals.record_count, aggregation.contributing_crews_count,
    )

    return {
        "preset": preset,
        "label": PERIOD_PRESETS.get(preset, preset),
        "from": to_iso_date_string(date_range.from_date),
        "to": to_iso_date_string(date_range.to_date),
        "contributing_crews": aggregation.contributing_crews_count,
        "totals": asdict(aggregation.totals),
        "kpis": calculate_kpis(aggregation.totals),
    }


def get_crew_breakdown(
    records: Iterable[DailyRecord | Mapping[str, Any]],
    preset: str = "this_month",
    custom_range: DateRange | None = None,
    today: date | None = None,
) -> pd.DataFrame:
    """Per-crew table for the selected period."""
    return summarise_by_crew(records, resolve_range(preset, custom_range, today))


def get_available_presets() -> list[dict[str, str]]:
    """Return [{value, label}, ...] in display order for UI dropdowns."""
    return [{"value": value, "label": label} for value, label in PERIOD_PRESETS.items()]
