"""
Calendar helpers: period presets and the Bauleiter edit window.

Weeks start on Monday. All arithmetic is on local calendar days; no
timezone database is involved.
"""

import calendar
import logging
from datetime import date, datetime, time, timedelta

from .config import EDIT_WINDOW_DAYS, PERIOD_PRESETS
from .kpis import to_calendar_day
from .models import DateRange

logger = logging.getLogger(__name__)


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def get_date_range_for_preset(preset: str, today: date | None = None) -> DateRange:
    """Resolve a named preset to a concrete inclusive range.

    Parameters
    ----------
    preset : One of config.PERIOD_PRESETS.
    today : Reference day; defaults to the system clock.

    Returns
    -------
    DateRange. 'custom' yields [today, today]; the caller supplies the
    real bounds.
    """
    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    if preset == "today":
        return DateRange(today, today)

    if preset == "this_week":
        # date.weekday() is already Monday=0 .. Sunday=6
        monday = today - timedelta(days=today.weekday())
        return DateRange(monday, monday + timedelta(days=6))

    if preset == "this_month":
        return DateRange(today.replace(day=1), _month_end(today.year, today.month))

    if preset == "this_quarter":
        first_month = (today.month - 1) // 3 * 3 + 1
        return DateRange(
            date(today.year, first_month, 1),
            _month_end(today.year, first_month + 2),
        )

    if preset == "this_year":
        return DateRange(date(today.year, 1, 1), date(today.year, 12, 31))

    if preset not in PERIOD_PRESETS:
        logger.warning("Unknown period preset '%s', using today", preset)
    return DateRange(today, today)


def to_iso_date_string(value: date | datetime | str) -> str:
    """Format a date as YYYY-MM-DD for queries and file names."""
    day = to_calendar_day(value)
    return day.isoformat() if day is not None else ""


def get_edit_deadline(record_date: date | datetime | str) -> datetime:
    """Last moment a non-admin may edit the record: end of record day + 2."""
    day = to_calendar_day(record_date)
    if day is None:
        raise ValueError(f"Invalid record date: {record_date!r}")
    return datetime.combine(day + timedelta(days=EDIT_WINDOW_DAYS), time(23, 59, 59, 999000))


def is_within_edit_window(
    record_date: date | datetime | str,
    is_admin: bool,
    now: datetime | None = None,
) -> bool:
    """Admins can always edit; everyone else until the edit deadline."""
    if is_admin:
        return True
    if to_calendar_day(record_date) is None:
        return False
    if now is None:
        now = datetime.now()
    return now <= get_edit_deadline(record_date)
