"""
Plain data shapes passed between the core and its callers.

All types are immutable value objects; the aggregation and import
functions build new instances rather than mutating inputs.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping


@dataclass(frozen=True)
class DailyRecord:
    """One crew's daily report (Tagesmeldung).

    Numeric fields may be None when the store has no value; the
    aggregation engine reads them as zero.
    """

    id: str
    date: str | date
    kolonne_id: str
    employees_count: float | None = 0
    employees_plan: float | None = 0
    hours_per_employee: float | None = 0
    hours_plan: float | None = 0
    planned_revenue: float | None = 0
    actual_revenue: float | None = 0
    rev_per_employee: float | None = None
    rev_per_hour: float | None = None
    has_entries: bool | None = None
    lv_snapshot_id: str | None = None
    kolonne_number: str | None = None
    project: str | None = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "DailyRecord":
        """Build a record from a store row.

        Accepts the joined ``kolonnen: {number, project}`` object as well
        as flat ``kolonne_number``/``project`` keys.
        """
        crew = row.get("kolonnen") or {}
        return cls(
            id=str(row.get("id", "")),
            date=row.get("date", ""),
            kolonne_id=str(row.get("kolonne_id", "")),
            employees_count=row.get("employees_count"),
            employees_plan=row.get("employees_plan"),
            hours_per_employee=row.get("hours_per_employee"),
            hours_plan=row.get("hours_plan"),
            planned_revenue=row.get("planned_revenue"),
            actual_revenue=row.get("actual_revenue"),
            rev_per_employee=row.get("rev_per_employee"),
            rev_per_hour=row.get("rev_per_hour"),
            has_entries=row.get("has_entries"),
            lv_snapshot_id=row.get("lv_snapshot_id"),
            kolonne_number=row.get("kolonne_number", crew.get("number")),
            project=row.get("project", crew.get("project")),
        )


@dataclass(frozen=True)
class PeriodTotals:
    total_planned: float = 0.0
    total_actual: float = 0.0
    total_employees: float = 0.0
    total_employees_plan: float = 0.0
    total_hours: float = 0.0
    total_hours_plan: float = 0.0
    record_count: int = 0


@dataclass(frozen=True)
class PeriodAggregation:
    totals: PeriodTotals
    contributing_crew_ids: frozenset[str] = frozenset()

    @property
    def contributing_crews_count(self) -> int:
        return len(self.contributing_crew_ids)


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range. Inverted ranges are allowed and match nothing."""

    from_date: date
    to_date: date


@dataclass(frozen=True)
class LVRow:
    """A bill-of-quantities line after import."""

    positions_id: str
    kurztext: str
    einheit: str
    ep: float
    kategorie: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the row keyed by canonical LV header."""
        return {
            "Positions-ID": self.positions_id,
            "Kurztext": self.kurztext,
            "Einheit": self.einheit,
            "EP": self.ep,
            "Kategorie": self.kategorie,
        }


@dataclass(frozen=True)
class ValidationIssue:
    row: int
    column: str
    message: str
    severity: str = "error"


@dataclass
class ImportResult:
    rows: list[LVRow] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0


@dataclass
class ParsedFile:
    """Header row, raw cell rows and proposed mapping of an uploaded file."""

    file_name: str
    file_size: int
    file_type: str
    sheets: list[str]
    selected_sheet: str
    headers: list[str]
    raw_data: list[list[Any]]
    mapping: dict[str, int | None]
    is_canonical: bool
