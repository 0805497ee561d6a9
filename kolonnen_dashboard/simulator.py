"""
Simulated data generator for the Kolonnen dashboard.

Generates plausible daily crew reports for demos and tests. All values
are synthetic.
"""

from datetime import date, timedelta

import numpy as np

from .models import DailyRecord
from .numbers import safe_divide

# ---------------------------------------------------------------------------
# Typical crew parameters (realistic ranges)
# ---------------------------------------------------------------------------
_CREW_PARAMS = {
    "employees_plan": 6,
    "hours_plan": 8.0,
    "revenue_per_hour": 62.0,
    "revenue_std": 0.12,
}

_PROJECTS = ["Bahnhofstraße", "B 27 Ortsumfahrung", "Glasfaser Los 3"]


def generate_daily_records(
    crew_ids: list[str],
    start: date,
    days: int = 14,
    seed: int = 42,
) -> list[DailyRecord]:
    """Generate one report per crew and day.

    Weekends are mostly empty (zeros, has_entries False). About one in
    five weekday reports leaves has_entries unset so the value heuristic
    decides.
    """
    rng = np.random.default_rng(seed)
    records = []

    for crew_index, crew_id in enumerate(crew_ids):
        project = _PROJECTS[crew_index % len(_PROJECTS)]
        for offset in range(days):
            day = start + timedelta(days=offset)
            is_weekend = day.weekday() >= 5
            record_id = f"{crew_id}-{day.isoformat()}"

            if is_weekend and rng.uniform() < 0.8:
                records.append(DailyRecord(
                    id=record_id,
                    date=day.isoformat(),
                    kolonne_id=crew_id,
                    employees_count=0,
                    employees_plan=0,
                    hours_per_employee=0,
                    hours_plan=0,
                    planned_revenue=0,
                    actual_revenue=0,
                    has_entries=False,
                    kolonne_number=str(crew_index + 1),
                    project=project,
                ))
                continue

            employees_plan = _CREW_PARAMS["employees_plan"]
            hours_plan = _CREW_PARAMS["hours_plan"]
            employees = int(max(0, employees_plan + rng.integers(-2, 2)))
            hours = round(float(hours_plan + rng.normal(0, 0.75)), 2)
            planned = round(employees_plan * hours_plan * _CREW_PARAMS["revenue_per_hour"], 2)
            actual = round(
                employees * hours * _CREW_PARAMS["revenue_per_hour"]
                * float(1 + rng.normal(0, _CREW_PARAMS["revenue_std"])),
                2,
            )
            actual = max(actual, 0.0)

            records.append(DailyRecord(
                id=record_id,
                date=day.isoformat(),
                kolonne_id=crew_id,
                employees_count=employees,
                employees_plan=employees_plan,
                hours_per_employee=hours,
                hours_plan=hours_plan,
                planned_revenue=planned,
                actual_revenue=actual,
                rev_per_employee=round(safe_divide(actual, employees), 2) if employees else None,
                rev_per_hour=round(safe_divide(actual, employees * hours), 2) if employees and hours else None,
                has_entries=None if rng.uniform() < 0.2 else True,
                kolonne_number=str(crew_index + 1),
                project=project,
            ))

    return records
