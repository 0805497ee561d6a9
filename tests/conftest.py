"""
Shared fixtures for the Kolonnen dashboard tests.
"""
import pytest

from kolonnen_dashboard.config import ALL_HEADERS
from kolonnen_dashboard.models import DailyRecord


# =============================================================================
# FIXTURES: Sample Data
# =============================================================================

def make_record(**overrides) -> DailyRecord:
    """Daily record with plausible defaults; override any field."""
    values = {
        "id": "test-id",
        "date": "2025-01-15",
        "kolonne_id": "crew-1",
        "employees_count": 5,
        "employees_plan": 0,
        "hours_per_employee": 8,
        "hours_plan": 0,
        "planned_revenue": 1000,
        "actual_revenue": 1200,
        "rev_per_employee": 240,
        "rev_per_hour": 30,
    }
    values.update(overrides)
    return DailyRecord(**values)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def canonical_mapping() -> dict:
    """Mapping for rows laid out in ALL_HEADERS order."""
    return {header: index for index, header in enumerate(ALL_HEADERS)}


@pytest.fixture
def german_csv_bytes() -> bytes:
    """Legacy export: alias headers, semicolons, German numbers, cp1252."""
    content = (
        "Pos-Nr.;Beschreibung;ME;Einheitspreis;Gruppe\r\n"
        "01.001;Baustelleneinrichtung;psch;1.250,00;Allgemein\r\n"
        "01.002;Oberboden abtragen;m³;12,50;Erdarbeiten\r\n"
        "\r\n"
        "01.003;Bordstein setzen;lfm;34,9;Straßenbau\r\n"
    )
    return content.encode("cp1252")
