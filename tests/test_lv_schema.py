"""Tests for header normalisation and automatic column mapping."""

from kolonnen_dashboard.config import ALL_HEADERS
from kolonnen_dashboard.loaders.lv_schema import (
    auto_map_headers,
    is_canonical_schema,
    normalize_header,
    validate_mapping,
)


class TestNormalizeHeader:
    def test_lowercase_and_trim(self):
        assert normalize_header("  EP  ") == "ep"

    def test_collapses_line_breaks_and_spaces(self):
        assert normalize_header("Umsatz (Leistung)\r\nje   Einheit") == "umsatz (leistung) je einheit"


class TestAutoMapHeaders:
    def test_canonical_headers_map_to_own_index(self):
        mapping = auto_map_headers(list(ALL_HEADERS))
        assert mapping == {header: i for i, header in enumerate(ALL_HEADERS)}

    def test_aliases(self):
        mapping = auto_map_headers(["Lfd. Nr.", "Beschreibung", "ME", "Einheitspreis", "Gruppe"])
        assert mapping == {
            "Positions-ID": 0,
            "Kurztext": 1,
            "Einheit": 2,
            "EP": 3,
            "Kategorie": 4,
        }

    def test_case_and_whitespace_insensitive(self):
        mapping = auto_map_headers(["  positions-id ", "KURZTEXT", "einheit", "ep"])
        assert mapping["Positions-ID"] == 0
        assert mapping["Kurztext"] == 1
        assert mapping["Einheit"] == 2
        assert mapping["EP"] == 3
        assert mapping["Kategorie"] is None

    def test_first_occurrence_wins(self):
        mapping = auto_map_headers(["Nr", "Text", "Kurztext", "Einheit", "Preis", "EP"])
        assert mapping["Positions-ID"] == 0
        assert mapping["Kurztext"] == 1
        assert mapping["EP"] == 4

    def test_unknown_headers_stay_unmapped(self):
        mapping = auto_map_headers(["Menge", "Bemerkung"])
        assert all(index is None for index in mapping.values())


class TestValidateMapping:
    def test_complete_mapping(self):
        valid, missing = validate_mapping(auto_map_headers(list(ALL_HEADERS)))
        assert valid
        assert missing == []

    def test_kategorie_is_optional(self):
        valid, missing = validate_mapping(auto_map_headers(["Positions-ID", "Kurztext", "Einheit", "EP"]))
        assert valid
        assert missing == []

    def test_missing_required_headers(self):
        valid, missing = validate_mapping(auto_map_headers(["Kurztext", "Kategorie"]))
        assert not valid
        assert missing == ["Positions-ID", "Einheit", "EP"]


class TestIsCanonicalSchema:
    def test_canonical(self):
        assert is_canonical_schema(["Positions-ID", "Kurztext", "Einheit", "EP"])

    def test_aliases_are_not_canonical(self):
        assert not is_canonical_schema(["Pos", "Kurztext", "Einheit", "Preis"])
