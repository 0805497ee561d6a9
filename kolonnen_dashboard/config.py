"""
Configuration: period presets, LV import schema, header aliases, constants.

HEADER_ALIASES maps each normalised legacy column header to its canonical
LV header. KNOWN_UNITS is the whitelist behind the unknown-unit warning.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

# ---------------------------------------------------------------------------
# Period presets (value -> dropdown label)
# ---------------------------------------------------------------------------
PERIOD_PRESETS: dict[str, str] = {
    "today": "Heute",
    "this_week": "Diese Woche",
    "this_month": "Dieser Monat",
    "this_quarter": "Dieses Quartal",
    "this_year": "Dieses Jahr",
    "custom": "Benutzerdefiniert",
}

# Bauleiter may edit a daily report until the end of record date + N days
EDIT_WINDOW_DAYS = 2

# ---------------------------------------------------------------------------
# LV import schema
# ---------------------------------------------------------------------------
REQUIRED_HEADERS: tuple[str, ...] = ("Positions-ID", "Kurztext", "Einheit", "EP")
OPTIONAL_HEADERS: tuple[str, ...] = ("Kategorie",)
ALL_HEADERS: tuple[str, ...] = REQUIRED_HEADERS + OPTIONAL_HEADERS

# Legacy header spellings (lowercase, trimmed) -> canonical header
HEADER_ALIASES: dict[str, str] = {
    # Kategorie
    "gruppe": "Kategorie",
    "kategorie": "Kategorie",
    "category": "Kategorie",
    # Kurztext
    "kompaktposition": "Kurztext",
    "kurztext": "Kurztext",
    "kurz-text": "Kurztext",
    "beschreibung": "Kurztext",
    "text": "Kurztext",
    "position": "Kurztext",
    "leistung": "Kurztext",
    "short_text": "Kurztext",
    "shorttext": "Kurztext",
    # EP
    "umsatz (leistung) je einheit": "EP",
    "umsatz je einheit": "EP",
    "einheitspreis": "EP",
    "ep": "EP",
    "preis": "EP",
    "unit_price": "EP",
    "unitprice": "EP",
    "price": "EP",
    "ep (€)": "EP",
    "ep €": "EP",
    # Einheit
    "einheit": "Einheit",
    "unit": "Einheit",
    "me": "Einheit",
    "mengeneinheit": "Einheit",
    # Positions-ID
    "positions-id": "Positions-ID",
    "positionsid": "Positions-ID",
    "position_code": "Positions-ID",
    "positionscode": "Positions-ID",
    "pos": "Positions-ID",
    "pos.": "Positions-ID",
    "pos-nr": "Positions-ID",
    "pos-nr.": "Positions-ID",
    "posnr": "Positions-ID",
    "id": "Positions-ID",
    "nr": "Positions-ID",
    "nr.": "Positions-ID",
    "lfd. nr.": "Positions-ID",
    "lfd nr": "Positions-ID",
}

# Units that import without a warning (compared case/whitespace-insensitively)
KNOWN_UNITS: tuple[str, ...] = (
    "m", "m²", "m³", "m2", "m3",
    "STCK", "STK", "Stück",
    "Std", "h",
    "Std / MA", "Std/MA",
    "kg",
    "t",
    "l", "Liter",
    "psch", "pauschal",
    "%",
    "lfm", "lfdm",
    "Tag", "Tage",
    "km",
)

# Auto-generated Positions-IDs: AUTO-0001, AUTO-0002, ...
AUTO_ID_PREFIX = "AUTO-"
AUTO_ID_WIDTH = 4

# ---------------------------------------------------------------------------
# File decoding
# ---------------------------------------------------------------------------
CSV_DELIMITERS: tuple[str, ...] = (";", ",", "\t")
DEFAULT_CSV_DELIMITER = ";"
DELIMITER_SNIFF_LINES = 5

# Tried in order after BOM detection; first clean decode wins
TEXT_ENCODINGS: tuple[str, ...] = ("utf-8", "cp1252", "latin-1")

EXCEL_EXTENSIONS = {"xlsx", "xls"}
CSV_EXTENSIONS = {"csv"}

# ---------------------------------------------------------------------------
# Templates and exports
# ---------------------------------------------------------------------------
TEMPLATE_FILE_STEM = "LV-Vorlage"
TEMPLATE_SHEET_NAME = "LV-Vorlage"
TEMPLATE_EXAMPLE_ROW: tuple = ("POS-001", "Beispiel Leistung", "m²", 12.50, "Erdarbeiten")

REPORT_EXPORT_HEADERS: list[str] = [
    "Datum",
    "Kolonne",
    "Projekt",
    "Mitarbeiter",
    "Stunden/MA",
    "Umsatz PLAN",
    "Umsatz IST",
    "Umsatz/MA",
    "Umsatz/Std",
]
REPORT_EXPORT_PREFIX = "leistungsmeldung_export_"
