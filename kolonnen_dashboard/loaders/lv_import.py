"""
Loader for LV (bill-of-quantities) uploads: CSV and Excel.

Pipeline: raw bytes -> header row + raw rows -> proposed column mapping
-> validated LVRow list with per-row diagnostics. Data-quality problems
are reported in the ImportResult; only unreadable or empty files raise
ImportFileError. Messages are German because they are shown to users.
"""

import io
import logging
from pathlib import Path
from typing import Any

import openpyxl
import pandas as pd

from ..config import (
    ALL_HEADERS,
    AUTO_ID_PREFIX,
    AUTO_ID_WIDTH,
    CSV_EXTENSIONS,
    EXCEL_EXTENSIONS,
    KNOWN_UNITS,
    TEMPLATE_EXAMPLE_ROW,
    TEMPLATE_FILE_STEM,
    TEMPLATE_SHEET_NAME,
)
from ..models import ImportResult, LVRow, ParsedFile, ValidationIssue
from ..numbers import format_number, is_valid_ep, parse_number
from .lv_schema import ColumnMapping, auto_map_headers, is_canonical_schema, normalize_header, validate_mapping
from .utils import cell_text, decode_content, detect_delimiter, is_blank_row, parse_csv, trim_trailing_blank_rows

logger = logging.getLogger(__name__)

_KNOWN_UNITS_NORMALIZED = {normalize_header(u) for u in KNOWN_UNITS}


class ImportFileError(ValueError):
    """The uploaded file cannot be turned into rows at all."""


# ---------------------------------------------------------------------------
# File reading
# ---------------------------------------------------------------------------

def _read_source(source: str | Path | bytes, file_name: str | None) -> tuple[bytes, str]:
    if isinstance(source, (bytes, bytearray)):
        if not file_name:
            raise ImportFileError("Dateiname fehlt")
        return bytes(source), file_name
    path = Path(source)
    return path.read_bytes(), file_name or path.name


def _extension(file_name: str) -> str:
    return file_name.lower().rsplit(".", 1)[-1] if "." in file_name else ""


def _split_header(rows: list[list[Any]]) -> tuple[list[str], list[list[Any]]]:
    headers = [cell_text(h) for h in rows[0]]
    return headers, [list(r) for r in rows[1:]]


def _read_workbook(data: bytes, extension: str) -> dict[str, list[list[Any]]]:
    """Return {sheet name: rows} for an .xlsx or .xls workbook."""
    if extension == "xls":
        try:
            frames = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None, dtype=object)
        except Exception as exc:
            logger.exception("Failed to open legacy Excel workbook")
            raise ImportFileError("Die Excel-Datei konnte nicht gelesen werden") from exc
        return {
            name: df.astype(object).where(pd.notna(df), None).values.tolist()
            for name, df in frames.items()
        }

    try:
        wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        logger.exception("Failed to open Excel workbook")
        raise ImportFileError("Die Excel-Datei konnte nicht gelesen werden") from exc

    try:
        sheets = {
            ws.title: [list(row) for row in ws.iter_rows(values_only=True)]
            for ws in wb.worksheets
        }
    finally:
        wb.close()
    return sheets


def _sheet_rows(workbook: dict[str, list[list[Any]]], sheet_name: str) -> list[list[Any]]:
    if sheet_name not in workbook:
        raise ImportFileError(f'Tabellenblatt "{sheet_name}" nicht gefunden')
    rows = trim_trailing_blank_rows(workbook[sheet_name])
    if not rows:
        raise ImportFileError("Das Tabellenblatt ist leer")
    return rows


def parse_file(source: str | Path | bytes, file_name: str | None = None) -> ParsedFile:
    """Parse an uploaded LV file and propose a column mapping.

    Parameters
    ----------
    source : Path to the file, or its raw bytes.
    file_name : Required with raw bytes; its extension selects the parser.

    Returns
    -------
    ParsedFile with the header row, the remaining raw rows, and the
    auto-mapped columns. Excel files are read from their first sheet.
    """
    data, file_name = _read_source(source, file_name)
    extension = _extension(file_name)

    if extension in CSV_EXTENSIONS:
        content = decode_content(data)
        delimiter = detect_delimiter(content)
        rows = parse_csv(content, delimiter)
        if not rows:
            raise ImportFileError("Die Datei ist leer")
        file_type = "csv"
        sheets = ["CSV"]
        logger.info("Parsed CSV %s: %d lines, delimiter %r", file_name, len(rows), delimiter)
    elif extension in EXCEL_EXTENSIONS:
        workbook = _read_workbook(data, extension)
        sheets = list(workbook)
        if not sheets:
            raise ImportFileError("Die Excel-Datei enthält keine Tabellenblätter")
        rows = _sheet_rows(workbook, sheets[0])
        file_type = "excel"
        logger.info("Parsed workbook %s: %d sheets, %d rows in '%s'",
                    file_name, len(sheets), len(rows), sheets[0])
    else:
        raise ImportFileError(
            "Nicht unterstütztes Dateiformat. Bitte verwenden Sie .xlsx, .xls oder .csv"
        )

    headers, raw_data = _split_header(rows)
    return ParsedFile(
        file_name=file_name,
        file_size=len(data),
        file_type=file_type,
        sheets=sheets,
        selected_sheet=sheets[0],
        headers=headers,
        raw_data=raw_data,
        mapping=auto_map_headers(headers),
        is_canonical=is_canonical_schema(headers),
    )


def parse_sheet(
    source: str | Path | bytes,
    sheet_name: str,
    file_name: str | None = None,
) -> ParsedFile:
    """Re-parse an Excel file using the named worksheet."""
    data, file_name = _read_source(source, file_name)
    extension = _extension(file_name)
    if extension not in EXCEL_EXTENSIONS:
        raise ImportFileError("Tabellenblätter gibt es nur in Excel-Dateien")

    workbook = _read_workbook(data, extension)
    rows = _sheet_rows(workbook, sheet_name)
    headers, raw_data = _split_header(rows)

    return ParsedFile(
        file_name=file_name,
        file_size=len(data),
        file_type="excel",
        sheets=list(workbook),
        selected_sheet=sheet_name,
        headers=headers,
        raw_data=raw_data,
        mapping=auto_map_headers(headers),
        is_canonical=is_canonical_schema(headers),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _cell(row: list[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def is_known_unit(unit: str) -> bool:
    return normalize_header(unit) in _KNOWN_UNITS_NORMALIZED


def validate_and_transform(
    raw_data: list[list[Any]],
    mapping: ColumnMapping,
    generate_auto_ids: bool = False,
) -> ImportResult:
    """Validate raw rows and convert them to LVRows.

    Assumptions
    -----------
    - raw_data excludes the header row; reported row numbers are
      spreadsheet rows (data index + 2).
    - Fully blank rows are skipped silently.
    - An unmapped required header aborts before any row is read, with
      one row-0 error per missing header.

    Rows with any error are left out of `rows` but keep their
    diagnostics. An unknown unit is only a warning.
    """
    result = ImportResult(total_rows=len(raw_data))

    valid, missing = validate_mapping(mapping)
    if not valid:
        for header in missing:
            result.errors.append(ValidationIssue(
                row=0,
                column=header,
                message=f'Pflichtfeld "{header}" ist nicht zugeordnet',
            ))
        logger.warning("LV import aborted, unmapped headers: %s", ", ".join(missing))
        return result

    seen_ids: set[str] = set()
    auto_id = 1

    for i, row in enumerate(raw_data):
        row_num = i + 2
        if is_blank_row(row):
            continue

        errors: list[ValidationIssue] = []

        position_id = cell_text(_cell(row, mapping["Positions-ID"]))
        kurztext = cell_text(_cell(row, mapping["Kurztext"]))
        einheit = cell_text(_cell(row, mapping["Einheit"]))
        ep_raw = _cell(row, mapping["EP"])
        ep = parse_number(ep_raw)
        kategorie = cell_text(_cell(row, mapping.get("Kategorie"))) or None

        if not position_id and generate_auto_ids:
            position_id = f"{AUTO_ID_PREFIX}{auto_id:0{AUTO_ID_WIDTH}d}"
            auto_id += 1

        if not position_id:
            errors.append(ValidationIssue(row_num, "Positions-ID", "Positions-ID ist leer"))
        elif position_id in seen_ids:
            errors.append(ValidationIssue(
                row_num, "Positions-ID", f'Doppelte Positions-ID: "{position_id}"'
            ))
        else:
            seen_ids.add(position_id)

        if not kurztext:
            errors.append(ValidationIssue(row_num, "Kurztext", "Kurztext ist leer"))

        if not einheit:
            errors.append(ValidationIssue(row_num, "Einheit", "Einheit ist leer"))
        elif not is_known_unit(einheit):
            result.warnings.append(ValidationIssue(
                row_num, "Einheit", f'Unbekannte Einheit: "{einheit}"', severity="warning"
            ))

        if not is_valid_ep(ep):
            message = (
                "EP ist leer oder nicht numerisch"
                if ep is None
                else f'Ungültiger EP-Wert: "{cell_text(ep_raw)}"'
            )
            errors.append(ValidationIssue(row_num, "EP", message))

        if errors:
            result.errors.extend(errors)
            continue

        result.rows.append(LVRow(
            positions_id=position_id,
            kurztext=kurztext,
            einheit=einheit,
            ep=ep,
            kategorie=kategorie,
        ))

    result.valid_rows = len(result.rows)
    logger.info(
        "Validated LV import: %d of %d rows accepted, %d errors, %d warnings",
        result.valid_rows, result.total_rows, len(result.errors), len(result.warnings),
    )
    return result


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def generate_template_csv() -> str:
    """Semicolon-separated template: canonical headers plus one example row."""
    example = [
        format_number(v) if isinstance(v, float) else str(v)
        for v in TEMPLATE_EXAMPLE_ROW
    ]
    return ";".join(ALL_HEADERS) + "\n" + ";".join(example)


def generate_template_excel() -> bytes:
    """Excel template with the same content as the CSV template."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = TEMPLATE_SHEET_NAME
    ws.append(list(ALL_HEADERS))
    ws.append(list(TEMPLATE_EXAMPLE_ROW))

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def write_template(directory: str | Path, fmt: str = "csv") -> Path:
    """Write LV-Vorlage.csv (UTF-8 with BOM) or LV-Vorlage.xlsx into `directory`."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        path = directory / f"{TEMPLATE_FILE_STEM}.csv"
        path.write_text(generate_template_csv(), encoding="utf-8-sig")
    elif fmt == "xlsx":
        path = directory / f"{TEMPLATE_FILE_STEM}.xlsx"
        path.write_bytes(generate_template_excel())
    else:
        raise ValueError(f"Unknown template format: {fmt}")

    logger.info("Wrote LV template %s", path)
    return path
