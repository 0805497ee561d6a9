"""
Shared utilities for file ingestion: byte decoding, delimiter detection,
CSV row splitting, cell-to-text conversion.
"""

import csv
import logging
from datetime import date, datetime
from typing import Any

from ..config import (
    CSV_DELIMITERS,
    DEFAULT_CSV_DELIMITER,
    DELIMITER_SNIFF_LINES,
    TEXT_ENCODINGS,
)

logger = logging.getLogger(__name__)

# (byte-order mark, codec) checked before the encoding fallback list
_BOMS: list[tuple[bytes, str]] = [
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
]


def decode_content(data: bytes) -> str:
    """Decode uploaded CSV bytes to text.

    A byte-order mark selects its codec directly. Otherwise each codec in
    config.TEXT_ENCODINGS is tried in order and the first clean decode
    wins; ISO-8859-1 accepts any byte sequence, so the chain always ends
    with a result.
    """
    for bom, codec in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(codec, errors="replace")

    for codec in TEXT_ENCODINGS:
        try:
            text = data.decode(codec)
        except UnicodeDecodeError:
            continue
        if codec != TEXT_ENCODINGS[0]:
            logger.info("Decoded file as %s", codec)
        return text

    # Not reached while latin-1 is last in TEXT_ENCODINGS
    return data.decode(TEXT_ENCODINGS[-1], errors="replace")


def detect_delimiter(content: str) -> str:
    """Pick the most frequent of ';', ',' and tab in the first lines.

    Ties keep the order of config.CSV_DELIMITERS; no delimiter at all
    falls back to ';' (German exports).
    """
    head = "\n".join(content.split("\n")[:DELIMITER_SNIFF_LINES])
    best, best_count = DEFAULT_CSV_DELIMITER, 0
    for delimiter in CSV_DELIMITERS:
        count = head.count(delimiter)
        if count > best_count:
            best, best_count = delimiter, count
    return best


def parse_csv(content: str, delimiter: str) -> list[list[str]]:
    """Split CSV text into rows of trimmed cells, skipping blank lines.

    Quoted fields may contain the delimiter; doubled quotes escape a quote.
    """
    lines = [line for line in content.splitlines() if line.strip()]
    return [
        [cell.strip() for cell in row]
        for row in csv.reader(lines, delimiter=delimiter, quotechar='"')
    ]


def cell_text(value: Any) -> str:
    """Render a cell as trimmed text.

    Whole-number floats lose their '.0' so numeric position ids read
    the way the spreadsheet shows them.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN from pandas
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def is_blank_row(row: list[Any] | tuple | None) -> bool:
    """True for a missing row or one whose cells are all empty."""
    if not row:
        return True
    return all(cell_text(cell) == "" for cell in row)


def trim_trailing_blank_rows(rows: list[list[Any]]) -> list[list[Any]]:
    """Drop empty rows openpyxl reports below the last used row."""
    end = len(rows)
    while end > 0 and is_blank_row(rows[end - 1]):
        end -= 1
    return rows[:end]
