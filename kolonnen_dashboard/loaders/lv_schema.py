"""
LV import schema: header normalisation and automatic column mapping.

Canonical headers and the alias table live in config; a ColumnMapping is
a dict with one slot per canonical header holding a source column index,
or None when unmapped.
"""

import logging
import re

from ..config import ALL_HEADERS, HEADER_ALIASES, REQUIRED_HEADERS

logger = logging.getLogger(__name__)

ColumnMapping = dict[str, int | None]

_LINE_BREAK_RE = re.compile(r"[\r\n]+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """Lowercase, trim and collapse line breaks / whitespace runs to one space."""
    s = str(header).lower().strip()
    s = _LINE_BREAK_RE.sub(" ", s)
    return _WHITESPACE_RE.sub(" ", s).strip()


_CANONICAL_BY_NORMALIZED = {normalize_header(h): h for h in ALL_HEADERS}


def empty_mapping() -> ColumnMapping:
    return {header: None for header in ALL_HEADERS}


def is_canonical_schema(headers: list[str]) -> bool:
    """True when every required canonical header is present by name."""
    normalized = {normalize_header(h) for h in headers}
    return all(normalize_header(req) in normalized for req in REQUIRED_HEADERS)


def auto_map_headers(source_headers: list[str]) -> ColumnMapping:
    """Propose a column mapping for the uploaded headers.

    Each header is matched against the canonical names first and the
    alias table second. The first column claiming a canonical slot keeps
    it; later columns for the same slot are ignored.
    """
    mapping = empty_mapping()

    for index, header in enumerate(source_headers):
        normalized = normalize_header(header)

        canonical = _CANONICAL_BY_NORMALIZED.get(normalized)
        if canonical is not None and mapping[canonical] is None:
            mapping[canonical] = index
            continue

        alias = HEADER_ALIASES.get(normalized)
        if alias is not None and mapping[alias] is None:
            mapping[alias] = index

    mapped = sum(1 for idx in mapping.values() if idx is not None)
    logger.info("Auto-mapped %d of %d canonical headers", mapped, len(mapping))
    return mapping


def validate_mapping(mapping: ColumnMapping) -> tuple[bool, list[str]]:
    """Return (valid, missing) for the required headers.

    'Kategorie' is optional and never reported as missing.
    """
    missing = [h for h in REQUIRED_HEADERS if mapping.get(h) is None]
    return not missing, missing
