"""Data ingestion loaders for LV uploads (CSV and Excel)."""

from .lv_schema import auto_map_headers, validate_mapping, normalize_header
from .lv_schema import is_canonical_schema
from .lv_import import ImportFileError, parse_file, parse_sheet
from .lv_import import validate_and_transform
from .lv_import import generate_template_csv, generate_template_excel, write_template

__all__ = [
    "auto_map_headers",
    "validate_mapping",
    "normalize_header",
    "is_canonical_schema",
    "ImportFileError",
    "parse_file",
    "parse_sheet",
    "validate_and_transform",
    "generate_template_csv",
    "generate_template_excel",
    "write_template",
]
