"""
Numeric helpers: safe division, tolerant coercion, locale-aware parsing
of imported prices, and German display formatting.
"""

import math
import re
from typing import Any


_STRIP_RE = re.compile(r"[€$\s]")
_SIGN_RE = re.compile(r"^[-+()]|\)$")
_MAGNITUDE_RE = re.compile(r"^(\d+\.?\d*|\.\d+)$")


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """Return numerator / denominator, or `fallback` when the result is not finite.

    A zero or non-finite denominator yields `fallback` without dividing.
    """
    if denominator == 0 or not math.isfinite(denominator):
        return fallback
    result = numerator / denominator
    return result if math.isfinite(result) else fallback


def to_number_or_zero(value: Any) -> float:
    """Coerce a record field to float, treating missing or invalid input as 0.

    Strings accept a comma as decimal separator ("2,5" -> 2.5).
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        number = float(text.replace(",", ".", 1))
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_magnitude(text: str) -> float | None:
    if not _MAGNITUDE_RE.match(text):
        return None
    return float(text)


def parse_number(value: Any) -> float | None:
    """Parse a German or US formatted number string.

    Returns None for empty, non-numeric or non-finite input.

    Separator rules
    ---------------
    The cleaned string is classified by its count of dots and commas:

    - no separators: plain number
    - one comma only: comma is the decimal separator ("2,50")
    - one dot only: thousands separator when followed by exactly three
      digits and preceded by at most two ("2.500" -> 2500), otherwise a
      decimal point ("1234.56")
    - dots plus one trailing comma: German long form ("1.234,56")
    - commas plus one trailing dot: US long form ("1,234.56")
    - several dots only / several commas only: thousands separators
    - anything else: the later of the last dot and last comma is the
      decimal separator, all other separators are dropped

    A leading "-" or "(" marks the value as negative.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None

    text = _STRIP_RE.sub("", text)
    negative = text.startswith("-") or text.startswith("(")
    text = _SIGN_RE.sub("", text)

    dots = text.count(".")
    commas = text.count(",")
    comma_last = text.rfind(",") > text.rfind(".")

    if dots == 0 and commas == 0:
        result = _to_magnitude(text)
    elif dots == 0 and commas == 1:
        result = _to_magnitude(text.replace(",", "."))
    elif dots == 1 and commas == 0:
        head, tail = text.split(".")
        if len(tail) == 3 and tail.isdigit() and len(head) <= 2:
            # Ambiguous: "2.500" could be 2.5 as well; read as thousands
            result = _to_magnitude(head + tail)
        else:
            result = _to_magnitude(text)
    elif dots >= 1 and commas == 1 and comma_last:
        result = _to_magnitude(text.replace(".", "").replace(",", "."))
    elif dots == 1 and commas >= 1 and not comma_last:
        result = _to_magnitude(text.replace(",", ""))
    elif dots > 1 and commas == 0:
        result = _to_magnitude(text.replace(".", ""))
    elif dots == 0 and commas > 1:
        result = _to_magnitude(text.replace(",", ""))
    else:
        split = max(text.rfind("."), text.rfind(","))
        head = text[:split].replace(".", "").replace(",", "")
        result = _to_magnitude(head + "." + text[split + 1:])

    if result is None or not math.isfinite(result):
        return None
    return -result if negative else result


def is_valid_ep(value: float | None) -> bool:
    """A unit price (EP) is valid when present, finite and not negative."""
    if value is None:
        return False
    return math.isfinite(value) and value >= 0


def format_number(value: float, decimals: int = 2) -> str:
    """Format a number German style: 1234.5 -> '1.234,50'."""
    us = f"{value:,.{decimals}f}"
    return us.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float) -> str:
    """Format an amount as EUR for display: 1234.5 -> '1.234,50 €'."""
    return f"{format_number(value, 2)} €"
