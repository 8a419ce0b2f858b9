"""Dimension strings: parse "10", "10.5", "10 1/2" into numbers. No engine imports."""

from __future__ import annotations

import math
import re

_ALLOWED_CHARS = re.compile(r"[0-9\s./]*")
_DECIMAL = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")

FORMAT_ERROR = "Please use digits with a decimal point or a fraction only."
NUMBER_ERROR = "Invalid number format. Examples: 10, 10.5 or 10 1/2"


def _parse_decimal(token: str) -> float:
    if not _DECIMAL.fullmatch(token):
        return math.nan
    value = float(token)
    # very long digit strings overflow to inf
    if not math.isfinite(value):
        return math.nan
    return value


def parse_dimension(text: str) -> float:
    """Parse a length string; blank → 0, anything malformed → NaN.

    At most two whitespace-separated tokens, summed. Each is a decimal or
    an ``a/b`` fraction, and only one token may be a fraction. Never raises:
    check the result with ``math.isnan``.
    """
    parts = text.split()
    if not parts:
        return 0.0
    if len(parts) > 2:
        return math.nan

    total = 0.0
    has_fraction = False
    for part in parts:
        if "/" in part:
            if has_fraction:
                return math.nan
            has_fraction = True

            pieces = part.split("/")
            if len(pieces) != 2:
                return math.nan
            numerator = _parse_decimal(pieces[0])
            denominator = _parse_decimal(pieces[1])
            if math.isnan(numerator) or math.isnan(denominator) or denominator == 0:
                return math.nan
            total += numerator / denominator
        else:
            value = _parse_decimal(part)
            if math.isnan(value):
                return math.nan
            total += value
    if not math.isfinite(total):
        return math.nan
    return total


def validate_input(text: str) -> str | None:
    """Return an error message for a bad dimension string, ``None`` if usable.

    Blank text is valid so a field can be cleared while typing.
    """
    if not _ALLOWED_CHARS.fullmatch(text):
        return FORMAT_ERROR
    if text.strip() and math.isnan(parse_dimension(text)):
        return NUMBER_ERROR
    return None


def format_dimension(value: float) -> str:
    """Render a number the way a user would type it: 20.0 → "20", 10.5 → "10.5"."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(float(value))
