"""Destring helpers: turn loosely formatted spreadsheet cells into numbers."""

from __future__ import annotations

import math
import re
from typing import Any

# Whitespace and commas are thousand separators in the exports we receive.
_SEPARATORS = re.compile(r"[\s,]")
_LEADING_FLOAT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_number(value: Any) -> bool:
    """True for int/float cells. Booleans are not amounts."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_prefix(text: str) -> float | None:
    match = _LEADING_FLOAT.match(_SEPARATORS.sub("", text))
    if match is None:
        return None
    return float(match.group(0))


def parses_as_number(value: Any) -> bool:
    """Whether ``value`` carries a numeric amount (blank cells do not)."""
    if is_number(value):
        return not math.isnan(value)
    if isinstance(value, str):
        return _parse_prefix(value) is not None
    return False


def to_number(value: Any) -> float:
    """Parse a cell value as a float; blanks and garbage become 0. Never raises."""
    if is_number(value):
        return 0.0 if math.isnan(value) else float(value)
    if not isinstance(value, str) or not value.strip():
        return 0.0
    parsed = _parse_prefix(value)
    return 0.0 if parsed is None else parsed


def to_int(value: Any) -> int:
    """Integer part of a cell value (dependent counts), 0 when absent."""
    number = to_number(value)
    if math.isinf(number):
        return 0
    return int(number)


def round_half_up(value: float) -> int:
    """Round to the nearest unit, halves going up like spreadsheet ROUND on money."""
    return math.floor(value + 0.5)
