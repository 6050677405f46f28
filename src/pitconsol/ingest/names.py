"""Employee name normalization: the join key shared by every source."""

from __future__ import annotations

import unicodedata
from typing import Any

from pitconsol.core.types import NormalizedKey


def strip_diacritics(text: str) -> str:
    """Decompose (NFD) and drop combining marks. "đ" has no decomposition and stays."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(name: Any) -> NormalizedKey:
    """Canonical lookup key: no diacritics, trimmed, lowercase.

    Blank and non-text cells (``None``, numbers, dates) give ``""``; callers
    must not join on it.
    """
    if not isinstance(name, str):
        return ""
    # Lowercase first: some capitals lowercase to a base letter plus a combining mark.
    return strip_diacritics(name.lower()).strip()


def normalize_label(text: Any) -> str:
    """Lowercase, composed form for matching Vietnamese marker text exactly."""
    if text is None:
        return ""
    return unicodedata.normalize("NFC", str(text)).lower()
