"""Type aliases used across the consolidator."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Union

NormalizedKey = str
CellValue = Union[str, int, float, bool, datetime, date, time, None]
RawRow = tuple[CellValue, ...]
RawSheet = list[RawRow]
