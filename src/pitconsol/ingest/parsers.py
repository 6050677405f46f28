"""Side-source parsers: bonus, dependents and retro ("truy lĩnh") workbooks.

Each parser reads fixed column positions from raw rows, no header inference.
A side source that cannot be read must never block the payroll computation:
parsers log the failure, record it on the trace and return an empty source.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, TypeVar

from pitconsol.core.exceptions import SourceParseError
from pitconsol.core.types import RawSheet
from pitconsol.ingest.destring import to_int, to_number
from pitconsol.ingest.names import normalize_name
from pitconsol.ingest.workbook import cell, is_blank, read_all_sheets, read_first_sheet
from pitconsol.models.outputs import ProcessingTrace
from pitconsol.models.report import FIXED_COLUMNS
from pitconsol.models.sources import (
    BonusEntry,
    BonusSource,
    DependentEntry,
    DependentsSource,
    RetroEntry,
    RetroPaymentSource,
)
from pitconsol.models.uploads import FileRole, UploadedFile

logger = logging.getLogger(__name__)

DEFAULT_BONUS_TITLE = "Thưởng"

# Bonus and dependents sheets: one header row, B = name, C = value.
SIMPLE_DATA_START = 1
NAME_COL = 1
VALUE_COL = 2

# Retro sheet: data from spreadsheet row 12; J = taxable income, K..M = insurance.
RETRO_DATA_START = 11
RETRO_ORDINAL_COL = 0
RETRO_INCOME_COL = 9
RETRO_INSURANCE_COLS = (10, 11, 12)

T = TypeVar("T")


def _degrade(role: FileRole, filename: str, exc: Exception,
             trace: Optional[ProcessingTrace], empty: T) -> T:
    error = SourceParseError(role.value.lower(), filename, str(exc))
    logger.debug("Parser failure detail", exc_info=exc)
    if trace is not None:
        trace.warn(str(error))
    else:
        logger.warning("%s", error)
    return empty


def _put(entries: dict[str, T], key: str, entry: T, name: str, source: str,
         trace: Optional[ProcessingTrace]) -> None:
    """Insert ``entry``; a key already present is reported as a collision (last wins)."""
    previous = entries.get(key)
    if previous is not None and trace is not None:
        trace.record_collision(key, source, [previous.original_name, name])
    entries[key] = entry


def _bonus_entries(rows: RawSheet, source: str,
                   trace: Optional[ProcessingTrace]) -> dict[str, BonusEntry]:
    entries: dict[str, BonusEntry] = {}
    for row in rows[SIMPLE_DATA_START:]:
        name = cell(row, NAME_COL)
        amount = to_number(cell(row, VALUE_COL))
        key = normalize_name(name)
        if not key or amount <= 0:
            continue
        original = str(name).strip()
        _put(entries, key, BonusEntry(original_name=original, amount=amount), original, source, trace)
    return entries


def parse_bonus_file(buffer: bytes, *, filename: str = "",
                     trace: Optional[ProcessingTrace] = None) -> dict[str, BonusEntry]:
    """Single-sheet bonus file: first sheet, B = name, C = amount (> 0)."""
    try:
        return _bonus_entries(read_first_sheet(buffer), filename, trace)
    except Exception as exc:
        return _degrade(FileRole.BONUS, filename, exc, trace, {})


def parse_multi_sheet_bonus_file(buffer: bytes, *, filename: str = "",
                                 trace: Optional[ProcessingTrace] = None) -> list[BonusSource]:
    """One bonus source per sheet that yields entries, titled by sheet name."""
    try:
        sheets = read_all_sheets(buffer)
    except Exception as exc:
        return _degrade(FileRole.BONUS, filename, exc, trace, [])
    sources: list[BonusSource] = []
    for sheet_name, rows in sheets:
        title = (sheet_name or DEFAULT_BONUS_TITLE).replace("_", " ").strip() or DEFAULT_BONUS_TITLE
        try:
            entries = _bonus_entries(rows, f"{filename}[{sheet_name}]", trace)
        except Exception as exc:
            _degrade(FileRole.BONUS, f"{filename}[{sheet_name}]", exc, trace, None)
            continue
        if not entries:
            logger.debug("Sheet %r of %r has no bonus entries, skipped", sheet_name, filename)
            continue
        sources.append(BonusSource(title=title, entries=entries))
    return sources


def unique_title(title: str, taken: Sequence[str]) -> str:
    """``title``, suffixed with a counter when a column of that name already exists."""
    if title not in taken:
        return title
    n = 2
    while f"{title} ({n})" in taken:
        n += 1
    return f"{title} ({n})"


def parse_bonus_sources(files: Sequence[UploadedFile],
                        trace: Optional[ProcessingTrace] = None) -> list[BonusSource]:
    """All bonus sources in upload order.

    One source per usable sheet. A file with no usable sheet, or one that
    cannot be read (warned once), still contributes an empty column titled
    after the filename.
    """
    sources: list[BonusSource] = []
    for file in files:
        parsed = parse_multi_sheet_bonus_file(file.buffer, filename=file.original_filename, trace=trace)
        if not parsed:
            parsed = [BonusSource(title=file.base_name or DEFAULT_BONUS_TITLE)]
        for source in parsed:
            title = unique_title(source.title, [*FIXED_COLUMNS, *(s.title for s in sources)])
            if title != source.title:
                if trace is not None:
                    trace.warn(f"Duplicate bonus title {source.title!r} renamed to {title!r}")
                source = source.model_copy(update={"title": title})
            sources.append(source)
    return sources


def _dependents(rows: RawSheet, source: str, trace: Optional[ProcessingTrace]) -> DependentsSource:
    dependents: DependentsSource = {}
    for row in rows[SIMPLE_DATA_START:]:
        name = cell(row, NAME_COL)
        key = normalize_name(name)
        if not key:
            continue
        original = str(name).strip()
        entry = DependentEntry(original_name=original, count=to_int(cell(row, VALUE_COL)))
        _put(dependents, key, entry, original, source, trace)
    return dependents


def parse_dependents_file(buffer: bytes, *, filename: str = "",
                          trace: Optional[ProcessingTrace] = None) -> DependentsSource:
    """Dependents ("NPT") file: B = name, C = number of dependents."""
    try:
        return _dependents(read_first_sheet(buffer), filename, trace)
    except Exception as exc:
        return _degrade(FileRole.DEPENDENTS, filename, exc, trace, {})


def _retro(rows: RawSheet, source: str, trace: Optional[ProcessingTrace]) -> RetroPaymentSource:
    retro: RetroPaymentSource = {}
    skipped = 0
    for row in rows[RETRO_DATA_START:]:
        name = cell(row, NAME_COL)
        if is_blank(cell(row, RETRO_ORDINAL_COL)) or not isinstance(name, str) or is_blank(name):
            skipped += 1
            continue
        original = name.strip()
        entry = RetroEntry(
            original_name=original,
            taxable_income=to_number(cell(row, RETRO_INCOME_COL)),
            insurance_deduction=sum(to_number(cell(row, i)) for i in RETRO_INSURANCE_COLS),
        )
        logger.debug("Retro row %r: income=%s insurance=%s", original,
                     entry.taxable_income, entry.insurance_deduction)
        _put(retro, normalize_name(original), entry, original, source, trace)
    logger.debug("Retro file %r: %d entries, %d rows skipped", source, len(retro), skipped)
    return retro


def parse_retro_file(buffer: bytes, *, filename: str = "",
                     trace: Optional[ProcessingTrace] = None) -> RetroPaymentSource:
    """Retro back-payment file: data from row 12, A = ordinal, B = name, J..M amounts."""
    try:
        return _retro(read_first_sheet(buffer), filename, trace)
    except Exception as exc:
        return _degrade(FileRole.RETRO, filename, exc, trace, {})


def parse_optional(file: Optional[UploadedFile],
                   parser: Callable[..., T], empty: T,
                   trace: Optional[ProcessingTrace] = None) -> T:
    """Run ``parser`` on an optional upload, ``empty`` when the file is absent."""
    if file is None:
        return empty
    return parser(file.buffer, filename=file.original_filename, trace=trace)
