"""Workbook access: load an upload buffer and expose sheets as raw row arrays.

``.xlsx`` goes through openpyxl; legacy BIFF ``.xls`` (OLE2 container) through
xlrd. Both produce the same row tuples: blanks as ``None``, whole numbers as
``int``, dates as ``datetime``.
"""

from __future__ import annotations

from io import BytesIO

import xlrd
from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from pitconsol.core.exceptions import WorkbookReadError
from pitconsol.core.types import CellValue, RawRow, RawSheet

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_XLS_EMPTY_TYPES = (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR)


def is_legacy_xls(buffer: bytes) -> bool:
    return buffer[:len(OLE2_SIGNATURE)] == OLE2_SIGNATURE


def open_workbook(buffer: bytes) -> Workbook:
    try:
        return load_workbook(BytesIO(buffer), data_only=True)
    except Exception as exc:
        raise WorkbookReadError(f"not a readable workbook: {exc}") from exc


def open_legacy_workbook(buffer: bytes) -> xlrd.Book:
    try:
        return xlrd.open_workbook(file_contents=buffer)
    except Exception as exc:
        raise WorkbookReadError(f"not a readable .xls workbook: {exc}") from exc


def sheet_rows(worksheet: Worksheet) -> RawSheet:
    """Every row from A1 down, values only. Leading blank rows are kept so offsets hold."""
    if worksheet.max_row == 1 and worksheet.max_column == 1 and worksheet["A1"].value is None:
        return []
    return list(worksheet.iter_rows(min_row=1, min_col=1, values_only=True))


def _legacy_cell(cell: xlrd.sheet.Cell, datemode: int) -> CellValue:
    if cell.ctype in _XLS_EMPTY_TYPES:
        return None
    if cell.ctype == xlrd.XL_CELL_NUMBER:
        return int(cell.value) if float(cell.value).is_integer() else cell.value
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    return cell.value


def legacy_sheet_rows(sheet: xlrd.sheet.Sheet, datemode: int) -> RawSheet:
    """Same shape as ``sheet_rows``: rows from A1, padded to the sheet width."""
    return [
        tuple(_legacy_cell(sheet.cell(r, c), datemode) for c in range(sheet.ncols))
        for r in range(sheet.nrows)
    ]


def read_first_sheet(buffer: bytes) -> RawSheet:
    if is_legacy_xls(buffer):
        book = open_legacy_workbook(buffer)
        return legacy_sheet_rows(book.sheet_by_index(0), book.datemode)
    workbook = open_workbook(buffer)
    return sheet_rows(workbook.worksheets[0])


def read_all_sheets(buffer: bytes) -> list[tuple[str, RawSheet]]:
    if is_legacy_xls(buffer):
        book = open_legacy_workbook(buffer)
        return [(s.name, legacy_sheet_rows(s, book.datemode)) for s in book.sheets()]
    workbook = open_workbook(buffer)
    return [(ws.title, sheet_rows(ws)) for ws in workbook.worksheets]


def cell(row: RawRow, index: int) -> CellValue:
    """Value at ``index``, or ``None`` past the end of a short row."""
    return row[index] if index < len(row) else None


def is_blank(value: CellValue) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
