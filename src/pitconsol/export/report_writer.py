"""ReportWriter: serialize consolidated rows into a styled .xlsx workbook."""

from __future__ import annotations

from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from pitconsol.ingest.destring import is_number
from pitconsol.models.report import COL_ORDINAL, CURRENCY_COLUMNS, ReportLine, report_columns

DEFAULT_SHEET_NAME = "Kết quả tính thuế"
CURRENCY_FORMAT = "#,##0"


def build_spreadsheet(
    rows: Sequence[ReportLine],
    bonus_titles: Sequence[str],
    sheet_name: str = DEFAULT_SHEET_NAME,
    number_format: str = CURRENCY_FORMAT,
) -> bytes:
    """Single-sheet workbook: header row, then one line per report row.

    Rows without a numeric STT (department subtotals, totals) are bold across
    every column. Currency columns, bonus titles included, get ``number_format``.
    """
    columns = report_columns(bonus_titles)
    currency = CURRENCY_COLUMNS | set(bonus_titles)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    ws.append(columns)

    for r_idx, row in enumerate(rows, start=2):
        record = row.to_record(bonus_titles)
        summary_row = not is_number(record[COL_ORDINAL])
        for c_idx, column in enumerate(columns, start=1):
            value = record.get(column)
            cell = ws.cell(row=r_idx, column=c_idx, value=None if value == "" else value)
            if summary_row:
                cell.font = Font(bold=True)
            if column in currency and is_number(value):
                cell.number_format = number_format

    out = BytesIO()
    wb.save(out)
    return out.getvalue()
