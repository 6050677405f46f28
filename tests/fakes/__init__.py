"""Shared test doubles: in-memory workbook builders for every upload kind."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Sequence

import xlwt
from openpyxl import Workbook

from pitconsol.models.uploads import UploadedFile

Row = Sequence[Any]


def make_workbook(rows: Sequence[Row], sheet_name: str = "Sheet1") -> bytes:
    return make_multi_sheet_workbook({sheet_name: rows})


def make_multi_sheet_workbook(sheets: dict[str, Sequence[Row]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for r_idx, row in enumerate(rows, start=1):
            for c_idx, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r_idx, column=c_idx, value=value)
    out = BytesIO()
    wb.save(out)
    return out.getvalue()


def make_xls_workbook(sheets: dict[str, Sequence[Row]]) -> bytes:
    """Legacy BIFF (.xls) workbook with the same cell layout as the .xlsx builders."""
    wb = xlwt.Workbook()
    for name, rows in sheets.items():
        ws = wb.add_sheet(name)
        for r_idx, row in enumerate(rows):
            for c_idx, value in enumerate(row):
                if value is not None:
                    ws.write(r_idx, c_idx, value)
    out = BytesIO()
    wb.save(out)
    return out.getvalue()


def upload(filename: str, buffer: bytes) -> UploadedFile:
    return UploadedFile(buffer=buffer, original_filename=filename)


# --- Payroll sheet (6 header rows, pay in M..P, insurance in Q..S) ---

PAYROLL_HEADER: list[Row] = [
    ["CÔNG TY TNHH MẪU"],
    ["BẢNG LƯƠNG THÁNG 05/2025"],
    [],
    ["STT", "Họ và tên", "Chức vụ"],
    [],
    ["A", "B", "C"],
]


def employee(stt: Any, name: str, salary: Sequence[float] = (0, 0, 0), training: float = 0,
             insurance: Sequence[float] = (0, 0, 0), position: str = "Nhân viên") -> list[Any]:
    row: list[Any] = [stt, name, position] + [None] * 9
    row += list(salary) + [training] + list(insurance)
    return row


def department(label: str) -> list[Any]:
    return [None, label]


def make_payroll(rows: Sequence[Row]) -> bytes:
    return make_workbook([*PAYROLL_HEADER, *rows], sheet_name="Luong")


# --- Simple two-column sheets (bonus, dependents): header row, B = name, C = value ---

def make_name_value_sheet(entries: Sequence[tuple[Any, Any]], header: str = "Số tiền") -> bytes:
    return make_workbook([["STT", "Họ và tên", header],
                          *[[i, n, v] for i, (n, v) in enumerate(entries, start=1)]])


# --- Retro sheet: 11 header rows, A = STT, B = name, J = income, K..M = insurance ---

def retro_row(stt: Any, name: Any, income: float, insurance: Sequence[float]) -> list[Any]:
    return [stt, name] + [None] * 7 + [income, *insurance]


def make_retro(rows: Sequence[Row]) -> bytes:
    header: list[Row] = [["BẢNG TRUY LĨNH"]] + [[] for _ in range(10)]
    return make_workbook([*header, *rows])
