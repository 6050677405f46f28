"""Consolidated report rows.

Every row shares one column layout. Employee rows carry a numeric ordinal
(STT); department subtotals and group totals leave it blank. Group totals put
their headcount in the CHỨC VỤ column when serialized, a layout inherited from
the legacy spreadsheet that downstream users still read.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Sequence, Union

from pydantic import BaseModel, Field

# --- Column headers (legacy Vietnamese layout) ---
COL_ORDINAL = "STT"
COL_NAME = "HỌ VÀ TÊN"
COL_POSITION = "CHỨC VỤ"
COL_BASE_SALARY = "LƯƠNG V1"
COL_TRAINING_DEDUCTION = "ĐHKQ"
COL_TOTAL_INCOME = "TỔNG THU NHẬP CHỊU THUẾ"
COL_INSURANCE = "BHXH, BHYT, BHTN"
COL_RETRO_INSURANCE = "BHXH, BHYT, BHTN TRUY LĨNH"
COL_DEPENDENT_COUNT = "NGƯỜI PHỤ THUỘC SL"
COL_DEPENDENT_DEDUCTION = "SỐ TIỀN GIẢM TRỪ"
COL_PERSONAL_DEDUCTION = "GIẢM TRỪ BẢN THÂN"
COL_TOTAL_DEDUCTION = "TỔNG SỐ TIỀN GIẢM TRỪ"
COL_TAXABLE_BASE = "THU NHẬP TÍNH THUẾ"
COL_TAX = "TỔNG THUẾ TNCN TẠM TÍNH"

LABEL_CONTRACTED_TOTAL = "Tổng có HĐ lao động"
LABEL_NO_CONTRACT_TOTAL = "Tổng không có HĐ lao động"
LABEL_GRAND_TOTAL = "Tổng cộng"

# Columns before / after the dynamic bonus block, mapped to model fields.
LEADING_AMOUNT_COLUMNS: dict[str, str] = {
    COL_BASE_SALARY: "base_salary",
    COL_TRAINING_DEDUCTION: "training_deduction",
}
TRAILING_AMOUNT_COLUMNS: dict[str, str] = {
    COL_TOTAL_INCOME: "total_taxable_income",
    COL_INSURANCE: "insurance",
    COL_RETRO_INSURANCE: "retro_insurance",
    COL_DEPENDENT_COUNT: "dependent_count",
    COL_DEPENDENT_DEDUCTION: "dependent_deduction",
    COL_PERSONAL_DEDUCTION: "personal_deduction",
    COL_TOTAL_DEDUCTION: "total_deduction",
    COL_TAXABLE_BASE: "taxable_base",
    COL_TAX: "tax",
}
AMOUNT_FIELDS: list[str] = [*LEADING_AMOUNT_COLUMNS.values(), *TRAILING_AMOUNT_COLUMNS.values()]

FIXED_COLUMNS: frozenset[str] = frozenset(
    {COL_ORDINAL, COL_NAME, COL_POSITION, *LEADING_AMOUNT_COLUMNS, *TRAILING_AMOUNT_COLUMNS}
)

# Columns rendered with a thousands separator (bonus titles are added per report).
CURRENCY_COLUMNS: frozenset[str] = frozenset(
    {
        COL_BASE_SALARY, COL_TRAINING_DEDUCTION, COL_TOTAL_INCOME, COL_INSURANCE,
        COL_RETRO_INSURANCE, COL_DEPENDENT_DEDUCTION, COL_PERSONAL_DEDUCTION,
        COL_TOTAL_DEDUCTION, COL_TAXABLE_BASE, COL_TAX,
    }
)


def report_columns(bonus_titles: Sequence[str]) -> list[str]:
    """Full header row for a report with the given bonus columns."""
    return [
        COL_ORDINAL, COL_NAME, COL_POSITION,
        *LEADING_AMOUNT_COLUMNS, *bonus_titles, *TRAILING_AMOUNT_COLUMNS,
    ]


class RowKind(StrEnum):
    EMPLOYEE = "employee"
    DEPARTMENT = "department"
    GROUP_TOTAL = "group_total"


class ReportLine(BaseModel):
    """Amount columns shared by every row kind."""

    name: str = ""
    base_salary: float = 0
    training_deduction: float = 0  # "đi học khó quỹ", excluded from taxable income
    bonuses: dict[str, float] = Field(default_factory=dict)
    total_taxable_income: float = 0
    insurance: float = 0
    retro_insurance: float = 0
    dependent_count: float = 0
    dependent_deduction: float = 0
    personal_deduction: float = 0
    total_deduction: float = 0
    taxable_base: float = 0
    tax: float = 0

    @property
    def total_bonus(self) -> float:
        return sum(self.bonuses.values())

    def _ordinal_cell(self) -> Any:
        return ""

    def _position_cell(self) -> Any:
        return ""

    def to_record(self, bonus_titles: Sequence[str]) -> dict[str, Any]:
        """Serialize to the legacy column layout, keyed by header."""
        record: dict[str, Any] = {
            COL_ORDINAL: self._ordinal_cell(),
            COL_NAME: self.name,
            COL_POSITION: self._position_cell(),
        }
        for column, field in LEADING_AMOUNT_COLUMNS.items():
            record[column] = getattr(self, field)
        for title in bonus_titles:
            record[title] = self.bonuses.get(title, 0)
        for column, field in TRAILING_AMOUNT_COLUMNS.items():
            record[column] = getattr(self, field)
        return record


class EmployeeRow(ReportLine):
    """A person on the payroll sheet, or a synthesized no-contract person."""

    kind: Literal[RowKind.EMPLOYEE] = RowKind.EMPLOYEE
    ordinal: Union[int, float]
    position: str = ""
    contracted: bool = True

    def _ordinal_cell(self) -> Any:
        return self.ordinal

    def _position_cell(self) -> Any:
        return self.position


class DepartmentSubtotal(ReportLine):
    """Department header row; carries the sums of the employees below it."""

    kind: Literal[RowKind.DEPARTMENT] = RowKind.DEPARTMENT


class GroupTotal(ReportLine):
    """Contracted, no-contract, or grand total row."""

    kind: Literal[RowKind.GROUP_TOTAL] = RowKind.GROUP_TOTAL
    headcount: int = 0

    def _position_cell(self) -> Any:
        return self.headcount


ReportRow = Annotated[
    Union[EmployeeRow, DepartmentSubtotal, GroupTotal], Field(discriminator="kind")
]
