"""Result models: consolidation output, report files, preview and trace."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from pitconsol.models.report import EmployeeRow, GroupTotal, ReportRow
from pitconsol.models.uploads import ClassificationDecision

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class NameCollision(BaseModel):
    """Several entries normalized to the same key. Needs manual review."""

    key: str
    source: str
    names: list[str] = Field(default_factory=list)


class ProcessingTrace(BaseModel):
    """Diagnostics collected during one run and returned with the result."""

    decisions: list[ClassificationDecision] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    collisions: list[NameCollision] = Field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def record_collision(self, key: str, source: str, names: list[str]) -> None:
        logger.warning("Name collision in %s: %s -> %r", source, names, key)
        for collision in self.collisions:
            if collision.key == key and collision.source == source:
                collision.names.extend(n for n in names if n not in collision.names)
                return
        self.collisions.append(NameCollision(key=key, source=source, names=list(names)))


class ConsolidationResult(BaseModel):
    """Rows in report order plus the dynamic bonus columns."""

    rows: list[ReportRow] = Field(default_factory=list)
    bonus_titles: list[str] = Field(default_factory=list)
    trace: ProcessingTrace = Field(default_factory=ProcessingTrace)

    @property
    def employees(self) -> list[EmployeeRow]:
        return [r for r in self.rows if isinstance(r, EmployeeRow)]

    def total(self, label: str) -> GroupTotal | None:
        """Look up a group total row by its label."""
        for row in self.rows:
            if isinstance(row, GroupTotal) and row.name == label:
                return row
        return None


class ReportFile(BaseModel):
    """A finished workbook ready to be stored or streamed by the caller."""

    buffer: bytes
    filename: str
    content_type: str = XLSX_CONTENT_TYPE


class PreviewSummary(BaseModel):
    """Figures shown before a report is generated."""

    total_rows: int = 0
    total_employees: int = 0
    no_contract_employees: int = 0
    total_departments: int = 0
    total_tax: float = 0
    total_salary: float = 0
    total_income: float = 0
    columns: list[str] = Field(default_factory=list)
