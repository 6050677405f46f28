"""PayrollConsolidator: joins the payroll sheet with every side source.

Payroll layout (first sheet, 0-based columns):

- rows 0..5 are the sheet header;
- A = STT (numeric on employee rows, empty on department header rows);
- B = name, C = position;
- M..P make up "LƯƠNG V1"; P ("đi học khó quỹ", ĐHKQ) is shown inside it and
  also subtracted from taxable income;
- Q, R, S = employee social / health / unemployment insurance;
- a row whose name contains "tổng cộng" ends the data.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional, Sequence

from pitconsol.core.config import TaxConfig
from pitconsol.core.exceptions import PayrollReadError, WorkbookReadError
from pitconsol.core.types import RawRow
from pitconsol.engine.calculation import build_employee_row
from pitconsol.engine.tax import calculate_flat_tax, calculate_progressive_tax
from pitconsol.engine.totals import assemble_report
from pitconsol.ingest.destring import is_number, round_half_up, to_number
from pitconsol.ingest.names import normalize_label, normalize_name
from pitconsol.ingest.workbook import cell, is_blank, read_first_sheet
from pitconsol.models.outputs import ConsolidationResult, ProcessingTrace
from pitconsol.models.report import DepartmentSubtotal, EmployeeRow
from pitconsol.models.sources import NO_RETRO, BonusSource, DependentsSource, RetroPaymentSource
from pitconsol.models.uploads import UploadedFile

logger = logging.getLogger(__name__)

HEADER_ROWS = 6
END_MARKER = "tổng cộng"

ORDINAL_COL = 0
NAME_COL = 1
POSITION_COL = 2
BASE_SALARY_COLS = (12, 13, 14, 15)
TRAINING_DEDUCTION_COL = 15
INSURANCE_COLS = (16, 17, 18)


class PayrollConsolidator:
    """Builds the consolidated report rows for one set of parsed sources."""

    def __init__(self, *, tax_config: TaxConfig | None = None,
                 trace: ProcessingTrace | None = None) -> None:
        self._tax = tax_config or TaxConfig()
        self._trace = trace if trace is not None else ProcessingTrace()

    def consolidate(
        self,
        payroll: UploadedFile,
        bonuses: Sequence[BonusSource] = (),
        dependents: Optional[DependentsSource] = None,
        retro: Optional[RetroPaymentSource] = None,
    ) -> ConsolidationResult:
        dependents = dependents or {}
        retro = retro or {}
        bonus_titles = [b.title for b in bonuses]

        try:
            rows = read_first_sheet(payroll.buffer)
        except WorkbookReadError as exc:
            raise PayrollReadError(payroll.original_filename, str(exc)) from exc

        contracted, payroll_keys = self._payroll_rows(rows, bonuses, dependents, retro)
        no_contract = self._no_contract_rows(payroll_keys, bonuses, dependents, retro)
        logger.info(
            "Consolidated %d payroll employees, %d without contract, %d bonus columns",
            sum(isinstance(r, EmployeeRow) for r in contracted), len(no_contract), len(bonus_titles),
        )
        return ConsolidationResult(
            rows=assemble_report(contracted, no_contract, bonus_titles),
            bonus_titles=bonus_titles,
            trace=self._trace,
        )

    # ------------------------------------------------------------------
    # Payroll sheet
    # ------------------------------------------------------------------

    def _payroll_rows(self, rows: Sequence[RawRow], bonuses, dependents, retro):
        contracted: list[EmployeeRow | DepartmentSubtotal] = []
        seen: dict[str, str] = {}
        for row in rows[HEADER_ROWS:]:
            ordinal = cell(row, ORDINAL_COL)
            name = cell(row, NAME_COL)
            if END_MARKER in normalize_label(name):
                break
            if (not ordinal or is_blank(ordinal)) and name and not is_blank(name):
                contracted.append(DepartmentSubtotal(name=str(name).strip()))
            elif is_number(ordinal):
                employee = self._employee(row, bonuses, dependents, retro)
                key = normalize_name(employee.name)
                if key in seen:
                    self._trace.record_collision(key, "payroll", [seen[key], employee.name])
                seen[key] = employee.name
                contracted.append(employee)
        return contracted, set(seen)

    def _employee(self, row: RawRow, bonuses, dependents, retro) -> EmployeeRow:
        name = str(cell(row, NAME_COL) or "").strip()
        key = normalize_name(name)
        dependent = dependents.get(key)
        dependent_count = dependent.count if dependent else 0
        adjustment = retro.get(key, NO_RETRO)
        if adjustment is not NO_RETRO:
            logger.debug("Retro adjustment for %s: %s", name, adjustment)
        return build_employee_row(
            ordinal=cell(row, ORDINAL_COL),
            name=name,
            position=str(cell(row, POSITION_COL) or ""),
            base_salary=sum(to_number(cell(row, i)) for i in BASE_SALARY_COLS),
            training_deduction=to_number(cell(row, TRAINING_DEDUCTION_COL)),
            bonuses={b.title: b.amount_for(key) for b in bonuses},
            other_income=adjustment.taxable_income,
            insurance=round_half_up(sum(to_number(cell(row, i)) for i in INSURANCE_COLS)),
            retro_insurance=adjustment.insurance_deduction,
            dependent_count=dependent_count,
            personal_deduction=self._tax.personal_deduction,
            dependent_deduction=dependent_count * self._tax.dependent_deduction,
            calculate_tax=calculate_progressive_tax,
        )

    # ------------------------------------------------------------------
    # People paid without a labour contract
    # ------------------------------------------------------------------

    def _no_contract_rows(self, payroll_keys: set[str], bonuses, dependents, retro) -> list[EmployeeRow]:
        candidates: dict[str, str] = {}
        sources = [*(b.entries for b in bonuses), dependents, retro]
        for entries in sources:
            for key, entry in entries.items():
                name = entry.original_name.strip()
                if not key or key in payroll_keys or key in candidates:
                    continue
                if name[:1].isdigit():
                    continue
                candidates[key] = name

        flat_tax = partial(calculate_flat_tax, rate=self._tax.flat_rate)
        rows: list[EmployeeRow] = []
        for ordinal, (key, name) in enumerate(candidates.items(), start=1):
            dependent = dependents.get(key)
            adjustment = retro.get(key, NO_RETRO)
            rows.append(
                build_employee_row(
                    ordinal=ordinal,
                    name=name,
                    bonuses={b.title: b.amount_for(key) for b in bonuses},
                    other_income=adjustment.taxable_income,
                    retro_insurance=adjustment.insurance_deduction,
                    dependent_count=dependent.count if dependent else 0,
                    personal_deduction=0,
                    dependent_deduction=0,
                    calculate_tax=flat_tax,
                    contracted=False,
                )
            )
        return rows
