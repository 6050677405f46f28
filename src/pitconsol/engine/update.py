"""ReportUpdater: add one bonus column to an already consolidated report.

The existing report is read back by header. Salary, insurance, dependents and
allowances are taken verbatim from it; only income, deduction and tax are
recomputed, and every subtotal / total row is derived again.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

from pitconsol.core.config import TaxConfig
from pitconsol.core.exceptions import ReportReadError, WorkbookReadError
from pitconsol.engine.calculation import build_employee_row
from pitconsol.engine.tax import calculate_flat_tax, calculate_progressive_tax
from pitconsol.engine.totals import assemble_report
from pitconsol.ingest.destring import is_number, to_int, to_number
from pitconsol.ingest.names import normalize_name
from pitconsol.ingest.parsers import parse_bonus_file, unique_title
from pitconsol.ingest.workbook import is_blank, read_first_sheet
from pitconsol.models.outputs import ConsolidationResult, ProcessingTrace
from pitconsol.models.report import (
    COL_BASE_SALARY,
    COL_DEPENDENT_COUNT,
    COL_DEPENDENT_DEDUCTION,
    COL_INSURANCE,
    COL_NAME,
    COL_ORDINAL,
    COL_PERSONAL_DEDUCTION,
    COL_POSITION,
    COL_RETRO_INSURANCE,
    COL_TOTAL_INCOME,
    COL_TRAINING_DEDUCTION,
    FIXED_COLUMNS,
    LABEL_CONTRACTED_TOTAL,
    LABEL_GRAND_TOTAL,
    LABEL_NO_CONTRACT_TOTAL,
    DepartmentSubtotal,
    EmployeeRow,
)

logger = logging.getLogger(__name__)

_GROUP_LABELS = {LABEL_CONTRACTED_TOTAL, LABEL_NO_CONTRACT_TOTAL, LABEL_GRAND_TOTAL}

Record = dict[str, Any]


def read_report_records(buffer: bytes) -> tuple[list[str], list[Record]]:
    """Header row and one dict per non-blank data row."""
    try:
        rows = read_first_sheet(buffer)
    except WorkbookReadError as exc:
        raise ReportReadError(f"Cannot read existing report: {exc}") from exc
    if not rows:
        raise ReportReadError("Existing report is empty")
    header = [str(h).strip() if h is not None else "" for h in rows[0]]
    if COL_ORDINAL not in header or COL_NAME not in header:
        raise ReportReadError(
            f"Existing report lacks the {COL_ORDINAL!r} / {COL_NAME!r} columns"
        )
    records = []
    for row in rows[1:]:
        if all(is_blank(v) for v in row):
            continue
        records.append({h: v for h, v in zip(header, row) if h})
    return header, records


class ReportUpdater:
    """Merges a new bonus sheet into an existing consolidated report."""

    def __init__(self, *, tax_config: TaxConfig | None = None,
                 trace: ProcessingTrace | None = None) -> None:
        self._tax = tax_config or TaxConfig()
        self._trace = trace if trace is not None else ProcessingTrace()

    def update(self, existing_report: bytes, new_bonus: bytes, title: str,
               *, bonus_filename: str = "") -> ConsolidationResult:
        header, records = read_report_records(existing_report)
        existing_titles = [h for h in header if h and h not in FIXED_COLUMNS]
        new_title = unique_title(title, [*FIXED_COLUMNS, *existing_titles])
        if new_title != title:
            self._trace.warn(f"Bonus column {title!r} already exists, added as {new_title!r}")
        bonus_titles = [*existing_titles, new_title]
        new_amounts = parse_bonus_file(new_bonus, filename=bonus_filename, trace=self._trace)

        contracted: list[EmployeeRow | DepartmentSubtotal] = []
        no_contract: list[EmployeeRow] = []
        in_no_contract_block = False
        matched: set[str] = set()
        for record in records:
            name = record.get(COL_NAME)
            label = "" if name is None else str(name).strip()
            if label == LABEL_CONTRACTED_TOTAL:
                in_no_contract_block = True
                continue
            if label in _GROUP_LABELS:
                continue
            if is_number(record.get(COL_ORDINAL)):
                key = normalize_name(label)
                entry = new_amounts.get(key)
                if entry is not None:
                    matched.add(key)
                row = self._recompute(record, existing_titles, new_title,
                                      entry.amount if entry else 0.0,
                                      contracted=not in_no_contract_block)
                (no_contract if in_no_contract_block else contracted).append(row)
            elif label and not in_no_contract_block:
                contracted.append(DepartmentSubtotal(name=label))

        unmatched = [e.original_name for k, e in new_amounts.items() if k not in matched]
        if unmatched:
            self._trace.warn(
                f"{len(unmatched)} name(s) in the new bonus sheet are not in the report: "
                + ", ".join(unmatched)
            )
        logger.info("Added bonus column %r to %d rows", new_title, len(contracted) + len(no_contract))
        return ConsolidationResult(
            rows=assemble_report(contracted, no_contract, bonus_titles),
            bonus_titles=bonus_titles,
            trace=self._trace,
        )

    def _recompute(self, record: Record, existing_titles: list[str], new_title: str,
                   new_amount: float, *, contracted: bool) -> EmployeeRow:
        base_salary = to_number(record.get(COL_BASE_SALARY))
        training = to_number(record.get(COL_TRAINING_DEDUCTION))
        old_bonuses = {t: to_number(record.get(t)) for t in existing_titles}
        # Income already in the report beyond salary and bonuses (retro back-pay).
        carried = to_number(record.get(COL_TOTAL_INCOME)) + training - base_salary - sum(old_bonuses.values())
        calculate_tax = (
            calculate_progressive_tax if contracted
            else partial(calculate_flat_tax, rate=self._tax.flat_rate)
        )
        return build_employee_row(
            ordinal=record[COL_ORDINAL],
            name=str(record.get(COL_NAME) or "").strip(),
            position=str(record.get(COL_POSITION) or ""),
            base_salary=base_salary,
            training_deduction=training,
            bonuses={**old_bonuses, new_title: new_amount},
            other_income=carried,
            insurance=to_number(record.get(COL_INSURANCE)),
            retro_insurance=to_number(record.get(COL_RETRO_INSURANCE)),
            dependent_count=to_int(record.get(COL_DEPENDENT_COUNT)),
            personal_deduction=to_number(record.get(COL_PERSONAL_DEDUCTION)),
            dependent_deduction=to_number(record.get(COL_DEPENDENT_DEDUCTION)),
            calculate_tax=calculate_tax,
            contracted=contracted,
        )
