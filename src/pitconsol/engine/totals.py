"""Subtotal and total rows, shared by the consolidation and update flows."""

from __future__ import annotations

from typing import Iterable, Sequence

from pitconsol.ingest.destring import round_half_up
from pitconsol.models.report import (
    AMOUNT_FIELDS,
    LABEL_CONTRACTED_TOTAL,
    LABEL_GRAND_TOTAL,
    LABEL_NO_CONTRACT_TOTAL,
    DepartmentSubtotal,
    EmployeeRow,
    GroupTotal,
    ReportLine,
    ReportRow,
)


def summed_amounts(lines: Iterable[ReportLine], bonus_titles: Sequence[str]) -> dict:
    """Rounded column sums over ``lines``, as model field values."""
    totals = dict.fromkeys(AMOUNT_FIELDS, 0.0)
    bonuses = dict.fromkeys(bonus_titles, 0.0)
    for line in lines:
        for field in AMOUNT_FIELDS:
            totals[field] += getattr(line, field)
        for title in bonus_titles:
            bonuses[title] += line.bonuses.get(title, 0)
    amounts: dict = {field: round_half_up(value) for field, value in totals.items()}
    amounts["bonuses"] = {title: round_half_up(value) for title, value in bonuses.items()}
    return amounts


def derive_department_subtotals(
    rows: Sequence[EmployeeRow | DepartmentSubtotal], bonus_titles: Sequence[str]
) -> tuple[list[EmployeeRow | DepartmentSubtotal], list[EmployeeRow]]:
    """Give each department row the sums of the employees listed under it.

    Returns the rows with refreshed subtotals, and the employees that appear
    before the first department header (they belong to no department).
    """
    out: list[EmployeeRow | DepartmentSubtotal] = []
    unassigned: list[EmployeeRow] = []
    header_index: int | None = None
    members: list[EmployeeRow] = []

    def close_department() -> None:
        if header_index is not None:
            header = out[header_index]
            out[header_index] = DepartmentSubtotal(
                name=header.name, **summed_amounts(members, bonus_titles)
            )

    for row in rows:
        if isinstance(row, DepartmentSubtotal):
            close_department()
            header_index = len(out)
            members = []
            out.append(row)
        else:
            (members if header_index is not None else unassigned).append(row)
            out.append(row)
    close_department()
    return out, unassigned


def group_total(label: str, lines: Iterable[ReportLine], bonus_titles: Sequence[str],
                headcount: int) -> GroupTotal:
    return GroupTotal(name=label, headcount=headcount, **summed_amounts(lines, bonus_titles))


def combine_totals(label: str, totals: Sequence[GroupTotal],
                   bonus_titles: Sequence[str]) -> GroupTotal:
    """Pairwise sum of group totals; the headcounts add up too."""
    return group_total(label, totals, bonus_titles, sum(t.headcount for t in totals))


def assemble_report(
    contracted: Sequence[EmployeeRow | DepartmentSubtotal],
    no_contract: Sequence[EmployeeRow],
    bonus_titles: Sequence[str],
) -> list[ReportRow]:
    """Lay out the full report.

    Contracted block with department subtotals, then "Tổng có HĐ lao động",
    the no-contract block with "Tổng không có HĐ lao động", then "Tổng cộng".
    The contracted total's headcount is the last ordinal of that block.
    """
    rows, unassigned = derive_department_subtotals(contracted, bonus_titles)
    departments = [r for r in rows if isinstance(r, DepartmentSubtotal)]
    last_ordinal = 0
    for row in rows:
        if isinstance(row, EmployeeRow):
            last_ordinal = int(row.ordinal)

    contracted_total = group_total(
        LABEL_CONTRACTED_TOTAL, [*departments, *unassigned], bonus_titles, last_ordinal
    )
    no_contract_total = group_total(
        LABEL_NO_CONTRACT_TOTAL, no_contract, bonus_titles, len(no_contract)
    )
    grand_total = combine_totals(
        LABEL_GRAND_TOTAL, [contracted_total, no_contract_total], bonus_titles
    )
    return [*rows, contracted_total, *no_contract, no_contract_total, grand_total]
