"""Tests for department subtotals and group totals."""

from __future__ import annotations

from pitconsol.engine.calculation import build_employee_row
from pitconsol.engine.tax import calculate_progressive_tax
from pitconsol.engine.totals import assemble_report, combine_totals, derive_department_subtotals, group_total
from pitconsol.models.report import (
    LABEL_CONTRACTED_TOTAL,
    LABEL_GRAND_TOTAL,
    LABEL_NO_CONTRACT_TOTAL,
    DepartmentSubtotal,
    EmployeeRow,
    GroupTotal,
)

KPI = "KPI"


def _row(ordinal, name, salary, bonus=0.0, contracted=True) -> EmployeeRow:
    return build_employee_row(
        ordinal=ordinal, name=name, base_salary=salary, bonuses={KPI: bonus},
        personal_deduction=11_000_000 if contracted else 0, dependent_deduction=0,
        calculate_tax=calculate_progressive_tax, contracted=contracted,
    )


class TestBuildEmployeeRow:
    def test_rounds_income_before_training_deduction(self):
        row = build_employee_row(
            ordinal=1, name="A", base_salary=10_000_000.4, training_deduction=100_000,
            bonuses={KPI: 0.2}, personal_deduction=0, dependent_deduction=0,
            calculate_tax=calculate_progressive_tax,
        )
        assert row.total_taxable_income == 9_900_001

    def test_taxable_base_is_never_negative(self):
        row = _row(1, "A", 5_000_000)
        assert row.taxable_base == 0
        assert row.tax == 0


class TestDepartmentSubtotals:
    def test_each_header_sums_the_rows_below_it(self):
        rows = [
            DepartmentSubtotal(name="Phòng A"),
            _row(1, "A1", 12_000_000, 1_000_000),
            _row(2, "A2", 13_000_000),
            DepartmentSubtotal(name="Phòng B"),
            _row(3, "B1", 20_000_000),
        ]
        out, unassigned = derive_department_subtotals(rows, [KPI])
        assert unassigned == []
        assert out[0].base_salary == 25_000_000
        assert out[0].bonuses == {KPI: 1_000_000}
        assert out[3].base_salary == 20_000_000
        assert [r.name for r in out] == ["Phòng A", "A1", "A2", "Phòng B", "B1"]

    def test_empty_department_is_zero(self):
        out, _ = derive_department_subtotals([DepartmentSubtotal(name="Trống")], [KPI])
        assert out[0].tax == 0
        assert out[0].bonuses == {KPI: 0}

    def test_rows_before_first_header_are_unassigned(self):
        lead = _row(1, "Lẻ", 15_000_000)
        out, unassigned = derive_department_subtotals(
            [lead, DepartmentSubtotal(name="Phòng A"), _row(2, "A1", 12_000_000)], [KPI]
        )
        assert unassigned == [lead]
        assert out[1].base_salary == 12_000_000


class TestGroupTotals:
    def test_combine_adds_headcounts_and_amounts(self):
        a = group_total("a", [_row(1, "A", 20_000_000)], [KPI], 1)
        b = group_total("b", [_row(1, "B", 30_000_000), _row(2, "C", 10_000_000)], [KPI], 2)
        grand = combine_totals("g", [a, b], [KPI])
        assert grand.headcount == 3
        assert grand.base_salary == 60_000_000
        assert grand.tax == a.tax + b.tax

    def test_assemble_always_emits_the_three_totals(self):
        rows = assemble_report([DepartmentSubtotal(name="Phòng A"), _row(1, "A1", 21_000_000)], [], [KPI])
        totals = [r for r in rows if isinstance(r, GroupTotal)]
        assert [t.name for t in totals] == [LABEL_CONTRACTED_TOTAL, LABEL_NO_CONTRACT_TOTAL, LABEL_GRAND_TOTAL]
        assert totals[1].headcount == 0
        assert totals[1].tax == 0
        assert totals[2].tax == totals[0].tax == 750_000

    def test_contracted_total_counts_unassigned_rows_once(self):
        rows = assemble_report(
            [_row(1, "Lẻ", 15_000_000), DepartmentSubtotal(name="Phòng A"), _row(2, "A1", 12_000_000)],
            [_row(1, "X", 1_000_000, contracted=False)],
            [KPI],
        )
        contracted = next(r for r in rows if r.name == LABEL_CONTRACTED_TOTAL)
        grand = rows[-1]
        assert contracted.base_salary == 27_000_000
        assert contracted.headcount == 2
        assert grand.headcount == 3
        assert grand.base_salary == 28_000_000
