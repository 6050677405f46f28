"""Per-person income, deduction and tax figures."""

from __future__ import annotations

from typing import Mapping

from pitconsol.core.protocols import ITaxCalculator
from pitconsol.ingest.destring import round_half_up
from pitconsol.models.report import EmployeeRow


def build_employee_row(
    *,
    ordinal: int | float,
    name: str,
    position: str = "",
    base_salary: float = 0,
    training_deduction: float = 0,
    bonuses: Mapping[str, float],
    other_income: float = 0,
    insurance: float = 0,
    retro_insurance: float = 0,
    dependent_count: int = 0,
    personal_deduction: float,
    dependent_deduction: float,
    calculate_tax: ITaxCalculator,
    contracted: bool = True,
) -> EmployeeRow:
    """Compute one row.

    ``other_income`` is taxable income outside salary and bonuses (the retro
    back-payment). ``dependent_deduction`` is the amount, not the per-head rate.
    """
    total_income = round_half_up(base_salary + sum(bonuses.values()) + other_income) - training_deduction
    total_deduction = round_half_up(personal_deduction + dependent_deduction + insurance + retro_insurance)
    taxable_base = round_half_up(max(0, total_income - total_deduction))
    return EmployeeRow(
        ordinal=ordinal,
        name=name,
        position=position,
        base_salary=base_salary,
        training_deduction=training_deduction,
        bonuses=dict(bonuses),
        total_taxable_income=total_income,
        insurance=insurance,
        retro_insurance=retro_insurance,
        dependent_count=dependent_count,
        dependent_deduction=dependent_deduction,
        personal_deduction=personal_deduction,
        total_deduction=total_deduction,
        taxable_base=taxable_base,
        tax=calculate_tax(taxable_base),
        contracted=contracted,
    )
