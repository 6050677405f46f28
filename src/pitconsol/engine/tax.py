"""Personal income tax policies.

Two separate calculators: the progressive monthly schedule for employees with a
labour contract, and a flat withholding rate for income paid without one.
"""

from __future__ import annotations

import math

from pitconsol.ingest.destring import round_half_up

# (upper bound of the bracket, marginal rate), monthly taxable income in VND.
TAX_BRACKETS: tuple[tuple[float, float], ...] = (
    (5_000_000, 0.05),
    (10_000_000, 0.10),
    (18_000_000, 0.15),
    (32_000_000, 0.20),
    (52_000_000, 0.25),
    (80_000_000, 0.30),
    (math.inf, 0.35),
)

NO_CONTRACT_FLAT_RATE = 0.10


def calculate_progressive_tax(taxable_income: float) -> int:
    """Tax on ``taxable_income`` under the progressive schedule."""
    if taxable_income <= 0:
        return 0
    total = 0.0
    previous_limit = 0.0
    for limit, rate in TAX_BRACKETS:
        if taxable_income <= previous_limit:
            break
        total += (min(taxable_income, limit) - previous_limit) * rate
        previous_limit = limit
    return round_half_up(total)


def calculate_flat_tax(taxable_income: float, rate: float = NO_CONTRACT_FLAT_RATE) -> int:
    """Flat withholding on income paid outside a labour contract."""
    if taxable_income <= 0:
        return 0
    return round_half_up(taxable_income * rate)
