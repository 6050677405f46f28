"""Parsed side-source models, keyed by normalized employee name."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BonusEntry(BaseModel):
    original_name: str
    amount: float = 0


class BonusSource(BaseModel):
    """One bonus sheet: its column title and the amounts it grants."""

    title: str
    entries: dict[str, BonusEntry] = Field(default_factory=dict)

    def amount_for(self, key: str) -> float:
        entry = self.entries.get(key)
        return entry.amount if entry else 0.0


class DependentEntry(BaseModel):
    original_name: str
    count: int = 0


class RetroEntry(BaseModel):
    """Retroactive back-payment ("truy lĩnh") adjustment for one person."""

    original_name: str
    taxable_income: float = 0
    insurance_deduction: float = 0  # BHXH + BHYT + BHTN


DependentsSource = dict[str, DependentEntry]
RetroPaymentSource = dict[str, RetroEntry]

NO_RETRO = RetroEntry(original_name="")
