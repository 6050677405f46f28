"""Protocol interfaces for the consolidator's pluggable seams.

Structural typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from pitconsol.models.uploads import ClassifiedFiles, UploadedFile


# ---------------------------------------------------------------------------
# File classification
# ---------------------------------------------------------------------------

@runtime_checkable
class IClassificationStrategy(Protocol):
    """One step of the file classification chain.

    A strategy inspects the uploads and the assignment built so far, and fills
    in the roles it can recognise. Later strategies only see what earlier ones
    left unassigned.
    """

    name: str

    def apply(self, files: Sequence[UploadedFile], result: ClassifiedFiles) -> None: ...


# ---------------------------------------------------------------------------
# Tax policies
# ---------------------------------------------------------------------------

@runtime_checkable
class ITaxCalculator(Protocol):
    """Maps a taxable base to the tax owed, in whole currency units."""

    def __call__(self, taxable_income: float) -> int: ...
