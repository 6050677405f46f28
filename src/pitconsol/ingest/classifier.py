"""FileClassifier: assigns payroll / dependents / retro / bonus roles to uploads.

Runs a chain of strategies. The filename strategy places every file; the
structural strategies then look inside the leftover bonus candidates for a
retro sheet or a payroll sheet that was uploaded under an unhelpful name.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from pitconsol.core.config import ClassifierConfig
from pitconsol.core.exceptions import InputError, WorkbookReadError
from pitconsol.core.protocols import IClassificationStrategy
from pitconsol.core.types import RawRow
from pitconsol.ingest.destring import is_number, parses_as_number
from pitconsol.ingest.names import strip_diacritics
from pitconsol.ingest.workbook import cell, is_blank, read_first_sheet
from pitconsol.models.uploads import ClassifiedFiles, FileRole, UploadedFile

logger = logging.getLogger(__name__)

PAYROLL_KEYWORDS = ("luong v1", "lương v1")
DEPENDENTS_KEYWORDS = (
    "npt", "phu_thuoc", "phụ thuộc", "phuthuoc",
    "nguoi_phu_thuoc", "nguoiphuthuoc", "dependents", "dependent",
)
RETRO_KEYWORDS = ("truylinh", "truy linh", "truy_linh")

# Column windows inspected by the structural detectors (0-based).
RETRO_NUMERIC_COLUMNS = (9, 10, 11, 12)  # J..M
PAYROLL_NUMERIC_COLUMNS = (12, 13, 14, 15, 16, 17, 18)  # M..S

_DIGITS = re.compile(r"\d+")


def _fold(text: str) -> str:
    return strip_diacritics(text or "").lower()


def _matches_any(filename: str, keywords: Sequence[str]) -> bool:
    folded = _fold(filename)
    return any(_fold(k) in folded for k in keywords)


def _looks_like_ordinal(value) -> bool:
    if is_number(value):
        return True
    return bool(_DIGITS.fullmatch("" if value is None else str(value)))


def _looks_like_name(value) -> bool:
    return isinstance(value, str) and not is_blank(value)


class FilenameKeywordStrategy:
    """Assigns roles from keywords in the filename; unmatched files become bonus candidates."""

    name = "filename"

    def apply(self, files: Sequence[UploadedFile], result: ClassifiedFiles) -> None:
        for file in files:
            role = self.role_for(file.original_filename)
            displaced = result.assign(file, role, self.name)
            if displaced is not None:
                logger.warning(
                    "Several %s files uploaded; using %r, ignoring %r",
                    role.value.lower(), file.original_filename, displaced.original_filename,
                )
            logger.debug("Classified %r as %s", file.original_filename, role)

    @staticmethod
    def role_for(filename: str) -> FileRole:
        if _matches_any(filename, PAYROLL_KEYWORDS):
            return FileRole.PAYROLL
        if _matches_any(filename, DEPENDENTS_KEYWORDS):
            return FileRole.DEPENDENTS
        if _matches_any(filename, RETRO_KEYWORDS):
            return FileRole.RETRO
        return FileRole.BONUS


class StructuralScoringStrategy:
    """Recognises a role by the shape of the first sheet of a bonus candidate.

    A row scores when column A holds an ordinal, column B a name, and enough of
    ``numeric_columns`` parse as numbers. The first candidate reaching
    ``min_score`` within rows ``[start_row, end_row)`` takes the role.
    """

    def __init__(
        self,
        role: FileRole,
        *,
        start_row: int,
        end_row: int,
        numeric_columns: Sequence[int],
        min_numeric_cells: int,
        min_score: int,
    ) -> None:
        self.role = role
        self.name = f"structure:{role.value.lower()}"
        self._start_row = start_row
        self._end_row = end_row
        self._numeric_columns = tuple(numeric_columns)
        self._min_numeric_cells = min_numeric_cells
        self._min_score = min_score

    def apply(self, files: Sequence[UploadedFile], result: ClassifiedFiles) -> None:
        if getattr(result, self.role.value.lower()) is not None:
            return
        for candidate in list(result.bonuses):
            if self.matches(candidate.buffer):
                logger.info("Content-based %s detected: %s", self.role.value.lower(),
                            candidate.original_filename)
                result.assign(candidate, self.role, self.name)
                return

    def matches(self, buffer: bytes) -> bool:
        try:
            rows = read_first_sheet(buffer)
        except WorkbookReadError:
            return False
        return self.score(rows) >= self._min_score

    def score(self, rows: Sequence[RawRow]) -> int:
        return sum(
            1 for row in rows[self._start_row:self._end_row] if self._row_matches(row)
        )

    def _row_matches(self, row: RawRow) -> bool:
        numeric = sum(1 for i in self._numeric_columns if parses_as_number(cell(row, i)))
        return (
            _looks_like_ordinal(cell(row, 0))
            and _looks_like_name(cell(row, 1))
            and numeric >= self._min_numeric_cells
        )


def default_strategies(config: ClassifierConfig | None = None) -> list[IClassificationStrategy]:
    """Filename keywords, then retro and payroll structure detection."""
    if config is None:
        config = ClassifierConfig()
    return [
        FilenameKeywordStrategy(),
        StructuralScoringStrategy(
            FileRole.RETRO,
            start_row=config.retro_start_row,
            end_row=config.retro_end_row,
            numeric_columns=RETRO_NUMERIC_COLUMNS,
            min_numeric_cells=config.min_numeric_cells,
            min_score=config.retro_min_score,
        ),
        StructuralScoringStrategy(
            FileRole.PAYROLL,
            start_row=config.payroll_start_row,
            end_row=config.payroll_end_row,
            numeric_columns=PAYROLL_NUMERIC_COLUMNS,
            min_numeric_cells=config.min_numeric_cells,
            min_score=config.payroll_min_score,
        ),
    ]


class FileClassifier:
    """Runs the strategy chain and enforces the mandatory payroll file."""

    def __init__(self, strategies: Sequence[IClassificationStrategy] | None = None,
                 *, config: ClassifierConfig | None = None) -> None:
        self._strategies = list(strategies) if strategies is not None else default_strategies(config)

    def classify(self, files: Sequence[UploadedFile]) -> ClassifiedFiles:
        result = ClassifiedFiles()
        for strategy in self._strategies:
            strategy.apply(files, result)
        logger.info(
            "Classified: payroll=%s, dependents=%s, retro=%s, bonus=%d files",
            result.payroll.original_filename if result.payroll else None,
            result.dependents.original_filename if result.dependents else None,
            result.retro.original_filename if result.retro else None,
            len(result.bonuses),
        )
        if result.payroll is None:
            raise InputError(
                "A payroll file is required (its filename must contain 'luong v1')."
            )
        return result


def guess_file_type(filename: str) -> str:
    """Coarse tag recorded against each upload: salary, bonus or dependent."""
    name = (filename or "").lower()
    if "luong v1" in name or "salary" in name:
        return "salary"
    if "thuong" in name or "bonus" in name:
        return "bonus"
    if "phuthuoc" in name or "dependent" in name:
        return "dependent"
    return "salary"
