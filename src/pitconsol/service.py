"""PitService: the core's single entry point for callers.

Wires classifier, parsers, consolidator and writer together with settings
injected at construction time. Callers hand in in-memory uploads and get back a
structured result or a finished workbook; storage and transport stay outside.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from pitconsol.core.config import AppSettings
from pitconsol.core.exceptions import InputError, PitError
from pitconsol.engine.consolidator import PayrollConsolidator
from pitconsol.engine.update import ReportUpdater
from pitconsol.export.report_writer import build_spreadsheet
from pitconsol.ingest.classifier import FileClassifier
from pitconsol.ingest.parsers import (
    parse_bonus_sources,
    parse_dependents_file,
    parse_optional,
    parse_retro_file,
)
from pitconsol.models.outputs import ConsolidationResult, PreviewSummary, ProcessingTrace, ReportFile
from pitconsol.models.report import LABEL_GRAND_TOTAL, DepartmentSubtotal, report_columns
from pitconsol.models.uploads import UploadedFile

logger = logging.getLogger(__name__)


class PitService:
    """Consolidation, preview and report-update flows."""

    def __init__(self, *, settings: AppSettings | None = None,
                 classifier: FileClassifier | None = None) -> None:
        self._settings = settings or AppSettings()
        self._classifier = classifier or FileClassifier(config=self._settings.classifier)

    def process_uploaded_files(self, files: Sequence[UploadedFile]) -> ConsolidationResult:
        """Classify, parse and consolidate one set of uploads."""
        if not files:
            raise InputError("Upload at least one file.")
        trace = ProcessingTrace()
        classified = self._classifier.classify(files)
        trace.decisions = list(classified.decisions)
        try:
            dependents = parse_optional(classified.dependents, parse_dependents_file, {}, trace)
            retro = parse_optional(classified.retro, parse_retro_file, {}, trace)
            bonuses = parse_bonus_sources(classified.bonuses, trace)
            consolidator = PayrollConsolidator(tax_config=self._settings.tax, trace=trace)
            return consolidator.consolidate(classified.payroll, bonuses, dependents, retro)
        except PitError:
            raise
        except Exception as exc:
            raise PitError(f"Payroll consolidation failed: {exc}") from exc

    def render(self, result: ConsolidationResult) -> bytes:
        report = self._settings.report
        return build_spreadsheet(result.rows, result.bonus_titles,
                                 sheet_name=report.sheet_name, number_format=report.number_format)

    def build_report(self, result: ConsolidationResult, period: str) -> ReportFile:
        """Render an already consolidated result as ``Bang_luong_{period}.xlsx``."""
        filename = self._settings.report.filename_template.format(period=period)
        logger.info("Generated report %s (%d rows)", filename, len(result.rows))
        return ReportFile(buffer=self.render(result), filename=filename)

    def generate_report(self, files: Sequence[UploadedFile], period: str) -> ReportFile:
        """Consolidate and render in one call."""
        return self.build_report(self.process_uploaded_files(files), period)

    def preview(self, files: Sequence[UploadedFile]) -> PreviewSummary:
        """Headline figures for the uploads without rendering a workbook."""
        return self.summarize(self.process_uploaded_files(files))

    def summarize(self, result: ConsolidationResult) -> PreviewSummary:
        employees = result.employees
        grand_total = result.total(LABEL_GRAND_TOTAL)
        return PreviewSummary(
            total_rows=len(result.rows),
            total_employees=sum(1 for e in employees if e.contracted),
            no_contract_employees=sum(1 for e in employees if not e.contracted),
            total_departments=sum(isinstance(r, DepartmentSubtotal) for r in result.rows),
            total_tax=grand_total.tax if grand_total else 0,
            total_salary=grand_total.base_salary if grand_total else 0,
            total_income=grand_total.total_taxable_income if grand_total else 0,
            columns=report_columns(result.bonus_titles),
        )

    def update_report(self, existing_report: bytes, new_bonus: bytes,
                      title: Optional[str] = None, *, bonus_filename: str = "") -> ReportFile:
        """Add one bonus column to an existing report and recompute it."""
        report = self._settings.report
        column = title.strip() if title and title.strip() else report.default_update_title
        updater = ReportUpdater(tax_config=self._settings.tax)
        result = updater.update(existing_report, new_bonus, column, bonus_filename=bonus_filename)
        return ReportFile(buffer=self.render(result), filename=report.update_filename)
