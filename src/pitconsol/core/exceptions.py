"""PIT consolidator exception hierarchy."""

from __future__ import annotations


class PitError(Exception):
    """Base exception for all consolidator errors."""


class InputError(PitError):
    """The uploaded file set cannot be processed (e.g. no payroll file)."""


class PayrollReadError(PitError):
    """The mandatory payroll workbook could not be read."""

    def __init__(self, filename: str, message: str) -> None:
        self.filename = filename
        super().__init__(f"Cannot read payroll file {filename!r}: {message}")


class ReportReadError(PitError):
    """An existing consolidated report could not be read back."""


class SourceParseError(PitError):
    """A side-source workbook (bonus, dependents, retro) is malformed.

    Raised inside the parsers only; callers receive an empty source instead.
    """

    def __init__(self, role: str, filename: str, message: str) -> None:
        self.role = role
        self.filename = filename
        super().__init__(f"{role} file {filename!r} could not be parsed: {message}")


class WorkbookReadError(PitError):
    """A buffer is not a readable .xlsx workbook."""
