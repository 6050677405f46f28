"""Consolidate payroll, bonus, dependents and retro workbooks into a PIT report.

Usage:
    python scripts/consolidate_payroll.py "Luong V1 T5.xlsx" thuong.xlsx npt.xlsx --period 2025-05
    python scripts/consolidate_payroll.py --update Bang_luong_2025-05.xlsx thuong_bo_sung.xlsx --title "Thưởng lễ"
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from pitconsol.core.config import AppSettings
from pitconsol.core.exceptions import PitError
from pitconsol.core.log import configure_logging
from pitconsol.models.uploads import UploadedFile
from pitconsol.service import PitService


def load_uploads(paths: Sequence[Path]) -> list[UploadedFile]:
    """Read files from disk as if they had been uploaded."""
    return [UploadedFile(buffer=p.read_bytes(), original_filename=p.name) for p in paths]


def run_consolidate(service: PitService, paths: Sequence[Path], period: str,
                    output_dir: Path) -> Path:
    result = service.process_uploaded_files(load_uploads(paths))
    summary = service.summarize(result)
    report = service.build_report(result, period)
    target = output_dir / report.filename
    target.write_bytes(report.buffer)
    print(f"  Employees: {summary.total_employees} (+{summary.no_contract_employees} without contract)")
    print(f"  Departments: {summary.total_departments}")
    print(f"  Total PIT: {summary.total_tax:,.0f}")
    return target


def run_update(service: PitService, existing: Path, bonus: Path, title: str | None,
               output_dir: Path) -> Path:
    report = service.update_report(
        existing.read_bytes(), bonus.read_bytes(), title, bonus_filename=bonus.name,
    )
    target = output_dir / report.filename
    target.write_bytes(report.buffer)
    return target


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Consolidate payroll workbooks into a PIT report")
    parser.add_argument("files", nargs="+", type=Path, help="Uploaded workbooks (.xlsx)")
    parser.add_argument("--period", default="report", help="Period label used in the output filename")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Where to write the report")
    parser.add_argument("--update", type=Path, default=None,
                        help="Existing report to extend with the single bonus file given")
    parser.add_argument("--title", default=None, help="Column title for the added bonus (with --update)")
    args = parser.parse_args(argv)

    settings = AppSettings()
    configure_logging(settings)
    service = PitService(settings=settings)
    args.output_dir.mkdir(parents=True, exist_ok=True)

    try:
        if args.update is not None:
            if len(args.files) != 1:
                parser.error("--update takes exactly one bonus file")
            print("Updating report...")
            target = run_update(service, args.update, args.files[0], args.title, args.output_dir)
        else:
            print("Consolidating...")
            target = run_consolidate(service, args.files, args.period, args.output_dir)
    except PitError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Done! Wrote {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
