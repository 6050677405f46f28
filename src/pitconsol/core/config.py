"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class TaxConfig(BaseSettings):
    """Statutory deduction allowances and the flat rate for no-contract income."""

    model_config = {"env_prefix": "PIT_TAX_"}

    personal_deduction: float = 11_000_000
    dependent_deduction: float = 4_400_000
    flat_rate: float = 0.10


class ClassifierConfig(BaseSettings):
    """Structural scoring windows and thresholds.

    Empirical values taken from the exports seen in production; tune them when a
    new export layout shows up rather than treating them as invariants.
    """

    model_config = {"env_prefix": "PIT_CLASSIFIER_"}

    retro_start_row: int = 11
    retro_end_row: int = 18
    retro_min_score: int = 2
    payroll_start_row: int = 6
    payroll_end_row: int = 30
    payroll_min_score: int = 5
    min_numeric_cells: int = 2


class ReportConfig(BaseSettings):
    """Output workbook naming and formatting."""

    model_config = {"env_prefix": "PIT_REPORT_"}

    sheet_name: str = "Kết quả tính thuế"
    filename_template: str = "Bang_luong_{period}.xlsx"
    update_filename: str = "Bang_luong_cap_nhat.xlsx"
    default_update_title: str = "Thưởng bổ sung"
    number_format: str = "#,##0"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PIT_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    tax: TaxConfig = TaxConfig()
    classifier: ClassifierConfig = ClassifierConfig()
    report: ReportConfig = ReportConfig()
