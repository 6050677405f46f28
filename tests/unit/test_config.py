"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from pitconsol.core.config import AppSettings, ClassifierConfig, ReportConfig, TaxConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.log_level == "INFO"
    assert settings.tax.personal_deduction == 11_000_000


def test_tax_config_defaults():
    config = TaxConfig()
    assert config.dependent_deduction == 4_400_000
    assert config.flat_rate == 0.10


def test_tax_config_env_override(monkeypatch):
    monkeypatch.setenv("PIT_TAX_PERSONAL_DEDUCTION", "15500000")
    monkeypatch.setenv("PIT_TAX_DEPENDENT_DEDUCTION", "6200000")
    config = TaxConfig()
    assert config.personal_deduction == 15_500_000
    assert config.dependent_deduction == 6_200_000


def test_classifier_config_defaults():
    config = ClassifierConfig()
    assert (config.retro_start_row, config.retro_end_row, config.retro_min_score) == (11, 18, 2)
    assert (config.payroll_start_row, config.payroll_end_row, config.payroll_min_score) == (6, 30, 5)
    assert config.min_numeric_cells == 2


def test_report_config_defaults():
    config = ReportConfig()
    assert config.filename_template.format(period="2025-05") == "Bang_luong_2025-05.xlsx"
    assert config.update_filename == "Bang_luong_cap_nhat.xlsx"
    assert config.default_update_title == "Thưởng bổ sung"
