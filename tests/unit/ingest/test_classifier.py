"""Tests for upload role classification."""

from __future__ import annotations

import pytest

from pitconsol.core.exceptions import InputError
from pitconsol.core.protocols import IClassificationStrategy
from pitconsol.ingest.classifier import (
    FileClassifier,
    FilenameKeywordStrategy,
    StructuralScoringStrategy,
    default_strategies,
    guess_file_type,
)
from pitconsol.ingest.workbook import read_first_sheet
from pitconsol.models.uploads import FileRole
from tests.fakes import (
    employee,
    make_name_value_sheet,
    make_payroll,
    make_retro,
    retro_row,
    upload,
)


def _payroll_buffer(count: int = 5) -> bytes:
    return make_payroll([
        employee(i, f"Nhân viên {i}", salary=(10_000_000, 500_000, 0), insurance=(800_000, 150_000, 100_000))
        for i in range(1, count + 1)
    ])


def _retro_buffer() -> bytes:
    return make_retro([
        retro_row(1, "Nguyễn Văn A", 2_000_000, (160_000, 30_000, 20_000)),
        retro_row(2, "Trần Thị B", 1_000_000, (80_000, 15_000, 10_000)),
    ])


def _bonus_buffer() -> bytes:
    return make_name_value_sheet([("Nguyễn Văn A", 1_000_000)])


class TestFilenameKeywordStrategy:
    @pytest.mark.parametrize("filename, role", [
        ("Luong V1 T5.xlsx", FileRole.PAYROLL),
        ("Bảng Lương V1 tháng 5.xlsx", FileRole.PAYROLL),
        ("NPT.xlsx", FileRole.DEPENDENTS),
        ("nguoi_phu_thuoc_2025.xlsx", FileRole.DEPENDENTS),
        ("Người phụ thuộc.xlsx", FileRole.DEPENDENTS),
        ("truy_linh_T4.xlsx", FileRole.RETRO),
        ("Truy lĩnh.xlsx", FileRole.RETRO),
        ("thuong_tet.xlsx", FileRole.BONUS),
    ])
    def test_role_for(self, filename, role):
        assert FilenameKeywordStrategy.role_for(filename) is role

    def test_satisfies_protocol(self):
        assert isinstance(FilenameKeywordStrategy(), IClassificationStrategy)
        for strategy in default_strategies():
            assert isinstance(strategy, IClassificationStrategy)


class TestStructuralScoring:
    def test_payroll_sheet_scores_one_per_employee_row(self):
        strategy = default_strategies()[2]
        assert isinstance(strategy, StructuralScoringStrategy)
        assert strategy.score(read_first_sheet(_payroll_buffer(7))) == 7

    def test_too_few_rows_do_not_match(self):
        strategy = default_strategies()[2]
        assert not strategy.matches(_payroll_buffer(4))

    def test_unreadable_buffer_does_not_match(self):
        strategy = default_strategies()[1]
        assert not strategy.matches(b"not a workbook")

    def test_retro_sheet_is_not_payroll(self):
        retro_strategy, payroll_strategy = default_strategies()[1:]
        assert retro_strategy.matches(_retro_buffer())
        assert not payroll_strategy.matches(_retro_buffer())


class TestFileClassifier:
    def test_classifies_by_filename(self):
        files = [
            upload("Luong V1 T5.xlsx", _payroll_buffer()),
            upload("NPT.xlsx", make_name_value_sheet([("Nguyễn Văn A", 1)])),
            upload("truy linh.xlsx", _retro_buffer()),
            upload("thuong.xlsx", _bonus_buffer()),
        ]
        result = FileClassifier().classify(files)
        assert result.payroll.original_filename == "Luong V1 T5.xlsx"
        assert result.dependents.original_filename == "NPT.xlsx"
        assert result.retro.original_filename == "truy linh.xlsx"
        assert [f.original_filename for f in result.bonuses] == ["thuong.xlsx"]
        assert all(d.strategy == "filename" for d in result.decisions)

    def test_detects_payroll_and_retro_by_content(self):
        files = [
            upload("bang_tinh.xlsx", _payroll_buffer()),
            upload("data.xlsx", _retro_buffer()),
            upload("thuong.xlsx", _bonus_buffer()),
        ]
        result = FileClassifier().classify(files)
        assert result.payroll.original_filename == "bang_tinh.xlsx"
        assert result.retro.original_filename == "data.xlsx"
        assert [f.original_filename for f in result.bonuses] == ["thuong.xlsx"]
        strategies = {d.filename: d.strategy for d in result.decisions if d.role is not FileRole.BONUS}
        assert strategies == {"bang_tinh.xlsx": "structure:payroll", "data.xlsx": "structure:retro"}

    def test_named_retro_is_not_replaced_by_content(self):
        files = [
            upload("Luong V1.xlsx", _payroll_buffer()),
            upload("truy linh.xlsx", _retro_buffer()),
            upload("khac.xlsx", _retro_buffer()),
        ]
        result = FileClassifier().classify(files)
        assert result.retro.original_filename == "truy linh.xlsx"
        assert [f.original_filename for f in result.bonuses] == ["khac.xlsx"]

    def test_later_payroll_upload_wins(self):
        files = [
            upload("Luong V1 cu.xlsx", _payroll_buffer()),
            upload("Luong V1 moi.xlsx", _payroll_buffer()),
        ]
        result = FileClassifier().classify(files)
        assert result.payroll.original_filename == "Luong V1 moi.xlsx"
        assert result.bonuses == []

    def test_missing_payroll_raises(self):
        with pytest.raises(InputError, match="payroll"):
            FileClassifier().classify([upload("thuong.xlsx", _bonus_buffer())])

    def test_custom_strategy_chain(self):
        classifier = FileClassifier(strategies=[FilenameKeywordStrategy()])
        with pytest.raises(InputError):
            classifier.classify([upload("bang_tinh.xlsx", _payroll_buffer())])


@pytest.mark.parametrize("filename, tag", [
    ("Luong V1 T5.xlsx", "salary"),
    ("salary.xlsx", "salary"),
    ("thuong_tet.xlsx", "bonus"),
    ("Bonus Q1.xlsx", "bonus"),
    ("nguoiphuthuoc.xlsx", "dependent"),
    ("dependents.xlsx", "dependent"),
    ("other.xlsx", "salary"),
])
def test_guess_file_type(filename, tag):
    assert guess_file_type(filename) == tag
