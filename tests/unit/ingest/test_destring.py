"""Tests for cell-to-number coercion and rounding."""

from __future__ import annotations

import math

import pytest

from pitconsol.ingest.destring import is_number, parses_as_number, round_half_up, to_int, to_number


class TestToNumber:
    @pytest.mark.parametrize("value, expected", [
        (1500, 1500.0),
        (12.5, 12.5),
        ("1,234,567", 1_234_567.0),
        (" 2 000 000 ", 2_000_000.0),
        ("15abc", 15.0),
        ("-3.5", -3.5),
    ])
    def test_parses(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", True, math.nan])
    def test_garbage_is_zero(self, value):
        assert to_number(value) == 0.0


class TestPredicates:
    def test_bool_is_not_a_number(self):
        assert is_number(1)
        assert not is_number(True)

    def test_parses_as_number(self):
        assert parses_as_number("1,000")
        assert parses_as_number(0)
        assert not parses_as_number(None)
        assert not parses_as_number("Nguyễn")
        assert not parses_as_number(math.nan)


class TestIntegers:
    def test_to_int_truncates(self):
        assert to_int("2") == 2
        assert to_int(2.9) == 2
        assert to_int(None) == 0

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2
        assert round_half_up(-2.5) == -2
