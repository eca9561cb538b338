"""
tests/test_normalizer.py

Pytest unit tests for spreadsheet cell normalization.

All tests are pure Python, no database, no I/O.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from app.sheets.normalizer import (
    InvalidDateError,
    InvalidNumberError,
    MissingRequiredFieldError,
    NotAnIntegerError,
    is_blank,
    normalize_date,
    normalize_decimal,
    normalize_integer,
    normalize_number,
    serial_to_date,
)


class TestNormalizeDate:
    def test_serial_maps_to_fixed_iso_date(self) -> None:
        assert normalize_date(45000) == "2023-03-15"

    def test_iso_output_is_idempotent(self) -> None:
        once = normalize_date(45000)
        assert normalize_date(once) == once

    def test_time_fraction_is_dropped(self) -> None:
        assert normalize_date(45000.75) == "2023-03-15"

    def test_numeric_string_is_a_serial(self) -> None:
        assert normalize_date("45000") == "2023-03-15"

    def test_iso_string_is_trimmed(self) -> None:
        assert normalize_date("  2024-02-29 ") == "2024-02-29"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("03/15/2023", "2023-03-15"),
            ("2023/03/15", "2023-03-15"),
            ("15 Mar 2023", "2023-03-15"),
            ("March 15, 2023", "2023-03-15"),
            ("2023-03-15T10:30:00Z", "2023-03-15"),
        ],
    )
    def test_common_text_layouts(self, raw: str, expected: str) -> None:
        assert normalize_date(raw) == expected

    def test_date_and_datetime_objects(self) -> None:
        assert normalize_date(date(2025, 1, 2)) == "2025-01-02"
        assert normalize_date(datetime(2025, 1, 2, 23, 59)) == "2025-01-02"

    def test_impossible_calendar_date_is_rejected(self) -> None:
        with pytest.raises(InvalidDateError):
            normalize_date("2026-02-30", "order_date")

    @pytest.mark.parametrize("raw", ["", "   ", None, 0, -3, True, "next tuesday"])
    def test_invalid_values(self, raw: object) -> None:
        with pytest.raises(InvalidDateError) as ctx:
            normalize_date(raw, "arrival_date")
        assert ctx.value.field_name == "arrival_date"

    def test_serial_epoch(self) -> None:
        assert serial_to_date(1) == date(1899, 12, 31)


class TestNormalizeNumber:
    def test_plain_numbers_pass_through(self) -> None:
        assert normalize_number(12, "quantity") == 12.0
        assert normalize_number(2.5, "unit_price") == 2.5

    def test_thousands_separators_are_stripped(self) -> None:
        assert normalize_number("1,250.50", "unit_price") == 1250.5

    def test_blank_is_missing(self) -> None:
        with pytest.raises(MissingRequiredFieldError) as ctx:
            normalize_number("  ", "unit_price")
        assert ctx.value.field_name == "unit_price"

    @pytest.mark.parametrize("raw", ["abc", "nan", "1.2.3", float("inf"), False])
    def test_non_numbers_are_rejected(self, raw: object) -> None:
        with pytest.raises(InvalidNumberError):
            normalize_number(raw, "unit_price")


class TestNormalizeDecimal:
    def test_rounds_to_four_places(self) -> None:
        assert normalize_decimal(10 / 3, "unit_price") == Decimal("3.3333")
        assert normalize_decimal("2.5", "unit_price") == Decimal("2.5000")

    def test_half_rounds_away_from_zero(self) -> None:
        assert normalize_decimal(0.00005, "unit_price") == Decimal("0.0001")

    def test_blank_is_missing(self) -> None:
        with pytest.raises(MissingRequiredFieldError):
            normalize_decimal("", "unit_price")


class TestNormalizeInteger:
    def test_whole_float_becomes_int(self) -> None:
        value = normalize_integer(100.0, "quantity")
        assert value == 100
        assert isinstance(value, int)

    def test_fraction_is_rejected(self) -> None:
        with pytest.raises(NotAnIntegerError) as ctx:
            normalize_integer("12.5", "quantity")
        assert ctx.value.value == "12.5"


class TestIsBlank:
    def test_blank_values(self) -> None:
        assert is_blank(None)
        assert is_blank("")
        assert is_blank(" \t")

    def test_zero_is_not_blank(self) -> None:
        assert not is_blank(0)
        assert not is_blank("0")
