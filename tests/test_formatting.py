"""
Tests for the formatting utilities

Tests covering:
1. Locale-aware numbers, currency and percentages
2. Date parsing and formatting with missing/invalid input
3. Text sanitising, truncation and status labels
"""

import pytest
from datetime import date, datetime

from core.models import ProjectStatus
from utils.formatting import (
    MISSING,
    NBSP,
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
    format_quantity,
    get_locale,
    parse_date,
    sanitize_text,
    title_case_status,
    to_number,
    truncate_text,
)


class TestNumbers:
    """Number coercion and grouping."""

    def test_to_number_accepts_numeric_strings(self):
        assert to_number("12.5") == 12.5
        assert to_number(" 40 ") == 40.0

    @pytest.mark.parametrize("value", [None, "abc", True, float("nan"), float("inf"), [1]])
    def test_to_number_falls_back_to_zero(self, value):
        assert to_number(value) == 0.0

    def test_to_number_custom_default(self):
        assert to_number("n/a", default=-1) == -1

    def test_format_number_en_us(self):
        assert format_number(1234567.891, 2, "en-US") == "1,234,567.89"

    def test_format_number_de_de(self):
        assert format_number(1234567.891, 2, "de-DE") == "1.234.567,89"

    def test_format_number_fr_fr_uses_no_break_space(self):
        assert format_number(1234567, 0, "fr-FR") == f"1{NBSP}234{NBSP}567"

    def test_format_number_never_shows_negative_zero(self):
        assert format_number(-0.001, 2, "en-US") == "0.00"

    def test_unknown_locale_falls_back_to_en_us(self):
        assert get_locale("xx-YY") == get_locale("en-US")
        assert format_number(1000, 0, "xx-YY") == "1,000"

    def test_language_only_tag_matches_region(self):
        assert get_locale("fr") == get_locale("fr-FR")
        assert get_locale("de_DE") == get_locale("de-DE")


class TestCurrency:
    """Currency formatting."""

    def test_unknown_currency_rendered_with_code(self):
        assert format_currency(1234, "MRU", "fr-FR") == f"1{NBSP}234,00{NBSP}MRU"

    def test_symbol_first_locale(self):
        assert format_currency(1234.5, "USD", "en-US") == "$1,234.50"

    def test_symbol_last_locale(self):
        assert format_currency(1234.5, "EUR", "fr-FR") == f"1{NBSP}234,50{NBSP}€"

    def test_negative_amount_keeps_sign_before_symbol(self):
        assert format_currency(-5.5, "USD", "en-US") == "-$5.50"

    def test_rounding_to_zero_drops_sign(self):
        assert format_currency(-0.001, "USD", "en-US") == "$0.00"

    def test_malformed_amount_is_zero(self):
        assert format_currency("oops", "GBP", "en-GB") == "£0.00"


class TestPercentAndQuantity:
    """Percentages and material quantities."""

    def test_percent_en(self):
        assert format_percent(12.34, 1, "en-US") == "12.3%"

    def test_percent_fr_has_space_before_sign(self):
        assert format_percent(12.34, 1, "fr-FR") == f"12,3{NBSP}%"

    def test_whole_quantity_has_no_decimals(self):
        assert format_quantity(12, "ton", "en-US") == "12 ton"

    def test_fractional_quantity(self):
        assert format_quantity(4.5, "ton", "fr-FR") == "4,50 ton"

    def test_quantity_without_unit(self):
        assert format_quantity(3, "", "en-US") == "3"


class TestDates:
    """Date parsing and formatting."""

    def test_parse_date_variants(self):
        assert parse_date(date(2024, 3, 1)) == datetime(2024, 3, 1)
        assert parse_date("2024-03-01") == datetime(2024, 3, 1)
        assert parse_date("2024-03-01T10:00:00Z").tzinfo is not None
        assert parse_date("") is None
        assert parse_date("soon") is None

    def test_format_date_by_locale(self):
        assert format_date(date(2024, 3, 1), "fr-FR") == "01/03/2024"
        assert format_date(date(2024, 3, 1), "en-US") == "03/01/2024"
        assert format_date(date(2024, 3, 1), "de-DE") == "01.03.2024"

    def test_format_date_iso_string(self):
        assert format_date("2024-03-01T10:00:00Z", "en-US") == "03/01/2024"

    def test_missing_date_is_dash(self):
        assert format_date(None) == MISSING
        assert format_datetime("") == MISSING

    def test_unparsable_date_returned_as_is(self):
        assert format_date("next spring") == "next spring"

    def test_format_datetime(self):
        assert format_datetime(datetime(2024, 6, 3, 16, 45), "fr-FR") == "03/06/2024 16:45"


class TestText:
    """Text helpers."""

    def test_sanitize_strips_control_and_collapses_whitespace(self):
        assert sanitize_text("  a\x00b \n\t c ") == "ab c"

    def test_sanitize_none(self):
        assert sanitize_text(None) == ""

    def test_truncate(self):
        assert truncate_text("abcdef", 4) == "abc…"
        assert truncate_text("abc", 4) == "abc"
        assert truncate_text("abc", 0) == ""

    def test_title_case_status(self):
        assert title_case_status("in-progress") == "In Progress"
        assert title_case_status(ProjectStatus.ON_HOLD) == "On Hold"
        assert title_case_status("") == MISSING
