"""
Tests for month utility functions.
"""

from datetime import date

import pytest

from kousu.month_utils import MonthParseError, format_month, parse_month, previous_month


class TestParseMonth:
    """Tests for parse_month function."""

    def test_valid(self):
        """Test parsing a valid month."""
        assert parse_month("2006-01") == (2006, 1)

    def test_december(self):
        """Test parsing the last month."""
        assert parse_month("2020-12") == (2020, 12)

    def test_surrounding_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert parse_month(" 2020-08 ") == (2020, 8)

    def test_empty(self):
        """Test that an empty value raises error."""
        with pytest.raises(MonthParseError, match="cannot be empty"):
            parse_month("")

    @pytest.mark.parametrize('value', ["2020-8", "20-08", "2020/08", "2020-08-01", "august"])
    def test_invalid_format(self, value):
        """Test that other formats raise error."""
        with pytest.raises(MonthParseError, match="Invalid month"):
            parse_month(value)

    @pytest.mark.parametrize('value', ["2020-00", "2020-13"])
    def test_out_of_range(self, value):
        """Test that months outside 01-12 raise error."""
        with pytest.raises(MonthParseError, match="out of range"):
            parse_month(value)

    def test_is_value_error(self):
        """Test that argparse can report the error as a type error."""
        assert issubclass(MonthParseError, ValueError)


class TestPreviousMonth:
    """Tests for previous_month function."""

    def test_mid_year(self):
        """Test a month in the middle of the year."""
        assert previous_month(date(2020, 9, 1)) == (2020, 8)

    def test_january(self):
        """Test that January goes back to December of the previous year."""
        assert previous_month(date(2006, 1, 31)) == (2005, 12)

    def test_defaults_to_today(self):
        """Test that the current date is used by default."""
        year, month = previous_month()

        assert 1 <= month <= 12
        assert year in (date.today().year, date.today().year - 1)


class TestFormatMonth:
    """Tests for format_month function."""

    def test_zero_padded(self):
        """Test that the month is zero-padded."""
        assert format_month(2020, 8) == "2020-08"

    def test_parse_accepts_formatted(self):
        """Test that a formatted month parses back."""
        assert parse_month(format_month(2005, 12)) == (2005, 12)
