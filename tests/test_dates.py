#!/usr/bin/env python3
"""Tests for date parsing and formatting."""
import pytest
from datetime import date, datetime

from console_maint import (
    InvalidDateFormat,
    days_remaining,
    format_date,
    parse_date,
    start_of_day,
)


class TestParseDate:
    """Tests for parse_date."""

    def test_regional_normalized_to_noon(self):
        assert parse_date("15/06/2024") == datetime(2024, 6, 15, 12, 0)

    def test_regional_without_zero_padding(self):
        assert parse_date("5/3/2024") == datetime(2024, 3, 5, 12, 0)

    def test_iso_date(self):
        assert parse_date("2024-06-15") == datetime(2024, 6, 15)

    def test_iso_datetime(self):
        assert parse_date("2024-06-15T08:30:00") == datetime(2024, 6, 15, 8, 30)

    def test_iso_with_offset_becomes_naive(self):
        result = parse_date("2024-06-15T12:00:00+00:00")
        assert result.tzinfo is None

    @pytest.mark.parametrize(
        "text",
        ["32/01/2024", "15/13/2024", "00/06/2024", "15/06/1899", "31/02/2024"],
    )
    def test_regional_out_of_range(self, text):
        with pytest.raises(InvalidDateFormat):
            parse_date(text)

    @pytest.mark.parametrize("text", ["hello", "", "yesterday"])
    def test_unparseable(self, text):
        with pytest.raises(InvalidDateFormat):
            parse_date(text)

    def test_non_string(self):
        with pytest.raises(InvalidDateFormat):
            parse_date(None)

    def test_invalid_date_format_is_value_error(self):
        """Callers catching ValueError also see malformed dates."""
        with pytest.raises(ValueError):
            parse_date("hello")


class TestFormatDate:
    """Tests for format_date."""

    def test_zero_padded(self):
        assert format_date(datetime(2024, 3, 5, 18, 45)) == "05/03/2024"

    def test_accepts_date(self):
        assert format_date(date(2023, 12, 31)) == "31/12/2023"

    @pytest.mark.parametrize(
        "text", ["01/01/2024", "29/02/2024", "31/12/1999", "7/7/2030", "2024-10-01"]
    )
    def test_round_trip_same_calendar_day(self, text):
        parsed = parse_date(text)
        assert parse_date(format_date(parsed)).date() == parsed.date()


class TestDaysRemaining:
    """Tests for day-truncated differences."""

    def test_start_of_day(self):
        assert start_of_day(datetime(2024, 6, 15, 17, 3, 9)) == datetime(2024, 6, 15)

    def test_due_today_is_zero(self):
        due = parse_date("15/06/2024")
        assert days_remaining(due, datetime(2024, 6, 15, 23, 59)) == 0
        assert days_remaining(due, datetime(2024, 6, 15, 0, 0)) == 0

    def test_one_day_later_is_minus_one(self):
        due = parse_date("15/06/2024")
        assert days_remaining(due, datetime(2024, 6, 16, 0, 1)) == -1

    def test_tomorrow_is_one_even_late_at_night(self):
        due = datetime(2024, 6, 16, 0, 1)
        assert days_remaining(due, datetime(2024, 6, 15, 23, 59)) == 1

    def test_across_month_boundary(self):
        assert days_remaining(parse_date("01/07/2024"), parse_date("15/06/2024")) == 16
