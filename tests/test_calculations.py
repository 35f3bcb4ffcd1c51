#!/usr/bin/env python3
"""Tests for calculation helper functions."""
import pytest

from console_maint import InvalidDateFormat, calc_next_due, check_interval


class TestCalcNextDue:
    """Tests for calc_next_due helper function."""

    def test_adds_calendar_months(self):
        """last_date + interval_months."""
        assert calc_next_due("01/01/2024", 6) == "01/07/2024"

    def test_leap_year_clamp(self):
        """31 Jan + 1 month clamps to the last day of February."""
        assert calc_next_due("31/01/2024", 1) == "29/02/2024"
        assert calc_next_due("31/01/2023", 1) == "28/02/2023"

    def test_clamps_into_thirty_day_month(self):
        assert calc_next_due("31/03/2024", 1) == "30/04/2024"

    def test_rolls_over_year(self):
        assert calc_next_due("15/11/2024", 3) == "15/02/2025"

    def test_iso_input_returns_regional(self):
        assert calc_next_due("2024-01-15", 2) == "15/03/2024"

    def test_missing_inputs(self):
        """None when no history or no interval."""
        assert calc_next_due(None, 6) is None
        assert calc_next_due("", 6) is None
        assert calc_next_due("01/01/2024", None) is None
        assert calc_next_due(None, None) is None

    def test_malformed_date_raises(self):
        with pytest.raises(InvalidDateFormat):
            calc_next_due("2024/13/45", 6)

    def test_missing_interval_does_not_validate_date(self):
        assert calc_next_due("garbage", None) is None

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            calc_next_due("01/01/2024", -2)
        with pytest.raises(ValueError):
            calc_next_due("01/01/2024", 1.5)
        with pytest.raises(ValueError):
            calc_next_due("01/01/2024", 0)

    def test_invalid_interval_without_last_date(self):
        """The interval is checked even when there is nothing to add it to."""
        with pytest.raises(ValueError):
            calc_next_due(None, -3)
        with pytest.raises(ValueError):
            calc_next_due("", 0)


class TestCheckInterval:
    """Tests for check_interval."""

    def test_none_means_no_schedule(self):
        assert check_interval(None) is None

    def test_whole_months(self):
        assert check_interval(6) == 6
        assert check_interval(3.0) == 3

    @pytest.mark.parametrize("bad", [0, -1, 2.5, True, "6"])
    def test_rejects(self, bad):
        with pytest.raises(ValueError):
            check_interval(bad)
