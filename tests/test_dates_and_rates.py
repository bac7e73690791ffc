"""
Tests for date utilities and marginal tax rate lookup.
"""

from datetime import date, datetime

import pytest

from contribution_tracker.calculations import (
    SUPPORTED_PROVINCES,
    TAX_BRACKETS,
    calculate_age,
    format_date,
    get_marginal_tax_rate,
    get_tax_brackets,
    is_within_first_contribution_period,
)


class TestFormatDate:
    """Tests for format_date."""

    def test_date_object(self):
        assert format_date(date(2024, 2, 15)) == "2024-02-15"

    def test_datetime_object(self):
        assert format_date(datetime(2024, 12, 31, 23, 59)) == "2024-12-31"

    def test_iso_string(self):
        assert format_date("2024-07-01") == "2024-07-01"

    def test_iso_datetime_string(self):
        assert format_date("2024-07-01T10:30:00") == "2024-07-01"

    def test_utc_z_suffix(self):
        assert format_date("2024-02-15T10:00:00Z") == "2024-02-15"
        assert is_within_first_contribution_period("2024-02-15T10:00:00Z") is True

    @pytest.mark.parametrize("bad", [None, "", "   ", "not a date", "2024-13-45", 20240215])
    def test_invalid_input_returns_empty_string(self, bad):
        assert format_date(bad) == ""


class TestCalculateAge:
    """Tests for calculate_age."""

    def test_before_birthday(self):
        """Test that age is one less before this year's birthday."""
        today = date(2026, 6, 14)
        assert calculate_age("2000-06-15", today=today) == today.year - 2001

    def test_on_birthday(self):
        today = date(2026, 6, 15)
        assert calculate_age("2000-06-15", today=today) == today.year - 2000

    def test_after_birthday(self):
        assert calculate_age(date(2000, 6, 15), today=date(2026, 11, 1)) == 26

    def test_earlier_month_later_day(self):
        assert calculate_age(date(1990, 3, 10), today=date(2024, 2, 28)) == 33

    def test_defaults_to_today(self):
        today = date.today()
        born = date(today.year - 30, 1, 1)
        assert calculate_age(born) == 30

    def test_future_birth_date_floors_at_zero(self):
        assert calculate_age(date(2030, 1, 1), today=date(2026, 1, 1)) == 0

    @pytest.mark.parametrize("bad", [None, "", "yesterday", 1985])
    def test_invalid_input_returns_zero(self, bad):
        assert calculate_age(bad) == 0


class TestFirstContributionPeriod:
    """Tests for is_within_first_contribution_period."""

    def test_february_is_within(self):
        assert is_within_first_contribution_period("2024-02-15") is True

    def test_march_is_not(self):
        assert is_within_first_contribution_period("2024-03-15") is False

    def test_leap_day_is_within(self):
        assert is_within_first_contribution_period(date(2024, 2, 29)) is True

    def test_march_first_is_not(self):
        assert is_within_first_contribution_period(date(2023, 3, 1)) is False

    def test_january_first_is_within(self):
        assert is_within_first_contribution_period(datetime(2025, 1, 1, 9, 0)) is True

    @pytest.mark.parametrize("bad", [None, "", "someday"])
    def test_invalid_input_is_false(self, bad):
        assert is_within_first_contribution_period(bad) is False


class TestMarginalTaxRate:
    """Tests for get_marginal_tax_rate."""

    def test_ontario_second_bracket(self):
        assert get_marginal_tax_rate("Ontario", 60000) == 24.15

    def test_unknown_province_falls_back_to_ontario(self):
        assert get_marginal_tax_rate("Nonexistent", 60000) == get_marginal_tax_rate("Ontario", 60000)

    def test_threshold_is_inclusive(self):
        assert get_marginal_tax_rate("Ontario", 50197) == 24.15
        assert get_marginal_tax_rate("Ontario", 50196.99) == 20.05

    def test_top_bracket(self):
        assert get_marginal_tax_rate("Alberta", 500000) == 47.42

    def test_british_columbia_extra_bracket(self):
        assert get_marginal_tax_rate("British Columbia", 49000) == 22.70

    def test_zero_income_gets_lowest_rate(self):
        assert get_marginal_tax_rate("Alberta", 0) == 25.00

    def test_negative_income_gets_lowest_rate(self):
        """Test the floor case below every threshold."""
        assert get_marginal_tax_rate("Ontario", -100) == 20.05

    def test_non_numeric_income_gets_lowest_rate(self):
        assert get_marginal_tax_rate("Ontario", None) == 20.05

    def test_get_tax_brackets_fallback(self):
        assert get_tax_brackets("Quebec") == TAX_BRACKETS["Ontario"]

    @pytest.mark.parametrize("province", SUPPORTED_PROVINCES)
    def test_thresholds_strictly_increasing_from_zero(self, province):
        thresholds = [b.income_threshold for b in TAX_BRACKETS[province]]
        assert thresholds[0] == 0
        assert all(a < b for a, b in zip(thresholds, thresholds[1:]))
