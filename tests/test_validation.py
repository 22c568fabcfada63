"""Tests for energy_balance.validation module."""

from datetime import date, datetime

import pytest

from energy_balance.validation import (
    ValidationError,
    as_date,
    validate_consumption,
    validate_date_range,
    validate_day_of_week,
    validate_hour,
    validate_insolation,
    validate_pv_power,
    validate_system_losses,
)


class TestRangeValidators:
    @pytest.mark.parametrize("func, good, bad", [
        (validate_day_of_week, [0, 6], [-1, 7, 2.0, "3", False]),
        (validate_hour, [0, 23], [-1, 24, 1.0, None, True]),
        (validate_pv_power, [0.1, 100], [0, -2, 100.01, "5", float("nan")]),
        (validate_insolation, [0, 55.5, 100], [-1, 100.5, None]),
        (validate_consumption, [0, 100], [-0.01, 100.01, float("nan")]),
        (validate_system_losses, [1, 85, 100], [0.85, 0, 101]),
    ])
    def test_bounds(self, func, good, bad):
        for value in good:
            func(value)
        for value in bad:
            with pytest.raises(ValidationError):
                func(value)

    def test_error_is_value_error_with_field(self):
        with pytest.raises(ValueError) as exc:
            validate_hour(30)
        assert exc.value.field == "hour"
        assert "30" in str(exc.value)


class TestDates:
    def test_as_date_variants(self):
        assert as_date(date(2024, 2, 29)) == date(2024, 2, 29)
        assert as_date(datetime(2024, 2, 29, 23, 59)) == date(2024, 2, 29)
        assert as_date("2024-02-29") == date(2024, 2, 29)
        assert as_date("2024-02-29T10:00:00Z") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2024-02-30", "29.02.2024", None, 20240229])
    def test_as_date_invalid(self, value):
        with pytest.raises(ValidationError):
            as_date(value)

    def test_range_same_day(self):
        assert validate_date_range("2024-01-01", "2024-01-01") == (
            date(2024, 1, 1), date(2024, 1, 1))

    def test_range_inverted(self):
        with pytest.raises(ValidationError):
            validate_date_range(date(2024, 1, 2), date(2024, 1, 1))

    def test_range_max_days_inclusive(self):
        validate_date_range(date(2024, 1, 1), date(2024, 1, 31), max_days=31)
        with pytest.raises(ValidationError):
            validate_date_range(date(2024, 1, 1), date(2024, 2, 1), max_days=31)
