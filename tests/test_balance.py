"""Tests for energy_balance.balance module."""

import pytest

from energy_balance.balance import (
    autarky_rate,
    calculate_balance,
    classify_balance,
    self_consumed,
    self_consumption_rate,
)


class TestCalculateBalance:
    def test_import(self):
        assert calculate_balance(3, 5) == -2

    def test_export(self):
        assert calculate_balance(5, 3) == 2

    @pytest.mark.parametrize("x", [0.0, 0.125, 1.7, 42.0, 99.999])
    def test_equal_is_zero(self, x):
        assert calculate_balance(x, x) == 0


class TestClassifyBalance:
    def test_export(self):
        state = classify_balance(6, 3)
        assert state.kind == "export"
        assert state.balance_kwh == 3
        assert state.percentage == pytest.approx(200.0)

    def test_import_keeps_sign(self):
        state = classify_balance(1, 4)
        assert state.kind == "import"
        assert state.balance_kwh == -3
        assert state.percentage == pytest.approx(25.0)

    def test_small_difference_is_balanced(self):
        assert classify_balance(2.05, 2.0).kind == "balanced"

    def test_export_without_consumption(self):
        assert classify_balance(2, 0).percentage == 100.0

    def test_import_without_production(self):
        assert classify_balance(0, 2).percentage == 0.0


class TestSelfConsumption:
    def test_self_consumed_is_min(self):
        assert self_consumed(3, 5) == 3
        assert self_consumed(5, 3) == 3

    def test_rates(self):
        assert self_consumption_rate(4, 1) == pytest.approx(0.25)
        assert autarky_rate(4, 1) == pytest.approx(1.0)
        assert self_consumption_rate(0, 1) == 0.0
        assert autarky_rate(1, 0) == 0.0
