"""Tests for energy_balance.production module."""

import numpy as np
import pytest

from energy_balance.config import SYSTEM_EFFICIENCY
from energy_balance.production import (
    annual_production_estimate,
    daily_production,
    estimate_production,
    estimate_series,
    monthly_production_estimate,
    peak_sun_hours,
    production_status,
    validated_estimate,
)
from energy_balance.validation import ValidationError


class TestEstimateProduction:
    def test_half_insolation(self):
        assert estimate_production(5, 50) == pytest.approx(2.125)

    def test_zero_insolation(self):
        assert estimate_production(5, 0) == 0

    def test_missing_insolation_is_zero(self):
        assert estimate_production(5, None) == 0

    def test_full_insolation_uses_efficiency(self):
        assert estimate_production(10, 100) == pytest.approx(10 * SYSTEM_EFFICIENCY)

    def test_efficiency_override_percent(self):
        assert estimate_production(10, 100, efficiency_percentage=90) == pytest.approx(9.0)

    def test_clamped_to_nameplate(self):
        # bad input must not yield super-unity output
        assert estimate_production(4, 200, efficiency_percentage=100) == pytest.approx(4.0)

    def test_negative_inputs_clamped_to_zero(self):
        assert estimate_production(5, -20) == 0
        assert estimate_production(-5, 50) == 0

    def test_never_negative(self):
        np.random.seed(42)
        for pv, pct in zip(np.random.uniform(0, 100, 200),
                           np.random.uniform(0, 100, 200)):
            assert estimate_production(float(pv), float(pct)) >= 0

    def test_rounded_to_three_decimals(self):
        assert estimate_production(3.33, 33.3) == round(3.33 * 0.333 * 0.85, 3)


class TestValidatedEstimate:
    @pytest.mark.parametrize("pv", [0, -1, 100.5, float("nan"), "5"])
    def test_rejects_pv_power(self, pv):
        with pytest.raises(ValidationError) as exc:
            validated_estimate(pv, 50)
        assert exc.value.field == "pv_power_kwp"

    @pytest.mark.parametrize("pct", [-0.1, 100.1, None])
    def test_rejects_insolation(self, pct):
        with pytest.raises(ValidationError):
            validated_estimate(5, pct)

    def test_rejects_efficiency(self):
        with pytest.raises(ValidationError):
            validated_estimate(5, 50, efficiency_percentage=0.85)

    def test_accepts_bounds(self):
        assert validated_estimate(100, 100) == pytest.approx(85.0)
        assert validated_estimate(0.1, 0) == 0


class TestSeriesAndAggregates:
    def test_series_matches_scalar(self):
        pcts = [0, 12.5, 50, 99, 100]
        series = estimate_series(6.5, pcts)
        expected = [estimate_production(6.5, p) for p in pcts]
        assert series.tolist() == pytest.approx(expected)

    def test_series_nan_is_zero(self):
        assert estimate_series(5, [np.nan, 50]).tolist() == pytest.approx([0.0, 2.125])

    def test_daily_production(self):
        assert daily_production(5, [50, 50, 0]) == pytest.approx(4.25)

    def test_daily_production_empty(self):
        assert daily_production(5, []) == 0.0
        assert daily_production(0, [50]) == 0.0

    def test_monthly_and_annual(self):
        assert monthly_production_estimate(10.0) == 300.0
        assert monthly_production_estimate(10.0, days_in_month=31) == 310.0
        assert annual_production_estimate(10.0) == 3650.0
        assert annual_production_estimate(0) == 0.0

    def test_peak_sun_hours(self):
        assert peak_sun_hours([50, 100, 25]) == pytest.approx(1.75)

    @pytest.mark.parametrize("current, potential, expected", [
        (9.5, 10, "excellent"), (7.5, 10, "good"), (5, 10, "fair"),
        (1, 10, "poor"), (0, 10, "offline"), (5, 0, "offline"),
    ])
    def test_production_status(self, current, potential, expected):
        assert production_status(current, potential)["status"] == expected
