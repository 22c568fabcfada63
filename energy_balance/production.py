"""PV production estimate from nameplate power and insolation.

    production_kwh = pv_power_kwp * insolation% / 100 * efficiency

A flat efficiency factor (SYSTEM_EFFICIENCY, 0.85, or a per-location
override) stands in for all system losses. This is a simplification, not
an irradiance/temperature model: one hour at 100 % insolation yields
pv_power_kwp * efficiency kWh.
"""

import numpy as np

from energy_balance.config import PRODUCTION_DECIMALS, SYSTEM_EFFICIENCY
from energy_balance.validation import (
    validate_insolation,
    validate_pv_power,
    validate_system_losses,
)


def _efficiency(efficiency_percentage) -> float:
    if efficiency_percentage is None:
        return SYSTEM_EFFICIENCY
    return efficiency_percentage / 100


def estimate_production(pv_power_kwp: float, insolation_percentage,
                        efficiency_percentage: float | None = None) -> float:
    """Hourly production in kWh.

    Inputs are assumed validated; the result is clamped to
    [0, pv_power_kwp] so bad input can never give negative or
    super-unity output. Missing insolation (None) counts as 0 %.
    """
    if insolation_percentage is None:
        insolation_percentage = 0.0
    production = (pv_power_kwp * (insolation_percentage / 100)
                  * _efficiency(efficiency_percentage))
    production = max(0.0, min(production, pv_power_kwp))
    return round(production, PRODUCTION_DECIMALS)


def validated_estimate(pv_power_kwp, insolation_percentage,
                       efficiency_percentage=None) -> float:
    """estimate_production for raw input; raises ValidationError when out of range."""
    validate_pv_power(pv_power_kwp)
    validate_insolation(insolation_percentage)
    if efficiency_percentage is not None:
        validate_system_losses(efficiency_percentage)
    return estimate_production(pv_power_kwp, insolation_percentage,
                               efficiency_percentage)


def estimate_series(pv_power_kwp: float, insolation_percentages,
                    efficiency_percentage: float | None = None) -> np.ndarray:
    """Vectorised estimate_production over an array of percentages (NaN = 0)."""
    pct = np.nan_to_num(np.asarray(insolation_percentages, dtype=float), nan=0.0)
    production = pv_power_kwp * (pct / 100) * _efficiency(efficiency_percentage)
    production = np.clip(production, 0.0, max(pv_power_kwp, 0.0))
    return np.round(production, PRODUCTION_DECIMALS)


def daily_production(pv_power_kwp: float, hourly_percentages: list[float],
                     efficiency_percentage: float | None = None) -> float:
    """Sum of hourly estimates for one day's insolation values."""
    if pv_power_kwp <= 0 or len(hourly_percentages) == 0:
        return 0.0
    total = sum(estimate_production(pv_power_kwp, p, efficiency_percentage)
                for p in hourly_percentages)
    return round(total, PRODUCTION_DECIMALS)


def monthly_production_estimate(average_daily_kwh: float,
                                days_in_month: int = 30) -> float:
    if average_daily_kwh <= 0:
        return 0.0
    return round(average_daily_kwh * days_in_month, 1)


def annual_production_estimate(average_daily_kwh: float) -> float:
    if average_daily_kwh <= 0:
        return 0.0
    return round(average_daily_kwh * 365, 1)


def peak_sun_hours(hourly_percentages: list[float]) -> float:
    """Equivalent hours at 100 % insolation."""
    return sum(hourly_percentages) / 100


def production_status(current_kwh: float, potential_kwh: float) -> dict:
    """Rate current output against the potential at full insolation."""
    if potential_kwh <= 0:
        return {"status": "offline", "percentage": 0.0}

    percentage = current_kwh / potential_kwh * 100
    if percentage >= 90:
        status = "excellent"
    elif percentage >= 70:
        status = "good"
    elif percentage >= 40:
        status = "fair"
    elif percentage > 0:
        status = "poor"
    else:
        return {"status": "offline", "percentage": 0.0}
    return {"status": status, "percentage": percentage}
