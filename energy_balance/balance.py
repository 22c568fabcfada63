"""Per-hour energy balance.

Sign convention: positive = export to grid, negative = import,
zero = exact self-consumption.
"""

from typing import NamedTuple

from energy_balance.config import BALANCED_THRESHOLD_KWH


class BalanceState(NamedTuple):
    balance_kwh: float
    kind: str           # "export", "import" or "balanced"
    percentage: float   # production as a share of consumption


def calculate_balance(production_kwh: float, consumption_kwh: float) -> float:
    return production_kwh - consumption_kwh


def classify_balance(production_kwh: float, consumption_kwh: float) -> BalanceState:
    """Label an hour for display. |balance| below 0.1 kWh counts as balanced."""
    balance = calculate_balance(production_kwh, consumption_kwh)
    if abs(balance) < BALANCED_THRESHOLD_KWH:
        return BalanceState(balance, "balanced", 100.0)
    if balance > 0:
        pct = production_kwh / consumption_kwh * 100 if consumption_kwh > 0 else 100.0
        return BalanceState(balance, "export", pct)
    pct = production_kwh / consumption_kwh * 100 if production_kwh > 0 else 0.0
    return BalanceState(balance, "import", pct)


def self_consumed(production_kwh: float, consumption_kwh: float) -> float:
    """Energy produced and used in the same hour."""
    return max(0.0, min(production_kwh, consumption_kwh))


def self_consumption_rate(production_kwh: float, consumption_kwh: float) -> float:
    if production_kwh <= 0:
        return 0.0
    return self_consumed(production_kwh, consumption_kwh) / production_kwh


def autarky_rate(production_kwh: float, consumption_kwh: float) -> float:
    if consumption_kwh <= 0:
        return 0.0
    return self_consumed(production_kwh, consumption_kwh) / consumption_kwh
