"""Input validation for the energy balance engine.

Pure-function module. Every check raises ValidationError at the point of
the invalid input; nothing is deferred into a later computation step.
Missing optional data (absent slots or insolation samples) is not
validated here: it defaults to zero during aggregation.
"""

import math
from datetime import date, datetime

from energy_balance.config import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    MAX_CONSUMPTION_KWH,
    MAX_PV_POWER_KWP,
    MAX_SYSTEM_LOSSES_PCT,
    MIN_SYSTEM_LOSSES_PCT,
)


class ValidationError(ValueError):
    """Caller passed domain-invalid input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def _is_int(value) -> bool:
    # bool is an int subclass; True is not a valid hour
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_day_of_week(day) -> int:
    if not _is_int(day) or not 0 <= day < DAYS_PER_WEEK:
        raise ValidationError(
            f"day_of_week must be an integer 0-{DAYS_PER_WEEK - 1}, got {day!r}",
            field="day_of_week")
    return day


def validate_hour(hour) -> int:
    if not _is_int(hour) or not 0 <= hour < HOURS_PER_DAY:
        raise ValidationError(
            f"hour must be an integer 0-{HOURS_PER_DAY - 1}, got {hour!r}",
            field="hour")
    return hour


def validate_pv_power(pv_power_kwp) -> float:
    """PV nameplate power must be in (0, MAX_PV_POWER_KWP] kWp."""
    if not _is_number(pv_power_kwp) or not 0 < pv_power_kwp <= MAX_PV_POWER_KWP:
        raise ValidationError(
            f"pv_power_kwp must be > 0 and <= {MAX_PV_POWER_KWP:g}, "
            f"got {pv_power_kwp!r}",
            field="pv_power_kwp")
    return float(pv_power_kwp)


def validate_insolation(percentage) -> float:
    if not _is_number(percentage) or not 0 <= percentage <= 100:
        raise ValidationError(
            f"insolation_percentage must be within 0-100, got {percentage!r}",
            field="insolation_percentage")
    return float(percentage)


def validate_consumption(consumption_kwh) -> float:
    if (not _is_number(consumption_kwh)
            or not 0 <= consumption_kwh <= MAX_CONSUMPTION_KWH):
        raise ValidationError(
            f"consumption_kwh must be within 0-{MAX_CONSUMPTION_KWH:g}, "
            f"got {consumption_kwh!r}",
            field="consumption_kwh")
    return float(consumption_kwh)


def validate_system_losses(percentage) -> float:
    """Per-location efficiency override, expressed as a percentage."""
    if (not _is_number(percentage)
            or not MIN_SYSTEM_LOSSES_PCT <= percentage <= MAX_SYSTEM_LOSSES_PCT):
        raise ValidationError(
            f"system_losses must be within {MIN_SYSTEM_LOSSES_PCT:g}-"
            f"{MAX_SYSTEM_LOSSES_PCT:g} %, got {percentage!r}",
            field="system_losses")
    return float(percentage)


def as_date(value, field: str = "date") -> date:
    """Coerce a date, datetime or ISO string (YYYY-MM-DD...) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"{field} is not a valid date: {value!r}", field=field)


def validate_date_range(start, end, max_days: int | None = None) -> tuple[date, date]:
    """Validate an inclusive [start, end] range. Returns the coerced dates."""
    start_date = as_date(start, "start_date")
    end_date = as_date(end, "end_date")
    if start_date > end_date:
        raise ValidationError(
            f"start_date {start_date.isoformat()} is after end_date "
            f"{end_date.isoformat()}",
            field="start_date")
    if max_days is not None:
        days = (end_date - start_date).days + 1
        if days > max_days:
            raise ValidationError(
                f"date range spans {days} days, maximum is {max_days}",
                field="end_date")
    return start_date, end_date
