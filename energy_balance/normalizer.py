"""Boundary conversions between stored records and engine models.

Persistence keeps system_losses as a 0-1 fraction; the engine works in
0-100 percent only. Conversion happens here, once in each direction.
"""

import math
import re

import pandas as pd
from rich.console import Console

from energy_balance.models import ConsumptionSlot, InsolationSample, Location
from energy_balance.validation import ValidationError, as_date

console = Console()


def parse_number(value) -> float:
    """Parse a number handling European and US formats.

    Handles:
      - European: 1.234,56 -> 1234.56
      - European decimal only: 1234,56 -> 1234.56
      - US: 1,234.56 -> 1234.56
      - Space thousands and non-breaking spaces
      - Trailing units (kWh, kWp, %)
      - Empty/blank/garbage -> NaN
    """
    if isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float)):
        if pd.isna(value):
            return float("nan")
        return float(value)
    if value is None or pd.isna(value):
        return float("nan")

    value = str(value).strip()
    value = value.replace("\xa0", "").replace("\u202f", "").replace(" ", "")
    value = re.sub(r'[a-zA-Z%]+$', '', value).strip()
    if not value:
        return float("nan")

    if "," in value and "." in value:
        if value.rfind(",") > value.rfind("."):
            value = value.replace(".", "").replace(",", ".")
        else:
            value = value.replace(",", "")
    elif "," in value:
        value = value.replace(",", ".")

    try:
        return float(value)
    except ValueError:
        return float("nan")


def fraction_to_percentage(fraction):
    """0.85 -> 85.0. None passes through (no override stored)."""
    if fraction is None:
        return None
    return round(float(fraction) * 100, 6)


def percentage_to_fraction(percentage):
    """85.0 -> 0.85. None passes through."""
    if percentage is None:
        return None
    return round(float(percentage) / 100, 8)


def _number(record: dict, key: str) -> float:
    value = parse_number(record.get(key))
    if math.isnan(value):
        raise ValidationError(f"{key} is missing or not a number: "
                              f"{record.get(key)!r}", field=key)
    return value


def _integer(record: dict, key: str) -> int:
    value = _number(record, key)
    if not value.is_integer():
        raise ValidationError(f"{key} must be an integer, got {record.get(key)!r}",
                              field=key)
    return int(value)


def location_from_record(record: dict) -> Location:
    """Stored location row (system_losses as fraction) -> Location (percent)."""
    losses = record.get("system_losses")
    if losses is not None and losses != "":
        losses = fraction_to_percentage(parse_number(losses))
    else:
        losses = None
    return Location(
        id=str(record.get("id", "")),
        name=record.get("name", "") or "",
        city=(record.get("city") or "").strip(),
        pv_power_kwp=_number(record, "pv_power_kwp"),
        is_primary=bool(record.get("is_primary", False)),
        user_id=record.get("user_id"),
        system_losses=losses,
        mwe_code=record.get("mwe_code") or None,
    )


def location_to_record(location: Location) -> dict:
    """Location -> storable row, system_losses converted back to a fraction."""
    return {
        "id": location.id,
        "user_id": location.user_id,
        "name": location.name,
        "city": location.city,
        "pv_power_kwp": location.pv_power_kwp,
        "is_primary": location.is_primary,
        "system_losses": percentage_to_fraction(location.system_losses),
        "mwe_code": location.mwe_code,
    }


def slot_from_record(record: dict, location_id: str | None = None) -> ConsumptionSlot:
    return ConsumptionSlot(
        location_id=str(location_id if location_id is not None
                        else record.get("location_id", "")),
        day_of_week=_integer(record, "day_of_week"),
        hour=_integer(record, "hour"),
        consumption_kwh=_number(record, "consumption_kwh"),
    )


def sample_from_record(record: dict) -> InsolationSample:
    return InsolationSample(
        city=(record.get("city") or "").strip(),
        date=as_date(record.get("date")),
        hour=_integer(record, "hour"),
        insolation_percentage=_number(record, "insolation_percentage"),
    )


def slots_from_frame(df: pd.DataFrame, location_id: str) -> list[ConsumptionSlot]:
    """Convert a table with day_of_week / hour / consumption_kwh columns.

    Invalid rows are skipped with a warning; duplicate (day, hour) rows
    keep the last value.
    """
    by_key = {}
    skipped = 0
    for record in df.to_dict(orient="records"):
        try:
            slot = slot_from_record(record, location_id)
        except ValidationError:
            skipped += 1
            continue
        by_key[(slot.day_of_week, slot.hour)] = slot
    if skipped:
        console.print(f"  [yellow]{skipped} consumption rows skipped "
                      f"(invalid day/hour/value)[/yellow]")
    return [by_key[k] for k in sorted(by_key)]


def samples_from_frame(df: pd.DataFrame, city: str | None = None) -> list[InsolationSample]:
    """Convert a table with city / date / hour / insolation_percentage columns.

    When `city` is given, rows for other cities are dropped and a missing
    city column is filled with it.
    """
    samples = []
    skipped = 0
    for record in df.to_dict(orient="records"):
        if city is not None:
            if not record.get("city"):
                record["city"] = city
            elif str(record["city"]).strip() != city:
                continue
        try:
            samples.append(sample_from_record(record))
        except ValidationError:
            skipped += 1
    if skipped:
        console.print(f"  [yellow]{skipped} insolation rows skipped "
                      f"(invalid date/hour/percentage)[/yellow]")
    return samples
