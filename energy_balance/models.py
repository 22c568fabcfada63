"""
Energy Balance - Domain Data Model
==================================
Defines locations, weekly consumption slots, insolation samples and the
derived report records produced by the aggregation engine.

Percent-like fields on these records (insolation, system_losses) are
always 0-100. Fraction-based storage is converted in normalizer.py.
"""

import json
from dataclasses import dataclass, field, asdict, replace
from datetime import date
from typing import Optional

from energy_balance.validation import (
    ValidationError,
    as_date,
    validate_consumption,
    validate_day_of_week,
    validate_hour,
    validate_insolation,
    validate_pv_power,
    validate_system_losses,
)


# === Location ===

@dataclass(frozen=True)
class Location:
    """A user's PV site. `city` is the insolation lookup key."""
    id: str
    name: str
    city: str
    pv_power_kwp: float
    is_primary: bool = False
    user_id: Optional[str] = None
    system_losses: Optional[float] = None   # efficiency override, percent
    mwe_code: Optional[str] = None          # grid operator plant code

    def __post_init__(self):
        validate_pv_power(self.pv_power_kwp)
        if self.system_losses is not None:
            validate_system_losses(self.system_losses)


# Fields the owning user may edit after creation
EDITABLE_LOCATION_FIELDS = ("name", "city", "pv_power_kwp", "is_primary",
                            "system_losses", "mwe_code")


def update_location(location: Location, **changes) -> Location:
    """Return a copy of `location` with user-editable fields changed."""
    locked = sorted(set(changes) - set(EDITABLE_LOCATION_FIELDS))
    if locked:
        raise ValidationError(
            f"Location fields cannot be edited: {', '.join(locked)}",
            field=locked[0])
    return replace(location, **changes)


def primary_location(locations: list[Location]) -> Location | None:
    """Return the user's primary location, or None."""
    for loc in locations:
        if loc.is_primary:
            return loc
    return None


def set_primary(locations: list[Location], location_id: str) -> list[Location]:
    """Flag exactly one location as primary, clearing the flag elsewhere."""
    if not any(loc.id == location_id for loc in locations):
        raise ValidationError(f"Unknown location id: {location_id}",
                              field="location_id")
    return [replace(loc, is_primary=(loc.id == location_id))
            for loc in locations]


# === Consumption Slot ===

@dataclass(frozen=True)
class ConsumptionSlot:
    """One hour of the weekly consumption profile (Sunday = day 0)."""
    location_id: str
    day_of_week: int
    hour: int
    consumption_kwh: float

    def __post_init__(self):
        validate_day_of_week(self.day_of_week)
        validate_hour(self.hour)
        validate_consumption(self.consumption_kwh)


# === Insolation Sample ===

@dataclass(frozen=True)
class InsolationSample:
    """Measured or forecast insolation for one city-hour, in percent."""
    city: str
    date: date
    hour: int
    insolation_percentage: float

    def __post_init__(self):
        # ISO strings are stored as dates (frozen, so bypass __setattr__)
        object.__setattr__(self, "date", as_date(self.date))
        validate_hour(self.hour)
        validate_insolation(self.insolation_percentage)


# === Report Records ===

@dataclass(frozen=True)
class EnergyBalanceRow:
    """Per-hour balance. Positive balance = export, negative = import."""
    date: date
    hour: int
    production_kwh: float
    consumption_kwh: float
    balance_kwh: float


@dataclass
class ReportSummary:
    """Range totals (kWh). net_balance == total_export - total_import."""
    total_production: float = 0.0
    total_consumption: float = 0.0
    total_export: float = 0.0
    total_import: float = 0.0
    net_balance: float = 0.0
    self_consumed: float = 0.0      # sum of min(production, consumption)

    @property
    def self_consumption_rate(self) -> float:
        """Share of production used on site (0-1)."""
        if self.total_production <= 0:
            return 0.0
        return self.self_consumed / self.total_production

    @property
    def autarky_rate(self) -> float:
        """Share of consumption covered by own production (0-1)."""
        if self.total_consumption <= 0:
            return 0.0
        return self.self_consumed / self.total_consumption


@dataclass
class ReportData:
    location: Location
    start_date: date
    end_date: date
    rows: list[EnergyBalanceRow] = field(default_factory=list)
    summary: ReportSummary = field(default_factory=ReportSummary)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


# === Serialization ===

def location_to_dict(location: Location) -> dict:
    return asdict(location)


def location_from_dict(d: dict) -> Location:
    """Deserialize a dict (from JSON) into a Location."""
    return Location(
        id=str(d.get("id", "")),
        name=d.get("name", ""),
        city=d.get("city", "") or "",
        pv_power_kwp=float(d.get("pv_power_kwp", 0.0)),
        is_primary=bool(d.get("is_primary", False)),
        user_id=d.get("user_id"),
        system_losses=d.get("system_losses"),
        mwe_code=d.get("mwe_code") or None,
    )


def slot_to_dict(slot: ConsumptionSlot) -> dict:
    return asdict(slot)


def slot_from_dict(d: dict) -> ConsumptionSlot:
    return ConsumptionSlot(
        location_id=str(d.get("location_id", "")),
        day_of_week=d["day_of_week"],
        hour=d["hour"],
        consumption_kwh=d["consumption_kwh"],
    )


def sample_to_dict(sample: InsolationSample) -> dict:
    d = asdict(sample)
    d["date"] = sample.date.isoformat()
    return d


def sample_from_dict(d: dict) -> InsolationSample:
    return InsolationSample(
        city=d["city"],
        date=as_date(d["date"]),
        hour=d["hour"],
        insolation_percentage=d["insolation_percentage"],
    )


def report_to_dict(report: ReportData) -> dict:
    """Serialize a ReportData into a JSON-safe dict."""
    summary = asdict(report.summary)
    summary["self_consumption_rate"] = report.summary.self_consumption_rate
    summary["autarky_rate"] = report.summary.autarky_rate
    return {
        "location": location_to_dict(report.location),
        "start_date": report.start_date.isoformat(),
        "end_date": report.end_date.isoformat(),
        "hourly_data": [
            {
                "date": row.date.isoformat(),
                "hour": row.hour,
                "production_kwh": row.production_kwh,
                "consumption_kwh": row.consumption_kwh,
                "balance_kwh": row.balance_kwh,
            }
            for row in report.rows
        ],
        "summary": summary,
    }


def load_locations_json(path: str) -> list[Location]:
    """Load locations from a JSON file: {"locations": [...]} or a bare list."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    entries = data.get("locations", []) if isinstance(data, dict) else data
    return [location_from_dict(entry) for entry in entries]


def save_locations_json(locations: list[Location], path: str):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"locations": [location_to_dict(loc) for loc in locations]},
                  f, indent=2, ensure_ascii=False)
