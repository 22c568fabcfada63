"""
Energy Balance - Report Aggregation
===================================
Walks an inclusive date range hour by hour, joins the weekly consumption
profile (by weekday/hour) and insolation samples (by date/hour) for one
location, and produces hourly balance rows plus range totals.

Missing data is not an error here: an absent consumption slot counts as
0 kWh and an absent insolation sample as 0 %, so a report always has
exactly days * 24 rows even over a partially entered profile.
"""

from datetime import date, timedelta

import pandas as pd

from energy_balance.balance import calculate_balance, self_consumed
from energy_balance.config import HOURS_PER_DAY
from energy_balance.consumption_grid import completion_stats
from energy_balance.models import (
    ConsumptionSlot,
    EnergyBalanceRow,
    InsolationSample,
    Location,
    ReportData,
    ReportSummary,
)
from energy_balance.production import estimate_production
from energy_balance.validation import ValidationError, as_date, validate_date_range


def day_of_week(d: date) -> int:
    """Sunday = 0 .. Saturday = 6 (date.weekday() is Monday = 0)."""
    return (d.weekday() + 1) % 7


def iter_dates(start_date: date, end_date: date):
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def hourly_dates(start_date: date, end_date: date) -> list[tuple[date, int]]:
    """Every (date, hour) in the inclusive range, chronologically."""
    return [(d, h) for d in iter_dates(start_date, end_date)
            for h in range(HOURS_PER_DAY)]


def _require_city(location: Location) -> str:
    city = (location.city or "").strip()
    if not city:
        raise ValidationError(
            f"Location {location.name or location.id!r} has no city; "
            f"insolation data cannot be looked up",
            field="city")
    return city


def _consumption_lookup(location: Location,
                        slots: list[ConsumptionSlot]) -> dict[tuple[int, int], float]:
    lookup = {}
    for slot in slots:
        # Unscoped slots (empty location_id) belong to the requested location
        if slot.location_id and slot.location_id != location.id:
            continue
        lookup[(slot.day_of_week, slot.hour)] = slot.consumption_kwh
    return lookup


def _insolation_lookup(city: str,
                       samples: list[InsolationSample]) -> dict[tuple[date, int], float]:
    return {
        (s.date, s.hour): s.insolation_percentage
        for s in samples
        if s.city.strip() == city
    }


def build_report(location: Location,
                 consumption_slots: list[ConsumptionSlot],
                 insolation_samples: list[InsolationSample],
                 start_date, end_date,
                 max_days: int | None = None) -> ReportData:
    """Build the hourly energy balance report for [start_date, end_date].

    Args:
        location: Site with city and pv_power_kwp (system_losses optional, %).
        consumption_slots: Weekly profile of this location (may be partial).
        insolation_samples: Samples for the location's city (may have gaps).
        start_date, end_date: Inclusive range; date, datetime or ISO string.
        max_days: Optional cap on the range length.

    Raises:
        ValidationError: start after end, range above max_days, or no city.
    """
    city = _require_city(location)
    start, end = validate_date_range(start_date, end_date, max_days)

    consumption = _consumption_lookup(location, consumption_slots)
    insolation = _insolation_lookup(city, insolation_samples)

    rows = []
    summary = ReportSummary()
    for d in iter_dates(start, end):
        weekday = day_of_week(d)
        for hour in range(HOURS_PER_DAY):
            consumption_kwh = consumption.get((weekday, hour), 0.0)
            production_kwh = estimate_production(
                location.pv_power_kwp,
                insolation.get((d, hour), 0.0),
                location.system_losses,
            )
            balance_kwh = calculate_balance(production_kwh, consumption_kwh)
            rows.append(EnergyBalanceRow(
                date=d,
                hour=hour,
                production_kwh=production_kwh,
                consumption_kwh=consumption_kwh,
                balance_kwh=balance_kwh,
            ))

            summary.total_production += production_kwh
            summary.total_consumption += consumption_kwh
            summary.self_consumed += self_consumed(production_kwh, consumption_kwh)
            if balance_kwh > 0:
                summary.total_export += balance_kwh
            elif balance_kwh < 0:
                summary.total_import += -balance_kwh

    summary.net_balance = summary.total_export - summary.total_import

    return ReportData(location=location, start_date=start, end_date=end,
                      rows=rows, summary=summary)


# ---------------------------------------------------------------------------
# Tabular views
# ---------------------------------------------------------------------------

def report_to_frame(report: ReportData) -> pd.DataFrame:
    """One row per hour: date, hour, production_kwh, consumption_kwh, balance_kwh."""
    return pd.DataFrame(
        [(r.date, r.hour, r.production_kwh, r.consumption_kwh, r.balance_kwh)
         for r in report.rows],
        columns=["date", "hour", "production_kwh", "consumption_kwh",
                 "balance_kwh"],
    )


def daily_breakdown(report: ReportData) -> pd.DataFrame:
    """Per-date totals with export/import split, indexed by date."""
    df = report_to_frame(report)
    if df.empty:
        return pd.DataFrame(columns=["production_kwh", "consumption_kwh",
                                     "export_kwh", "import_kwh", "balance_kwh"])
    df["export_kwh"] = df["balance_kwh"].clip(lower=0)
    df["import_kwh"] = (-df["balance_kwh"]).clip(lower=0)
    daily = df.groupby("date")[["production_kwh", "consumption_kwh",
                                "export_kwh", "import_kwh",
                                "balance_kwh"]].sum()
    return daily


# ---------------------------------------------------------------------------
# Insolation averages (chart data)
# ---------------------------------------------------------------------------

INSOLATION_COLUMNS = ["city", "date", "hour", "insolation_percentage"]


def insolation_frame(samples: list[InsolationSample], city: str | None = None,
                     start_date=None, end_date=None) -> pd.DataFrame:
    """Samples as a frame, filtered by city and an inclusive date range.

    city None or "all" keeps every city. An open range end is left
    unbounded, i.e. it falls back to the span of the data itself.
    """
    df = pd.DataFrame(
        [(s.city.strip(), s.date, s.hour, s.insolation_percentage) for s in samples],
        columns=INSOLATION_COLUMNS,
    ).astype({"hour": int, "insolation_percentage": float})

    if city and city != "all":
        df = df[df["city"] == city.strip()]
    if start_date is not None and end_date is not None:
        start_date, end_date = validate_date_range(start_date, end_date)
    if start_date is not None:
        df = df[df["date"] >= as_date(start_date, "start_date")]
    if end_date is not None:
        df = df[df["date"] <= as_date(end_date, "end_date")]
    return df.reset_index(drop=True)


def insolation_hourly_avg(samples: list[InsolationSample], city: str | None = None,
                          start_date=None, end_date=None) -> pd.DataFrame:
    """Mean insolation per hour of day across the range, indexed by hour."""
    df = insolation_frame(samples, city, start_date, end_date)
    hourly = df.groupby("hour").agg(
        insolation_percentage=("insolation_percentage", "mean"),
        count=("insolation_percentage", "size"),
        dates=("date", "nunique"),
        cities=("city", "nunique"),
    )
    hourly["insolation_percentage"] = hourly["insolation_percentage"].round(2)
    hourly["label"] = [f"{h:02d}:00" for h in hourly.index]
    return hourly


def insolation_daily_avg(samples: list[InsolationSample], city: str | None = None,
                         start_date=None, end_date=None) -> pd.DataFrame:
    """Mean insolation per date. Every date of the range is present;
    dates without samples show 0 % with a count of 0.
    """
    df = insolation_frame(samples, city, start_date, end_date)
    daily = df.groupby("date").agg(
        insolation_percentage=("insolation_percentage", "mean"),
        count=("insolation_percentage", "size"),
        cities=("city", "nunique"),
    )

    start = as_date(start_date, "start_date") if start_date is not None else None
    end = as_date(end_date, "end_date") if end_date is not None else None
    if not df.empty:
        start = start or df["date"].min()
        end = end or df["date"].max()
    if start is None or end is None:
        return daily

    full_range = pd.Index(list(iter_dates(start, end)), name="date")
    daily = daily.reindex(full_range, fill_value=0)
    daily["insolation_percentage"] = daily["insolation_percentage"].astype(float).round(2)
    return daily


def insolation_monthly_avg(samples: list[InsolationSample], city: str | None = None,
                           start_date=None, end_date=None) -> pd.DataFrame:
    """Mean insolation per calendar month ("YYYY-MM"), indexed by month."""
    df = insolation_frame(samples, city, start_date, end_date)
    df = df.assign(month=[d.strftime("%Y-%m") for d in df["date"]])
    monthly = df.groupby("month").agg(
        insolation_percentage=("insolation_percentage", "mean"),
        count=("insolation_percentage", "size"),
        dates=("date", "nunique"),
        cities=("city", "nunique"),
    )
    monthly["insolation_percentage"] = monthly["insolation_percentage"].round(2)
    return monthly


# ---------------------------------------------------------------------------
# Data availability (report preview)
# ---------------------------------------------------------------------------

def _worst(statuses: list[str]) -> str:
    if "FAIL" in statuses:
        return "FAIL"
    if "WARN" in statuses:
        return "WARN"
    return "PASS"


def check_data_availability(location: Location,
                            consumption_slots: list[ConsumptionSlot],
                            insolation_samples: list[InsolationSample],
                            start_date, end_date) -> dict:
    """Preview how much real data a report over the range would use.

    Missing data only lowers the status; it never raises. An inverted
    date range still raises ValidationError.
    """
    start, end = validate_date_range(start_date, end_date)
    checks = []

    city = (location.city or "").strip()
    if city:
        checks.append({"name": "Location City", "status": "PASS",
                       "details": f"Insolation lookup by city '{city}'"})
    else:
        checks.append({"name": "Location City", "status": "FAIL",
                       "details": "Location has no city; report cannot be built"})

    slots = [s for s in consumption_slots
             if not s.location_id or s.location_id == location.id]
    stats = completion_stats(slots)
    if stats["is_complete"]:
        c_status = "PASS"
    elif slots:
        c_status = "WARN"
    else:
        c_status = "FAIL"
    checks.append({
        "name": "Consumption Profile",
        "status": c_status,
        "details": (f"{stats['actual_count']}/168 slots, "
                    f"{stats['completion_percentage']:.1f}% with values"),
    })

    expected = hourly_dates(start, end)
    available = set(_insolation_lookup(city, insolation_samples)) if city else set()
    covered = sum(1 for key in expected if key in available)
    coverage_pct = covered / len(expected) * 100
    if coverage_pct >= 95:
        i_status = "PASS"
    elif coverage_pct >= 80:
        i_status = "WARN"
    else:
        i_status = "FAIL"
    checks.append({
        "name": "Insolation Coverage",
        "status": i_status,
        "details": (f"{covered}/{len(expected)} hours with insolation data "
                    f"({coverage_pct:.1f}%)"),
    })

    return {
        "status": _worst([c["status"] for c in checks]),
        "checks": checks,
        "consumption_slots": stats["actual_count"],
        "insolation_coverage_pct": round(coverage_pct, 1),
    }
