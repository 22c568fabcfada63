"""MWE generation-plan schedule (Polish grid operator CSV format).

File layout:

    #KOD_MWE;<code>
    DATA I CZAS OD;PPLAN;PAUTO
    01-07-2025 00:00;0,000;0,000
    ...

PPLAN is the planned generation and PAUTO the surplus left after own
consumption, both in MW with 3 decimals and a comma separator.
"""

from datetime import date, timedelta
from typing import NamedTuple

from energy_balance.config import (
    MWE_FUTURE_DAYS_LIMIT,
    MWE_HEADER,
    MWE_MAX_FILENAME_LENGTH,
    MWE_MAX_VALUE_MW,
)
from energy_balance.models import ReportData


class MweRow(NamedTuple):
    datetime: str      # "dd-MM-yyyy HH:mm"
    pplan: float       # kW
    pauto: float       # kW


def format_mwe_value(value: float, convert_kw_to_mw: bool = False) -> str:
    if convert_kw_to_mw:
        value = value / 1000
    if value == 0:
        return "0,000"
    return f"{round(value, 3):.3f}".replace(".", ",")


def format_mwe_datetime(d: date, hour: int) -> str:
    return f"{d.strftime('%d-%m-%Y')} {hour:02d}:00"


def calculate_pauto(pplan: float, consumption: float) -> float:
    """Surplus generation, never negative."""
    return max(0.0, pplan - consumption)


def build_mwe_schedule(report: ReportData) -> list[MweRow]:
    """One schedule row per report hour (production kWh over 1 h = kW)."""
    return [
        MweRow(
            datetime=format_mwe_datetime(row.date, row.hour),
            pplan=row.production_kwh,
            pauto=calculate_pauto(row.production_kwh, row.consumption_kwh),
        )
        for row in report.rows
    ]


def generate_mwe_csv(mwe_code: str, rows: list[MweRow]) -> str:
    lines = [f"#KOD_MWE;{mwe_code}", MWE_HEADER]
    for row in rows:
        lines.append(";".join([
            row.datetime,
            format_mwe_value(row.pplan, convert_kw_to_mw=True),
            format_mwe_value(row.pauto, convert_kw_to_mw=True),
        ]))
    return "\n".join(lines)


def _parse_mwe_datetime(text: str) -> tuple[date, int] | None:
    try:
        day_part, time_part = text.split(" ")
        dd, mm, yyyy = (int(p) for p in day_part.split("-"))
        return date(yyyy, mm, dd), int(time_part.split(":")[0])
    except ValueError:
        return None


def validate_mwe_schedule(mwe_code: str, rows: list[MweRow],
                          today: date | None = None) -> dict:
    """Check a schedule against the operator's constraints.

    Returns {"valid": bool, "errors": [...], "warnings": [...]}. Line
    numbers in messages count the two header lines, matching the file.
    """
    errors = []
    warnings = []
    today = today or date.today()
    future_limit = today + timedelta(days=MWE_FUTURE_DAYS_LIMIT)

    if not mwe_code or not mwe_code.strip():
        errors.append("MWE code is required")
    if not rows:
        errors.append("No data rows to export")

    parsed = []
    for index, row in enumerate(rows):
        line = index + 3
        when = _parse_mwe_datetime(row.datetime)
        if when is None:
            errors.append(f"Invalid datetime on line {line}: {row.datetime}")
            continue
        parsed.append(when)
        if when[0] > future_limit:
            errors.append(f"Date more than {MWE_FUTURE_DAYS_LIMIT} days ahead "
                          f"on line {line}: {row.datetime}")
        if row.pplan < 0:
            errors.append(f"PPLAN must be >= 0 on line {line}")
        if row.pplan / 1000 > MWE_MAX_VALUE_MW:
            errors.append(f"PPLAN exceeds {MWE_MAX_VALUE_MW} MW on line {line}")
        if row.pauto < 0:
            errors.append(f"PAUTO must be >= 0 on line {line}")
        if row.pauto / 1000 > MWE_MAX_VALUE_MW:
            errors.append(f"PAUTO exceeds {MWE_MAX_VALUE_MW} MW on line {line}")
        if row.pauto > row.pplan:
            errors.append(f"PAUTO must be <= PPLAN on line {line}")

    datetimes = [row.datetime for row in rows]
    if len(datetimes) != len(set(datetimes)):
        errors.append("Duplicate datetimes in schedule")
    if parsed != sorted(parsed):
        warnings.append("Rows are not in chronological order")

    return {"valid": not errors, "errors": errors, "warnings": warnings}


def mwe_filename(mwe_code: str, start_date: date, end_date: date) -> str:
    """"{code}_{ddMMyyyy}-{ddMMyyyy}.csv", code truncated to fit 50 chars."""
    suffix = f"_{start_date.strftime('%d%m%Y')}-{end_date.strftime('%d%m%Y')}.csv"
    max_code = MWE_MAX_FILENAME_LENGTH - len(suffix)
    return f"{mwe_code[:max_code]}{suffix}"
