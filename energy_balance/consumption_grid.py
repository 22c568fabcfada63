"""Weekly consumption grid: 7 days x 24 hours = 168 slots.

Pure-function module. Day numbering is Sunday = 0 .. Saturday = 6.
Grids are plain dicts keyed by GridKey; the "{day}_{hour}" string form
only exists at the edges (encode_key / decode_key).
"""

import re
from typing import NamedTuple

import pandas as pd

from energy_balance.config import (
    DAY_NAMES,
    DAYS_PER_WEEK,
    GRID_KEY_SEPARATOR,
    HOURS_PER_DAY,
    MAX_CONSUMPTION_KWH,
    SLOTS_PER_WEEK,
)
from energy_balance.models import ConsumptionSlot
from energy_balance.normalizer import parse_number
from energy_balance.validation import (
    ValidationError,
    validate_day_of_week,
    validate_hour,
)

_SEGMENT = re.compile(r"[0-9]+")

WEEKDAY_PATTERN = [
    0.5, 0.3, 0.2, 0.2, 0.3, 0.8, 2.1, 3.2,   # 0-7
    2.8, 2.2, 1.8, 1.5, 1.2, 1.0, 1.0, 1.2,   # 8-15
    1.8, 2.5, 3.8, 4.2, 3.5, 2.8, 1.8, 1.2,   # 16-23
]

WEEKEND_PATTERN = [
    0.8, 0.5, 0.3, 0.3, 0.5, 1.2, 1.8, 2.5,
    3.2, 2.8, 2.5, 2.2, 2.0, 1.8, 1.5, 1.8,
    2.2, 2.8, 3.5, 4.0, 3.8, 3.2, 2.5, 1.8,
]


class GridKey(NamedTuple):
    """Composite (day, hour) key of one grid cell."""
    day: int
    hour: int

    @classmethod
    def of(cls, day, hour) -> "GridKey":
        """Build a key, raising ValidationError on out-of-range values."""
        return cls(validate_day_of_week(day), validate_hour(hour))

    def __str__(self) -> str:
        return f"{self.day}{GRID_KEY_SEPARATOR}{self.hour}"


ALL_KEYS = [GridKey(d, h) for d in range(DAYS_PER_WEEK)
            for h in range(HOURS_PER_DAY)]


def encode_key(day, hour) -> str:
    """Return the "{day}_{hour}" key. Raises ValidationError when out of range."""
    return str(GridKey.of(day, hour))


def decode_key(key) -> GridKey | None:
    """Parse a "{day}_{hour}" key.

    Returns None (never raises) for malformed keys: wrong segment count,
    non-integer segments or out-of-range values. Callers probe keys from
    half-edited UI state and rely on this.
    """
    if not isinstance(key, str):
        return None
    parts = key.split(GRID_KEY_SEPARATOR)
    if len(parts) != 2:
        return None
    if not all(_SEGMENT.fullmatch(p) for p in parts):
        return None
    day, hour = int(parts[0]), int(parts[1])
    if day >= DAYS_PER_WEEK or hour >= HOURS_PER_DAY:
        return None
    return GridKey(day, hour)


def _coerce_key(key) -> GridKey:
    if isinstance(key, str):
        decoded = decode_key(key)
        if decoded is None:
            raise ValidationError(f"Invalid grid key: {key!r}", field="key")
        return decoded
    if isinstance(key, tuple) and len(key) == 2:
        return GridKey.of(*key)
    raise ValidationError(f"Invalid grid key: {key!r}", field="key")


def _iter_cells(grid: dict):
    """Yield (GridKey, value) from a nested day->hour->value mapping or a
    flat mapping keyed by GridKey, (day, hour) tuples or "day_hour" strings."""
    for outer, inner in grid.items():
        if isinstance(inner, dict):
            for hour, value in inner.items():
                yield GridKey.of(outer, hour), value
        else:
            yield _coerce_key(outer), inner


def to_slot_list(grid: dict, location_id: str = "") -> list[ConsumptionSlot]:
    """Expand a sparse grid into ConsumptionSlot records, ordered by day then hour.

    Cells the caller never set (absent or None) are omitted, not zero-filled.
    """
    slots = [
        ConsumptionSlot(location_id=location_id, day_of_week=key.day,
                        hour=key.hour, consumption_kwh=float(value))
        for key, value in _iter_cells(grid)
        if value is not None
    ]
    slots.sort(key=lambda s: (s.day_of_week, s.hour))
    return slots


def completion_stats(slots: list[ConsumptionSlot]) -> dict:
    """Profile completeness.

    is_complete requires all 168 slots AND at least one positive value:
    an all-zero week reads the same as a never-entered one.
    """
    actual_count = len(slots)
    values_present = sum(1 for s in slots if s.consumption_kwh > 0)
    return {
        "actual_count": actual_count,
        "values_present_count": values_present,
        "completion_percentage": values_present / SLOTS_PER_WEEK * 100,
        "is_complete": actual_count == SLOTS_PER_WEEK and values_present > 0,
    }


def profile_stats(slots: list[ConsumptionSlot]) -> dict:
    """Weekly total, daily average and hourly peak plus completion fields."""
    stats = completion_stats(slots)
    if not slots:
        stats.update({"weekly_total": 0.0, "daily_average": 0.0,
                      "hourly_peak": 0.0})
        return stats
    weekly_total = sum(s.consumption_kwh for s in slots)
    stats.update({
        "weekly_total": weekly_total,
        "daily_average": weekly_total / DAYS_PER_WEEK,
        "hourly_peak": max(s.consumption_kwh for s in slots),
    })
    return stats


# ---------------------------------------------------------------------------
# Full-grid helpers (dict[GridKey, float], all 168 cells)
# ---------------------------------------------------------------------------

def empty_grid() -> dict[GridKey, float]:
    return {key: 0.0 for key in ALL_KEYS}


def slots_to_grid(slots: list[ConsumptionSlot]) -> dict[GridKey, float]:
    """Full 168-cell grid; cells without a slot are 0."""
    grid = empty_grid()
    for slot in slots:
        grid[GridKey(slot.day_of_week, slot.hour)] = slot.consumption_kwh
    return grid


def grid_to_profile(grid: dict, location_id: str) -> list[ConsumptionSlot]:
    """Build the full 168-slot batch for a clear-and-rewrite save.

    Missing cells become 0 so a save never leaves stale slots behind.
    """
    full = empty_grid()
    for key, value in _iter_cells(grid):
        full[key] = float(value) if value is not None else 0.0
    return to_slot_list(full, location_id)


def get_value(grid: dict, day: int, hour: int) -> float:
    return grid.get(GridKey.of(day, hour), 0.0) or 0.0


def set_value(grid: dict, day: int, hour: int, value: float) -> dict:
    """Return a new grid with one cell set (negative values clamp to 0)."""
    new_grid = dict(grid)
    new_grid[GridKey.of(day, hour)] = max(0.0, value)
    return new_grid


def copy_day_pattern(grid: dict, from_day: int, to_day: int) -> dict:
    """Copy all 24 hours of `from_day` onto `to_day`."""
    validate_day_of_week(from_day)
    validate_day_of_week(to_day)
    new_grid = dict(grid)
    for hour in range(HOURS_PER_DAY):
        new_grid[GridKey(to_day, hour)] = grid.get(GridKey(from_day, hour), 0.0)
    return new_grid


def fill_hour_pattern(grid: dict, hour: int, value: float) -> dict:
    """Set the same hour on every day of the week."""
    validate_hour(hour)
    new_grid = dict(grid)
    for day in range(DAYS_PER_WEEK):
        new_grid[GridKey(day, hour)] = max(0.0, value)
    return new_grid


def fill_range(grid: dict, start_day: int, start_hour: int,
               end_day: int, end_hour: int, value: float) -> dict:
    """Fill every cell from (start_day, start_hour) to (end_day, end_hour) inclusive."""
    start = GridKey.of(start_day, start_hour)
    end = GridKey.of(end_day, end_hour)
    new_grid = dict(grid)
    for key in ALL_KEYS:
        if start <= key <= end:
            new_grid[key] = max(0.0, value)
    return new_grid


def default_week_pattern() -> dict[GridKey, float]:
    """Typical household week: weekday curve Mon-Fri, weekend curve Sat/Sun."""
    grid = {}
    for day in range(DAYS_PER_WEEK):
        pattern = WEEKEND_PATTERN if day in (0, 6) else WEEKDAY_PATTERN
        for hour in range(HOURS_PER_DAY):
            grid[GridKey(day, hour)] = pattern[hour]
    return grid


def daily_totals(grid: dict) -> list[float]:
    """Sum per day, index 0 = Sunday."""
    totals = [0.0] * DAYS_PER_WEEK
    for key, value in grid.items():
        totals[key.day] += value or 0.0
    return totals


def weekly_total(grid: dict) -> float:
    return sum(value or 0.0 for value in grid.values())


def is_valid_consumption(value: float) -> bool:
    return value == value and 0 <= value <= MAX_CONSUMPTION_KWH


def parse_consumption_value(text) -> float:
    """Parse user input ("1,5" or "1.5"); invalid or out-of-range gives 0."""
    value = parse_number(text)
    return value if is_valid_consumption(value) else 0.0


def grid_to_frame(grid: dict) -> pd.DataFrame:
    """24 x 7 DataFrame (index = hour, columns = day names, Sunday first)."""
    frame = pd.DataFrame(0.0, index=range(HOURS_PER_DAY), columns=DAY_NAMES)
    for key, value in grid.items():
        frame.iat[key.hour, key.day] = value or 0.0
    frame.index.name = "hour"
    return frame
