"""Calibration constants for the energy balance engine.

All tunable numbers live here so a recalibration touches one place.
Percent-like values crossing the engine boundary are always 0-100.
"""

# === Production model ===

# Combined system losses (inverter, wiring, soiling, temperature).
# Flat factor, not an irradiance/temperature model.
SYSTEM_EFFICIENCY = 0.85
DEFAULT_EFFICIENCY_PCT = SYSTEM_EFFICIENCY * 100

MAX_PV_POWER_KWP = 100.0          # prosumer-scale ceiling
MAX_CONSUMPTION_KWH = 100.0       # per hour
MIN_SYSTEM_LOSSES_PCT = 1.0
MAX_SYSTEM_LOSSES_PCT = 100.0

# === Weekly grid shape ===

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24
SLOTS_PER_WEEK = DAYS_PER_WEEK * HOURS_PER_DAY
GRID_KEY_SEPARATOR = "_"

# Sunday = 0, matching the consumption-slot convention
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday",
             "Thursday", "Friday", "Saturday"]

# === Reporting ===

CSV_DECIMALS = 2
CSV_COLUMNS = ["date", "hour", "production_kwh", "consumption_kwh",
               "balance_kwh"]
MAX_REPORT_DAYS = 31
BALANCED_THRESHOLD_KWH = 0.1
PRODUCTION_DECIMALS = 3

# === MWE planning schedule ===

MWE_FUTURE_DAYS_LIMIT = 30
MWE_MAX_VALUE_MW = 9.999
MWE_MAX_FILENAME_LENGTH = 50
MWE_HEADER = "DATA I CZAS OD;PPLAN;PAUTO"
