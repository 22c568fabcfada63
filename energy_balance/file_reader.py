import os
from itertools import islice

import chardet
import pandas as pd
from rich.console import Console

from energy_balance.models import ConsumptionSlot, InsolationSample
from energy_balance.normalizer import samples_from_frame, slots_from_frame

console = Console()

COLUMN_ALIASES = {
    "day": "day_of_week",
    "weekday": "day_of_week",
    "consumption": "consumption_kwh",
    "insolation": "insolation_percentage",
    "insolation_pct": "insolation_percentage",
}

SLOT_COLUMNS = ["day_of_week", "hour", "consumption_kwh"]
SAMPLE_COLUMNS = ["date", "hour", "insolation_percentage"]

DELIMITER_NAMES = {";": "semicolon", ",": "comma", "\t": "tab", "|": "pipe"}


def clean_path(path: str) -> str:
    """Clean file path from drag-and-drop (strip quotes and whitespace)."""
    return path.strip().strip('"').strip("'")


def detect_encoding(file_path: str) -> str:
    """Guess the text encoding with chardet (Excel exports are often cp1250)."""
    with open(file_path, "rb") as f:
        raw = f.read(64_000)
    guess = chardet.detect(raw)
    encoding = guess["encoding"] or "utf-8"
    console.print(f"  Encoding: [bold]{encoding}[/bold] "
                  f"({(guess['confidence'] or 0.0):.0%} sure)")
    return encoding


def detect_delimiter(file_path: str, encoding: str) -> str:
    """Pick the delimiter that splits every sampled line into the same,
    largest number of fields. Semicolon wins ties, so decimal commas in
    ';'-separated files do not confuse it.
    """
    with open(file_path, "r", encoding=encoding, errors="replace") as f:
        lines = [line.rstrip("\r\n") for line in islice(f, 20)]
    lines = [line for line in lines if line.strip()]

    best, best_width = ",", 1
    for delim in DELIMITER_NAMES:
        widths = {len(line.split(delim)) for line in lines}
        if len(widths) == 1:
            width = widths.pop()
            if width > best_width:
                best, best_width = delim, width

    if best_width == 1:
        console.print("  [yellow]Could not detect delimiter, defaulting to comma[/yellow]")
        return ","
    console.print(f"  Delimiter: [bold]{DELIMITER_NAMES[best]}[/bold] ({best_width} columns)")
    return best


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    names = []
    for col in df.columns:
        name = str(col).strip().lower().replace(" ", "_").replace("-", "_")
        names.append(COLUMN_ALIASES.get(name, name))
    df.columns = names
    return df


def load_table(file_path: str) -> pd.DataFrame:
    """Load a CSV or XLSX file with a header row. All cells come back as strings."""
    file_path = clean_path(file_path)

    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1].lower()
    console.print(f"  File: {os.path.basename(file_path)}")

    if ext in (".xlsx", ".xls"):
        df = pd.read_excel(file_path, header=0, dtype=str).fillna("")
    elif ext in (".csv", ".txt", ".tsv"):
        encoding = detect_encoding(file_path)
        delimiter = detect_delimiter(file_path, encoding)
        df = pd.read_csv(
            file_path,
            sep=delimiter,
            encoding=encoding,
            header=0,
            dtype=str,
            keep_default_na=False,
        )
    else:
        raise ValueError(f"Unsupported file format: {ext}")

    df = _normalize_columns(df)
    console.print(f"  Rows: [bold]{len(df)}[/bold], Columns: [bold]{len(df.columns)}[/bold]")
    return df


def _require_columns(df: pd.DataFrame, required: list[str], what: str):
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{what} file is missing column(s): {', '.join(missing)}")


def read_consumption_slots(file_path: str, location_id: str) -> list[ConsumptionSlot]:
    """Read a weekly profile table (day_of_week, hour, consumption_kwh)."""
    df = load_table(file_path)
    _require_columns(df, SLOT_COLUMNS, "Consumption")
    slots = slots_from_frame(df, location_id)
    console.print(f"  Consumption slots: [bold]{len(slots)}[/bold]/168")
    return slots


def read_insolation_samples(file_path: str, city: str | None = None) -> list[InsolationSample]:
    """Read insolation samples (city, date, hour, insolation_percentage)."""
    df = load_table(file_path)
    _require_columns(df, SAMPLE_COLUMNS, "Insolation")
    if "city" not in df.columns and city is None:
        raise ValueError("Insolation file has no city column and no city was given")
    samples = samples_from_frame(df, city)
    console.print(f"  Insolation samples: [bold]{len(samples)}[/bold]")
    return samples
