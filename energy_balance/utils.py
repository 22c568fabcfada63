"""Shared utility functions for the energy balance tool."""

import re
from datetime import date


def build_output_filename(site_name: str, suffix: str, ext: str,
                          today: date | None = None) -> str:
    """Build a standardized output filename from a location name.

    Args:
        site_name: The location name to include in the filename.
        suffix: Descriptive suffix (e.g. "EnergyBalance").
        ext: File extension without dot (e.g. "csv", "xlsx").
        today: Date stamp; defaults to the current date.

    Returns:
        Filename string like "20260208_Dom_Warszawa_EnergyBalance.csv".
    """
    date_str = (today or date.today()).strftime("%Y%m%d")
    safe_name = re.sub(r'[^\w\s-]', '', site_name).strip()
    safe_name = re.sub(r'\s+', '_', safe_name) or "location"
    return f"{date_str}_{safe_name}_{suffix}.{ext}"
