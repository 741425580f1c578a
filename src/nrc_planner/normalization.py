"""Time and day normalization utilities.

Meeting times arrive from spreadsheets in several shapes: clock strings
("8:30", "08:30"), packed integers or strings (830, "1430"), day
fractions (0.354166 for 08:30) and datetime-like cells. Everything is
reduced to an integer minute of day so meetings can be compared.
"""

import unicodedata
from datetime import datetime, time

import pandas as pd

from .constants import DAYS, MINUTES_PER_DAY

# Prefixes recognized for each canonical day code, checked in order
DAY_PREFIXES = [
    ("LUN", ("LU",)),
    ("MAR", ("MA",)),
    ("MIE", ("MI",)),
    ("JUE", ("JU",)),
    ("VIE", ("VI",)),
    ("SAB", ("SA",)),
    ("DOM", ("DO",)),
]


def _clamp(minutes: int) -> int:
    return min(max(minutes, 0), MINUTES_PER_DAY - 1)


def _packed_to_minutes(value: float) -> int:
    """Interpret a number as packed hours and minutes (830 -> 08:30)."""
    number = int(value)
    return 60 * (number // 100) + number % 100


def _number_to_minutes(value: float) -> int:
    if value < 0:
        return 0
    if value < 1:
        # Spreadsheet convention: fraction of a 24-hour day
        return round(value * MINUTES_PER_DAY)
    return _packed_to_minutes(value)


def _safe_int(text: str) -> int | None:
    try:
        return int(float(text))
    except ValueError:
        return None


def _string_to_minutes(text: str) -> int:
    text = text.strip()
    if not text:
        return 0

    if ":" in text:
        parts = text.split(":")
        hours = _safe_int(parts[0])
        minutes = _safe_int(parts[1]) if len(parts) > 1 and parts[1] else 0
        if hours is None:
            return 0
        return 60 * hours + (minutes or 0)

    try:
        return _number_to_minutes(float(text))
    except ValueError:
        return 0


def to_minutes(value) -> int:
    """Convert a time value to minutes since midnight.

    Supported inputs:
    - "H:MM" / "HH:MM" (seconds, if present, are ignored)
    - packed strings or integers: "830" -> 510, 1430 -> 870
    - numbers in [0, 1): fraction of a day, e.g. 0.5 -> 720
    - datetime, pandas Timestamp or time objects

    Malformed or empty input yields 0. Results are clamped to [0, 1440).

    Args:
        value: Raw time value

    Returns:
        Minute of day
    """
    if value is None:
        return 0
    if isinstance(value, (datetime, time)):
        return value.hour * 60 + value.minute
    if isinstance(value, str):
        return _clamp(_string_to_minutes(value))
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if pd.isna(value):
            return 0
        return _clamp(_number_to_minutes(value))
    # numpy scalars and other number-like values
    try:
        if pd.isna(value):
            return 0
        return _clamp(_number_to_minutes(float(value)))
    except (TypeError, ValueError):
        return _clamp(_string_to_minutes(str(value)))


def format_minutes(minutes: int) -> str:
    """Format a minute of day as 'HH:MM'."""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def normalize_time_string(value) -> str:
    """Normalize any supported time value to an 'HH:MM' string."""
    return format_minutes(to_minutes(value))


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_day(value) -> str:
    """Normalize a Spanish day name or abbreviation to a canonical code.

    "lunes", "Lu", "LUN" -> "LUN"; "miércoles", "MIE" -> "MIE"; etc.
    Unrecognized values are returned stripped and uppercased so callers
    can detect them with is_known_day().

    Args:
        value: Raw day value

    Returns:
        One of DAYS, or the uppercased input if it is not recognized
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""

    text = str(value).strip().upper()
    folded = _strip_accents(text)

    for code, prefixes in DAY_PREFIXES:
        if folded.startswith(prefixes):
            return code

    return text


def is_known_day(code: str) -> bool:
    """Check if a day code is one of the canonical codes."""
    return code in DAYS
