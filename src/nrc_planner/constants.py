"""Constants for conflict detection and schedule generation."""

from enum import Enum

# Canonical weekday codes, Monday first
DAYS = ["LUN", "MAR", "MIE", "JUE", "VIE", "SAB", "DOM"]

DAY_LABELS = {
    "LUN": "Lunes",
    "MAR": "Martes",
    "MIE": "Miércoles",
    "JUE": "Jueves",
    "VIE": "Viernes",
    "SAB": "Sábado",
    "DOM": "Domingo",
}

MINUTES_PER_DAY = 24 * 60


class Shift(str, Enum):
    """Preferred time-of-day window."""

    ANY = "any"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


# Shift windows as [start, end) minute-of-day ranges
SHIFT_WINDOWS: dict[Shift, tuple[int, int]] = {
    Shift.MORNING: (6 * 60, 12 * 60),
    Shift.AFTERNOON: (12 * 60, 18 * 60),
    Shift.EVENING: (18 * 60, 22 * 60 + 30),
}

# Number of randomized restarts per generation
DEFAULT_RESTARTS = 40

# Restart perturbation: chance of swapping two neighbouring subjects, and
# the largest random offset (minutes) added to a candidate's earliest start
SUBJECT_SWAP_PROBABILITY = 0.25
CANDIDATE_JITTER_MINUTES = 180

# Soft preference penalty weights
PENALTY_WEIGHTS = {
    "shift_mismatch": 10,  # per meeting starting outside the preferred shift
    "gap_overflow": 2,  # per minute above max_gap_minutes
    "gap_granularity": 15,  # every gap costs floor(gap / 15)
    "span_granularity": 30,  # compact days: floor(span / 30) per busy day
    "extra_day": 8,  # compact days: per day used beyond COMPACT_DAY_LIMIT
    "unfilled_subject": 1000,  # per requested subject left without a section
}

COMPACT_DAY_LIMIT = 3

# Edge classification labels used in exports
EDGE_LABELS = {
    "same_subject": "Misma materia",
    "time_overlap": "Choque horario",
}


def get_shift_window(shift: Shift) -> tuple[int, int] | None:
    """Get the minute window for a shift, or None for Shift.ANY."""
    return SHIFT_WINDOWS.get(shift)


def is_in_shift(minute: int, shift: Shift) -> bool:
    """Check whether a start minute falls inside a shift window.

    Args:
        minute: Minute of day
        shift: Preferred shift

    Returns:
        True if the shift is ANY or the minute is inside [start, end)
    """
    window = get_shift_window(shift)
    if window is None:
        return True
    start, end = window
    return start <= minute < end
