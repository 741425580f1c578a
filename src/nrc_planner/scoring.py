"""Soft preference penalties for generated schedules.

Penalties are non-negative integers; lower is better. Hard constraints
(no adjacent sections) are enforced by the generator, not scored here.
"""

from collections import defaultdict
from collections.abc import Iterable

from .constants import COMPACT_DAY_LIMIT, DAYS, PENALTY_WEIGHTS, is_in_shift
from .models import Catalog, GeneratorPreferences, Meeting


def collect_meetings(pick: Iterable[str], catalog: Catalog) -> list[Meeting]:
    """All meetings of the picked sections."""
    meetings: list[Meeting] = []
    for nrc in pick:
        meetings.extend(catalog.meetings_for(nrc))
    return meetings


def meetings_by_day(meetings: Iterable[Meeting]) -> dict[str, list[Meeting]]:
    """Group meetings on known days, each day sorted by start minute."""
    grouped: dict[str, list[Meeting]] = defaultdict(list)
    for meeting in meetings:
        if meeting.day in DAYS:
            grouped[meeting.day].append(meeting)
    return {
        day: sorted(grouped[day], key=lambda m: (m.start, m.end))
        for day in DAYS
        if day in grouped
    }


def day_gaps(day_meetings: list[Meeting]) -> list[int]:
    """Idle minutes between consecutive meetings of one sorted day."""
    gaps = []
    latest_end = None
    for meeting in day_meetings:
        if latest_end is not None and meeting.start > latest_end:
            gaps.append(meeting.start - latest_end)
        latest_end = meeting.end if latest_end is None else max(latest_end, meeting.end)
    return gaps


def shift_penalty(meetings: Iterable[Meeting], preferences: GeneratorPreferences) -> int:
    """10 points for each meeting on a known day starting outside the preferred shift."""
    weight = PENALTY_WEIGHTS["shift_mismatch"]
    return sum(
        weight
        for meeting in meetings
        if meeting.day in DAYS
        and not is_in_shift(meeting.start, preferences.preferred_shift)
    )


def gap_penalty(by_day: dict[str, list[Meeting]], preferences: GeneratorPreferences) -> int:
    """Penalty for idle time between classes.

    Every gap costs floor(gap / 15). Gaps above max_gap_minutes also cost
    2 points per extra minute.
    """
    penalty = 0
    max_gap = preferences.max_gap_minutes
    for day_meetings in by_day.values():
        for gap in day_gaps(day_meetings):
            penalty += gap // PENALTY_WEIGHTS["gap_granularity"]
            if max_gap is not None and gap > max_gap:
                penalty += PENALTY_WEIGHTS["gap_overflow"] * (gap - max_gap)
    return penalty


def compactness_penalty(
    by_day: dict[str, list[Meeting]], preferences: GeneratorPreferences
) -> int:
    """Penalty for long days and for using more than three days."""
    if not preferences.prefer_compact_days:
        return 0

    penalty = 0
    for day_meetings in by_day.values():
        if len(day_meetings) >= 2:
            span = max(m.end for m in day_meetings) - day_meetings[0].start
            penalty += span // PENALTY_WEIGHTS["span_granularity"]

    days_used = len(by_day)
    if days_used > COMPACT_DAY_LIMIT:
        penalty += PENALTY_WEIGHTS["extra_day"] * (days_used - COMPACT_DAY_LIMIT)
    return penalty


def score_pick(
    pick: Iterable[str],
    catalog: Catalog,
    preferences: GeneratorPreferences,
    unfilled: int = 0,
) -> tuple[int, dict[str, int]]:
    """Score a pick against the soft preferences.

    Args:
        pick: Picked NRCs
        catalog: Catalog providing the meetings
        preferences: Soft preferences
        unfilled: Number of requested subjects left without a section

    Returns:
        Tuple of (total penalty, penalty by component)
    """
    meetings = collect_meetings(pick, catalog)
    by_day = meetings_by_day(meetings)

    breakdown = {
        "shift": shift_penalty(meetings, preferences),
        "gaps": gap_penalty(by_day, preferences),
        "compactness": compactness_penalty(by_day, preferences),
        "unfilled": PENALTY_WEIGHTS["unfilled_subject"] * unfilled,
    }
    return sum(breakdown.values()), breakdown
