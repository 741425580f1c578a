"""Automatic schedule generation.

The generator picks at most one section per requested subject so that no
two picked sections are adjacent in the conflict graph, trying to keep the
soft preference penalty low. It is a greedy heuristic with randomized
restarts, not an exhaustive search.
"""

import logging
import random
from collections.abc import Iterable

from .conflicts import find_violations, is_compatible
from .constants import (
    CANDIDATE_JITTER_MINUTES,
    DAYS,
    DEFAULT_RESTARTS,
    MINUTES_PER_DAY,
    SUBJECT_SWAP_PROBABILITY,
    Shift,
    is_in_shift,
)
from .graph import ConflictGraph
from .models import (
    Catalog,
    GenerationResult,
    GeneratorPreferences,
    UnfilledReason,
    UnfilledSubject,
)
from .scoring import score_pick

logger = logging.getLogger(__name__)


class ScheduleGenerator:
    """Greedy multi-restart schedule generator.

    Each restart walks the requested subjects from the most constrained
    (highest aggregate degree of its sections) to the least and adds the
    first candidate section compatible with everything already picked.
    The first restart uses the plain greedy order; later restarts swap
    neighbouring subjects and jitter candidate starts at random. The
    lowest scoring restart wins.

    The random source can be injected for reproducible runs:

        generator = ScheduleGenerator(graph, catalog, rng=random.Random(7))
        result = generator.generate(["MAT101", "FIS101"])
    """

    def __init__(
        self,
        graph: ConflictGraph,
        catalog: Catalog,
        rng: random.Random | None = None,
        restarts: int = DEFAULT_RESTARTS,
    ) -> None:
        """Initialize the generator.

        Args:
            graph: Conflict graph snapshot to respect
            catalog: Catalog the graph was built from
            rng: Random source; a fresh unseeded one when omitted
            restarts: Number of randomized restarts per generation
        """
        self.graph = graph
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.restarts = max(1, restarts)

    def _first_meeting_start(self, nrc: str) -> int | None:
        meetings = [m for m in self.catalog.meetings_for(nrc) if m.day in DAYS]
        if not meetings:
            return None
        first = min(meetings, key=lambda m: (DAYS.index(m.day), m.start))
        return first.start

    def _earliest_start(self, nrc: str) -> int:
        return min(
            (m.start for m in self.catalog.meetings_for(nrc) if m.day in DAYS),
            default=MINUTES_PER_DAY,
        )

    def candidate_key(self, nrc: str, preferences: GeneratorPreferences) -> tuple[int, int]:
        """Sort key of a candidate: (0 if it matches the shift else 1, earliest start).

        Sections without meetings only match when any shift is accepted.
        """
        first_start = self._first_meeting_start(nrc)
        if first_start is None:
            matches = preferences.preferred_shift == Shift.ANY
        else:
            matches = is_in_shift(first_start, preferences.preferred_shift)
        return (0 if matches else 1, self._earliest_start(nrc))

    def order_candidates(
        self,
        subject_code: str,
        preferences: GeneratorPreferences,
        perturb: bool = False,
    ) -> list[str]:
        """Order a subject's sections for greedy selection.

        Sections whose first meeting starts inside the preferred shift come
        first, then by earliest start. With perturb, a random offset of up
        to CANDIDATE_JITTER_MINUTES is added to each start, so sections
        with nearby starts may trade places; shift matches still lead.
        """
        sections = self.catalog.sections_for_subject(subject_code)
        keys = {nrc: self.candidate_key(nrc, preferences) for nrc in sections}
        if not perturb:
            return sorted(sections, key=lambda nrc: keys[nrc])

        jittered = {
            nrc: (matches, start + self.rng.uniform(0, CANDIDATE_JITTER_MINUTES))
            for nrc, (matches, start) in keys.items()
        }
        return sorted(sections, key=lambda nrc: jittered[nrc])

    def subject_weight(self, subject_code: str) -> int:
        """Aggregate degree of a subject's sections (higher = more constrained)."""
        return sum(
            self.graph.degree(nrc) for nrc in self.catalog.sections_for_subject(subject_code)
        )

    def subject_order(
        self, subjects: list[str], weights: dict[str, int], perturb: bool = False
    ) -> list[str]:
        """Order subjects from the most to the least constrained.

        Equal weights are broken randomly. With perturb, each pair of
        neighbouring subjects is then swapped with SUBJECT_SWAP_PROBABILITY,
        so the order stays degree-biased but differs between restarts.
        """
        tie_breaks = {subject: self.rng.random() for subject in subjects}
        order = sorted(subjects, key=lambda s: (-weights[s], tie_breaks[s]))
        if perturb:
            for i in range(len(order) - 1):
                if self.rng.random() < SUBJECT_SWAP_PROBABILITY:
                    order[i], order[i + 1] = order[i + 1], order[i]
        return order

    def _run_restart(
        self,
        mandatory: frozenset[str],
        subjects: list[str],
        weights: dict[str, int],
        preferences: GeneratorPreferences,
        perturb: bool,
    ) -> set[str]:
        pick = set(mandatory)
        for subject in self.subject_order(subjects, weights, perturb):
            for nrc in self.order_candidates(subject, preferences, perturb):
                if is_compatible(nrc, pick, self.graph):
                    pick.add(nrc)
                    break
        return pick

    def _filled_subjects(self, pick: Iterable[str]) -> set[str]:
        return {
            subject
            for subject in (self.catalog.subject_of(nrc) for nrc in pick)
            if subject is not None
        }

    def _unfilled_report(
        self,
        requested: list[str],
        pick: set[str],
        mandatory: frozenset[str],
    ) -> list[UnfilledSubject]:
        filled = self._filled_subjects(pick)
        report = []
        for subject in requested:
            if subject in filled:
                continue
            sections = self.catalog.sections_for_subject(subject)
            if not sections:
                reason = UnfilledReason.NO_SECTIONS
            elif not any(is_compatible(nrc, mandatory, self.graph) for nrc in sections):
                reason = UnfilledReason.INCOMPATIBLE_WITH_FIXED
            else:
                reason = UnfilledReason.NOT_PLACED
            report.append(UnfilledSubject(subject, reason))
        return report

    def generate(
        self,
        subjects: Iterable[str],
        preferences: GeneratorPreferences | None = None,
        selection: Iterable[str] = (),
    ) -> GenerationResult:
        """Generate a conflict-free pick for the requested subjects.

        Args:
            subjects: Subject codes to schedule
            preferences: Soft preferences; defaults when omitted
            selection: Current selection, kept when
                preferences.respect_fixed_selection is set

        Returns:
            GenerationResult with the full target selection and its score.
            If the fixed selection is itself conflicting, the result is
            unsuccessful, carries the conflicting pairs and leaves the
            selection unchanged.
        """
        preferences = preferences or GeneratorPreferences()
        requested = list(dict.fromkeys(subjects))
        current = frozenset(selection)
        mandatory = current if preferences.respect_fixed_selection else frozenset()

        violations = find_violations(mandatory, self.graph)
        if violations:
            pairs = ", ".join(f"{u}-{v}" for u, v in violations)
            reason = f"Fixed selection contains conflicting sections: {pairs}"
            logger.warning(reason)
            score, breakdown = score_pick(current, self.catalog, preferences)
            return GenerationResult(
                picked=current,
                score=score,
                success=False,
                reason=reason,
                breakdown=breakdown,
                conflicting_pairs=violations,
            )

        already_filled = self._filled_subjects(mandatory)
        open_subjects = [s for s in requested if s not in already_filled]
        weights = {s: self.subject_weight(s) for s in open_subjects}

        best_pick = set(mandatory)
        best_score, best_breakdown = score_pick(
            best_pick, self.catalog, preferences, unfilled=len(open_subjects)
        )
        baseline_score = best_score

        if open_subjects:
            for restart in range(self.restarts):
                pick = self._run_restart(
                    mandatory, open_subjects, weights, preferences, perturb=restart > 0
                )
                unfilled = len(open_subjects) - (len(pick) - len(mandatory))
                score, breakdown = score_pick(
                    pick, self.catalog, preferences, unfilled=unfilled
                )
                logger.debug(
                    f"Restart {restart + 1}/{self.restarts}: "
                    f"{len(pick)} sections, score {score}"
                )
                if score < best_score:
                    best_pick, best_score, best_breakdown = pick, score, breakdown

        unfilled_report = self._unfilled_report(requested, best_pick, mandatory)
        logger.info(
            f"Generated schedule: {len(best_pick)} sections, score {best_score} "
            f"(baseline {baseline_score}), {len(unfilled_report)} subjects unfilled"
        )

        return GenerationResult(
            picked=frozenset(best_pick),
            score=best_score,
            success=True,
            breakdown=best_breakdown,
            unfilled=unfilled_report,
            restarts=self.restarts if open_subjects else 0,
        )
