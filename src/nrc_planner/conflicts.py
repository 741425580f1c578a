"""Selection state and conflict set maintenance."""

import logging
from collections.abc import Iterable
from itertools import combinations

from .graph import ConflictGraph, build_from_catalog
from .models import Catalog, GenerationResult

logger = logging.getLogger(__name__)


def recompute_conflicts(selection: Iterable[str], graph: ConflictGraph) -> frozenset[str]:
    """Compute the sections blocked by a selection.

    The conflict set is the union of the neighbors of every selected
    section, minus the selected sections themselves. A selected section is
    never reported as blocked, even when it is adjacent to another selected
    one; use find_violations() to detect that case.

    Args:
        selection: Selected NRCs
        graph: Conflict graph snapshot

    Returns:
        Blocked NRCs
    """
    selected = set(selection)
    blocked: set[str] = set()
    for nrc in selected:
        blocked.update(graph.neighbors(nrc))
    return frozenset(blocked - selected)


def find_violations(selection: Iterable[str], graph: ConflictGraph) -> list[tuple[str, str]]:
    """Find adjacent pairs inside a selection.

    Returns:
        Sorted (u, v) pairs with u < v that should never be selected together
    """
    selected = sorted(set(selection))
    return [(u, v) for u, v in combinations(selected, 2) if graph.has_edge(u, v)]


def is_compatible(candidate: str, picked: Iterable[str], graph: ConflictGraph) -> bool:
    """Check that a candidate has no edge to any already picked section."""
    neighbors = graph.neighbors(candidate)
    return not any(nrc in neighbors for nrc in picked)


class ScheduleState:
    """Owned container for the loaded catalog, its graph and the selection.

    The selection and its conflict set are always replaced together, so a
    reader never sees one updated without the other. The graph is rebuilt
    only by load(); reset() clears everything, e.g. on sign-out.
    """

    def __init__(self, catalog: Catalog | None = None) -> None:
        self._catalog = Catalog()
        self._graph = ConflictGraph()
        self._selected: frozenset[str] = frozenset()
        self._conflicts: frozenset[str] = frozenset()
        self.last_result: GenerationResult | None = None
        if catalog is not None:
            self.load(catalog)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def graph(self) -> ConflictGraph:
        return self._graph

    @property
    def selected(self) -> frozenset[str]:
        return self._selected

    @property
    def conflicts(self) -> frozenset[str]:
        return self._conflicts

    def load(self, catalog: Catalog) -> None:
        """Replace the catalog, rebuild the graph and start an empty selection."""
        graph = build_from_catalog(catalog)
        self._catalog = catalog
        self._graph = graph
        self._set_selection(frozenset())
        self.last_result = None

    def reset(self) -> None:
        """Drop all loaded data and selection state."""
        self._catalog = Catalog()
        self._graph = ConflictGraph()
        self._set_selection(frozenset())
        self.last_result = None

    def _set_selection(self, selection: frozenset[str]) -> None:
        conflicts = recompute_conflicts(selection, self._graph)
        self._selected, self._conflicts = selection, conflicts

    def toggle(self, nrc: str) -> bool:
        """Add an NRC to the selection if absent, remove it if present.

        No blocking is performed: callers that must respect conflicts
        should check is_blocked() first.

        Returns:
            True if the NRC is selected after the call
        """
        if nrc in self._selected:
            self._set_selection(self._selected - {nrc})
            return False

        if nrc in self._conflicts:
            logger.debug(f"Selecting blocked section {nrc}")
        self._set_selection(self._selected | {nrc})
        return True

    def is_blocked(self, nrc: str) -> bool:
        return nrc in self._conflicts

    def apply_selection(self, target: Iterable[str]) -> None:
        """Reach a target selection by toggling off and then toggling on."""
        target = set(target)
        for nrc in sorted(self._selected - target):
            self.toggle(nrc)
        for nrc in sorted(target - self._selected):
            self.toggle(nrc)

    def apply_result(self, result: GenerationResult) -> bool:
        """Record a generation result and apply its pick when it succeeded.

        Returns:
            True if the selection was changed to the generated pick
        """
        self.last_result = result
        if not result.success:
            logger.warning(f"Generation result not applied: {result.reason}")
            return False
        self.apply_selection(result.picked)
        return True

    def violations(self) -> list[tuple[str, str]]:
        """Adjacent pairs present in the current selection."""
        return find_violations(self._selected, self._graph)
