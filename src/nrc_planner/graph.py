"""Conflict graph construction.

Vertices are section NRCs. Two sections are adjacent when they belong to
the same subject or when any of their meetings overlap on the same day.
"""

import heapq
import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from itertools import combinations

from .constants import DAYS
from .models import Catalog, EdgeKind, EdgeRecord, Meeting, Section
from .normalization import format_minutes

logger = logging.getLogger(__name__)


class ConflictGraph:
    """Immutable undirected incompatibility graph over NRCs.

    Each build produces a new instance; consumers may share one snapshot
    freely since no method mutates it.
    """

    def __init__(self, adjacency: dict[str, set[str]] | None = None) -> None:
        adjacency = adjacency or {}
        self._adjacency: dict[str, frozenset[str]] = {
            vertex: frozenset(neighbors) for vertex, neighbors in adjacency.items()
        }

    def __len__(self) -> int:
        return len(self._adjacency)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._adjacency

    def __iter__(self) -> Iterator[str]:
        return iter(self._adjacency)

    @property
    def vertices(self) -> list[str]:
        """Vertices in insertion (ingestion) order."""
        return list(self._adjacency)

    def neighbors(self, vertex: str) -> frozenset[str]:
        """Neighbors of a vertex; empty for unknown vertices."""
        return self._adjacency.get(vertex, frozenset())

    def degree(self, vertex: str) -> int:
        return len(self.neighbors(vertex))

    def has_edge(self, u: str, v: str) -> bool:
        return v in self.neighbors(u)

    @property
    def edge_count(self) -> int:
        return sum(len(n) for n in self._adjacency.values()) // 2

    def edges(self) -> list[tuple[str, str]]:
        """Unique edges as sorted (u, v) pairs with u < v."""
        result = {
            (u, v) if u < v else (v, u)
            for u, neighbors in self._adjacency.items()
            for v in neighbors
        }
        return sorted(result)

    def to_dict(self) -> dict[str, list[str]]:
        """Adjacency lists for JSON serialization."""
        return {vertex: sorted(neighbors) for vertex, neighbors in self._adjacency.items()}


def _connect(adjacency: dict[str, set[str]], u: str, v: str) -> None:
    if u == v:
        return
    adjacency[u].add(v)
    adjacency[v].add(u)


def _add_same_subject_edges(
    adjacency: dict[str, set[str]], sections: Iterable[Section]
) -> None:
    """Connect every pair of sections that share a subject code."""
    by_subject: dict[str, list[str]] = defaultdict(list)
    for section in sections:
        by_subject[section.subject_code].append(section.nrc)

    for nrcs in by_subject.values():
        for u, v in combinations(nrcs, 2):
            _connect(adjacency, u, v)


def _sweep_day(adjacency: dict[str, set[str]], meetings: list[Meeting]) -> int:
    """Connect sections whose meetings overlap within a single day.

    Meetings are visited by start minute. The active heap holds meetings
    that have not ended yet, keyed by end minute, so each meeting is only
    compared with the ones it can actually overlap.

    Returns:
        Number of overlapping meeting pairs found
    """
    overlaps = 0
    active: list[tuple[int, int, Meeting]] = []
    ordered = sorted(meetings, key=lambda m: (m.start, m.end))

    for index, meeting in enumerate(ordered):
        while active and active[0][0] <= meeting.start:
            heapq.heappop(active)

        for _, _, other in active:
            if other.end > meeting.start and other.start < meeting.end:
                overlaps += 1
                _connect(adjacency, meeting.nrc, other.nrc)

        # index breaks ties so Meeting objects are never compared
        heapq.heappush(active, (meeting.end, index, meeting))

    return overlaps


def _add_time_overlap_edges(
    adjacency: dict[str, set[str]], meetings: Iterable[Meeting]
) -> None:
    by_day: dict[str, list[Meeting]] = defaultdict(list)
    skipped_unknown = 0
    skipped_orphan = 0
    for meeting in meetings:
        if meeting.nrc not in adjacency:
            skipped_orphan += 1
            continue
        if meeting.day not in DAYS:
            skipped_unknown += 1
            continue
        if meeting.duration <= 0:
            # zero-length blocks cannot overlap anything
            continue
        by_day[meeting.day].append(meeting)

    if skipped_unknown:
        logger.warning(f"Ignored {skipped_unknown} meetings with unknown day codes")
    if skipped_orphan:
        logger.warning(f"Ignored {skipped_orphan} meetings for unknown NRCs")

    for day in DAYS:
        if day in by_day:
            pairs = _sweep_day(adjacency, by_day[day])
            logger.debug(f"{day}: {len(by_day[day])} meetings, {pairs} overlapping pairs")


def build_conflict_graph(
    sections: Iterable[Section], meetings: Iterable[Meeting]
) -> ConflictGraph:
    """Build the incompatibility graph for a set of sections.

    Args:
        sections: All known sections; each NRC becomes a vertex
        meetings: All meetings; meetings of unknown NRCs are ignored

    Returns:
        A new ConflictGraph snapshot (empty when there are no sections)
    """
    sections = list(sections)
    adjacency: dict[str, set[str]] = {section.nrc: set() for section in sections}

    _add_same_subject_edges(adjacency, sections)
    _add_time_overlap_edges(adjacency, meetings)

    graph = ConflictGraph(adjacency)
    logger.info(f"Built conflict graph: {len(graph)} vertices, {graph.edge_count} edges")
    return graph


def build_from_catalog(catalog: Catalog) -> ConflictGraph:
    """Build the conflict graph for a loaded catalog."""
    return build_conflict_graph(catalog.sections, catalog.meetings)


def find_overlap(catalog: Catalog, u: str, v: str) -> tuple[Meeting, Meeting] | None:
    """Return the first overlapping meeting pair of two sections, if any."""
    for a in catalog.meetings_for(u):
        for b in catalog.meetings_for(v):
            if a.overlaps(b):
                return a, b
    return None


def classify_edge(catalog: Catalog, u: str, v: str) -> EdgeRecord:
    """Classify an edge; a shared subject takes precedence over time overlap."""
    if u > v:
        u, v = v, u

    subject_u = catalog.subject_of(u)
    if subject_u is not None and subject_u == catalog.subject_of(v):
        return EdgeRecord(u, v, EdgeKind.SAME_SUBJECT, subject_u)

    pair = find_overlap(catalog, u, v)
    if pair is None:
        detail = "-"
    else:
        a, b = pair
        detail = (
            f"{a.day} {format_minutes(a.start)}-{format_minutes(a.end)}"
            f" x {format_minutes(b.start)}-{format_minutes(b.end)}"
        )
    return EdgeRecord(u, v, EdgeKind.TIME_OVERLAP, detail)


def classify_edges(graph: ConflictGraph, catalog: Catalog) -> list[EdgeRecord]:
    """Classify every edge of a graph for display and export.

    Returns:
        Records sorted with time overlaps first, then same-subject edges,
        each group ordered by (u, v)
    """
    records = [classify_edge(catalog, u, v) for u, v in graph.edges()]
    records.sort(key=lambda r: (r.kind != EdgeKind.TIME_OVERLAP, r.u, r.v))
    return records
