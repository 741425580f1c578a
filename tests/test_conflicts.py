"""Tests for selection state and conflict sets."""

import random

import pytest

from nrc_planner.conflicts import (
    ScheduleState,
    find_violations,
    is_compatible,
    recompute_conflicts,
)
from nrc_planner.graph import build_from_catalog
from nrc_planner.models import GenerationResult


@pytest.fixture
def state(scenario_catalog):
    return ScheduleState(scenario_catalog)


class TestRecomputeConflicts:
    """Tests for recompute_conflicts function."""

    def test_scenario(self, scenario_catalog):
        graph = build_from_catalog(scenario_catalog)
        assert recompute_conflicts({"A"}, graph) == frozenset({"B", "C"})
        assert recompute_conflicts({"B"}, graph) == frozenset({"A"})
        assert recompute_conflicts(set(), graph) == frozenset()

    def test_selected_never_blocked(self, scenario_catalog):
        graph = build_from_catalog(scenario_catalog)
        assert recompute_conflicts({"A", "B"}, graph) == frozenset({"C"})

    def test_unknown_nrc_has_no_neighbors(self, scenario_catalog):
        graph = build_from_catalog(scenario_catalog)
        assert recompute_conflicts({"ZZZ"}, graph) == frozenset()

    def test_exclusion_property(self, random_catalogs):
        for seed, catalog in enumerate(random_catalogs):
            graph = build_from_catalog(catalog)
            rng = random.Random(seed)
            selection = set(rng.sample(graph.vertices, 6))
            conflicts = recompute_conflicts(selection, graph)
            assert not conflicts & selection
            for v in graph:
                if v in selection:
                    continue
                blocked = any(graph.has_edge(v, s) for s in selection)
                assert (v in conflicts) == blocked


class TestViolations:
    """Tests for find_violations and is_compatible."""

    def test_find_violations(self, scenario_catalog):
        graph = build_from_catalog(scenario_catalog)
        assert find_violations({"B", "C"}, graph) == []
        assert find_violations({"C", "B", "A"}, graph) == [("A", "B"), ("A", "C")]

    def test_is_compatible(self, scenario_catalog):
        graph = build_from_catalog(scenario_catalog)
        assert is_compatible("C", {"B"}, graph)
        assert not is_compatible("C", {"A"}, graph)
        assert is_compatible("A", set(), graph)


class TestScheduleState:
    """Tests for ScheduleState."""

    def test_initial_state(self, state):
        assert state.selected == frozenset()
        assert state.conflicts == frozenset()
        assert len(state.graph) == 3

    def test_toggle_updates_conflicts(self, state):
        assert state.toggle("A") is True
        assert state.selected == frozenset({"A"})
        assert state.conflicts == frozenset({"B", "C"})
        assert state.is_blocked("B")
        assert not state.is_blocked("A")

    def test_toggle_twice_restores(self, state):
        state.toggle("A")
        assert state.toggle("A") is False
        assert state.selected == frozenset()
        assert state.conflicts == frozenset()

    def test_toggle_does_not_block(self, state):
        state.toggle("A")
        state.toggle("B")
        assert state.selected == frozenset({"A", "B"})
        assert state.conflicts == frozenset({"C"})
        assert state.violations() == [("A", "B")]

    def test_apply_selection(self, state):
        state.toggle("A")
        state.apply_selection({"B", "C"})
        assert state.selected == frozenset({"B", "C"})
        assert state.conflicts == frozenset({"A"})
        assert state.violations() == []

    def test_load_rebuilds_graph_and_clears_selection(self, state, catalog_builder):
        state.toggle("A")
        state.load(catalog_builder({"X": ("S1", []), "Y": ("S1", [])}))
        assert state.selected == frozenset()
        assert state.conflicts == frozenset()
        assert state.graph.has_edge("X", "Y")
        assert "A" not in state.graph

    def test_reset(self, state):
        state.toggle("C")
        state.reset()
        assert state.selected == frozenset()
        assert state.conflicts == frozenset()
        assert len(state.graph) == 0
        assert state.catalog.sections == []
        assert state.last_result is None

    def test_apply_successful_result(self, state):
        result = GenerationResult(picked=frozenset({"B", "C"}))
        assert state.apply_result(result) is True
        assert state.selected == frozenset({"B", "C"})
        assert state.last_result is result

    def test_failed_result_not_applied(self, state):
        state.toggle("A")
        result = GenerationResult(
            picked=frozenset({"A"}), success=False, reason="conflict"
        )
        assert state.apply_result(result) is False
        assert state.selected == frozenset({"A"})
        assert state.last_result is result
