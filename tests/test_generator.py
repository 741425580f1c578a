"""Tests for the schedule generator."""

import random

from nrc_planner.conflicts import find_violations
from nrc_planner.constants import Shift
from nrc_planner.generator import ScheduleGenerator
from nrc_planner.graph import build_from_catalog
from nrc_planner.models import GeneratorPreferences, UnfilledReason
from nrc_planner.scoring import score_pick


def make_generator(catalog, seed=0, restarts=40):
    return ScheduleGenerator(
        build_from_catalog(catalog), catalog, rng=random.Random(seed), restarts=restarts
    )


class TestGenerate:
    """Tests for ScheduleGenerator.generate."""

    def test_unique_compatible_combination(self, unique_choice_catalog):
        result = make_generator(unique_choice_catalog).generate(["MATH", "PHYS"])
        assert result.success
        assert result.picked == frozenset({"P1", "M2"})
        assert result.score == 0
        assert result.unfilled == []
        assert result.restarts == 40

    def test_conflicting_fixed_selection_fails(self, scenario_catalog):
        result = make_generator(scenario_catalog).generate(
            ["PHYS100"], selection={"A", "B"}
        )
        assert not result.success
        assert result.picked == frozenset({"A", "B"})
        assert result.conflicting_pairs == [("A", "B")]
        assert "A-B" in result.reason

    def test_subject_incompatible_with_fixed(self, scenario_catalog):
        result = make_generator(scenario_catalog).generate(["PHYS100"], selection={"A"})
        assert result.success
        assert result.picked == frozenset({"A"})
        assert [(u.subject_code, u.reason) for u in result.unfilled] == [
            ("PHYS100", UnfilledReason.INCOMPATIBLE_WITH_FIXED)
        ]
        assert result.breakdown["unfilled"] == 1000

    def test_fixed_selection_fills_subject(self, scenario_catalog):
        result = make_generator(scenario_catalog).generate(["MATH100"], selection={"B"})
        assert result.picked == frozenset({"B"})
        assert result.unfilled == []
        assert result.restarts == 0

    def test_selection_ignored_when_not_respected(self, scenario_catalog):
        preferences = GeneratorPreferences(respect_fixed_selection=False)
        result = make_generator(scenario_catalog).generate(
            ["MATH100", "PHYS100"], preferences, selection={"B"}
        )
        graph = build_from_catalog(scenario_catalog)
        # Greedy order picks A, which blocks C; a later restart finds {B, C}
        assert result.picked == frozenset({"B", "C"})
        assert result.unfilled == []
        assert find_violations(result.picked, graph) == []
        assert result.score < 2000

    def test_restarts_escape_greedy_trap(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("LUN", "08:00", "09:00")]),
                "Y": ("S1", [("LUN", "10:00", "11:00")]),
                "Z": ("S2", [("LUN", "08:30", "09:30")]),
            }
        )
        for seed in range(10):
            result = make_generator(catalog, seed=seed).generate(["S1", "S2"])
            assert result.picked == frozenset({"Y", "Z"})
            assert result.score == 2
            assert result.unfilled == []

    def test_single_restart_is_plain_greedy(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("LUN", "08:00", "09:00")]),
                "Y": ("S1", [("LUN", "10:00", "11:00")]),
                "Z": ("S2", [("LUN", "08:30", "09:30")]),
            }
        )
        result = make_generator(catalog, restarts=1).generate(["S1", "S2"])
        assert result.picked == frozenset({"X"})
        assert [(u.subject_code, u.reason) for u in result.unfilled] == [
            ("S2", UnfilledReason.NOT_PLACED)
        ]

    def test_conflicting_selection_ignored_when_not_respected(self, scenario_catalog):
        preferences = GeneratorPreferences(respect_fixed_selection=False)
        result = make_generator(scenario_catalog).generate(
            ["PHYS100"], preferences, selection={"A", "B"}
        )
        assert result.success
        assert result.picked == frozenset({"C"})

    def test_unknown_subject(self, scenario_catalog):
        result = make_generator(scenario_catalog).generate(["NOPE"])
        assert result.success
        assert result.picked == frozenset()
        assert result.unfilled_subjects == ["NOPE"]
        assert result.unfilled[0].reason == UnfilledReason.NO_SECTIONS
        assert result.score == 1000

    def test_no_subjects(self, scenario_catalog):
        result = make_generator(scenario_catalog).generate([], selection={"C"})
        assert result.success
        assert result.picked == frozenset({"C"})
        assert result.score == 0
        assert result.restarts == 0

    def test_duplicate_subjects_requested_once(self, unique_choice_catalog):
        result = make_generator(unique_choice_catalog).generate(["PHYS", "PHYS"])
        assert result.picked == frozenset({"P1"})

    def test_preferred_shift(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("LUN", "08:00", "10:00")]),
                "Y": ("S1", [("LUN", "14:00", "16:00")]),
            }
        )
        afternoon = make_generator(catalog).generate(
            ["S1"], GeneratorPreferences(Shift.AFTERNOON)
        )
        morning = make_generator(catalog).generate(["S1"], GeneratorPreferences(Shift.MORNING))
        assert afternoon.picked == frozenset({"Y"})
        assert afternoon.score == 0
        assert morning.picked == frozenset({"X"})

    def test_restart_count(self, unique_choice_catalog):
        result = make_generator(unique_choice_catalog, restarts=5).generate(["MATH"])
        assert result.restarts == 5


class TestOrdering:
    """Tests for candidate and subject ordering."""

    def test_order_candidates_by_shift_then_start(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("LUN", "08:00", "10:00")]),
                "Y": ("S1", [("LUN", "14:00", "16:00")]),
                "Z": ("S1", [("MAR", "13:00", "14:00")]),
                "W": ("S1", []),
            }
        )
        generator = make_generator(catalog)
        assert generator.order_candidates("S1", GeneratorPreferences(Shift.AFTERNOON)) == [
            "Z",
            "Y",
            "X",
            "W",
        ]
        assert generator.order_candidates("S1", GeneratorPreferences()) == [
            "X",
            "Z",
            "Y",
            "W",
        ]

    def test_perturbed_candidates_keep_shift_matches_first(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("LUN", "08:00", "10:00")]),
                "Y": ("S1", [("LUN", "14:00", "16:00")]),
                "Z": ("S1", [("MAR", "13:00", "14:00")]),
                "W": ("S1", []),
            }
        )
        preferences = GeneratorPreferences(Shift.AFTERNOON)
        for seed in range(20):
            order = make_generator(catalog, seed=seed).order_candidates(
                "S1", preferences, perturb=True
            )
            assert set(order[:2]) == {"Y", "Z"}
            assert order[2:] == ["X", "W"]

    def test_unknown_days_ignored_for_earliest_start(self, catalog_builder):
        catalog = catalog_builder(
            {
                "X": ("S1", [("XYZ", "07:00", "08:00"), ("LUN", "10:00", "11:00")]),
                "Y": ("S1", [("LUN", "09:00", "10:00")]),
            }
        )
        generator = make_generator(catalog)
        assert generator.order_candidates("S1", GeneratorPreferences()) == ["Y", "X"]

    def test_subject_order_by_weight(self, scenario_catalog):
        weights = {"MATH100": 3, "PHYS100": 1}
        for seed in range(20):
            generator = make_generator(scenario_catalog, seed=seed)
            assert generator.subject_order(["PHYS100", "MATH100"], weights) == [
                "MATH100",
                "PHYS100",
            ]

    def test_perturbed_subject_order_varies_with_seed(self, scenario_catalog):
        weights = {"MATH100": 3, "PHYS100": 1}
        orders = {
            tuple(
                make_generator(scenario_catalog, seed=seed).subject_order(
                    ["MATH100", "PHYS100"], weights, perturb=True
                )
            )
            for seed in range(50)
        }
        assert orders == {("MATH100", "PHYS100"), ("PHYS100", "MATH100")}

    def test_subject_weight(self, unique_choice_catalog):
        generator = make_generator(unique_choice_catalog)
        assert generator.subject_weight("PHYS") == 4
        assert generator.subject_weight("MATH") == 3
        assert generator.subject_weight("NOPE") == 0


class TestInvariants:
    """Property checks on generated catalogs."""

    def test_random_catalogs(self, random_catalogs):
        for seed, catalog in enumerate(random_catalogs):
            graph = build_from_catalog(catalog)
            generator = ScheduleGenerator(graph, catalog, rng=random.Random(seed))
            subjects = catalog.subject_codes[:5]
            preferences = GeneratorPreferences(Shift.MORNING, max_gap_minutes=60)
            result = generator.generate(subjects, preferences)

            assert result.success
            assert find_violations(result.picked, graph) == []
            picked_subjects = [catalog.subject_of(nrc) for nrc in result.picked]
            assert len(picked_subjects) == len(set(picked_subjects))
            assert set(picked_subjects) <= set(subjects)
            assert set(picked_subjects) | set(result.unfilled_subjects) == set(subjects)

            baseline, _ = score_pick(set(), catalog, preferences, unfilled=len(subjects))
            assert result.score <= baseline
            recomputed, _ = score_pick(
                result.picked, catalog, preferences, unfilled=len(result.unfilled)
            )
            assert result.score == recomputed

    def test_keeps_fixed_selection(self, random_catalogs):
        catalog = random_catalogs[2]
        graph = build_from_catalog(catalog)
        fixed = {catalog.sections_for_subject(catalog.subject_codes[0])[0]}
        result = ScheduleGenerator(graph, catalog, rng=random.Random(1)).generate(
            catalog.subject_codes, selection=fixed
        )
        assert fixed <= result.picked
        assert find_violations(result.picked, graph) == []

    def test_seeded_runs_are_reproducible(self, random_catalogs):
        catalog = random_catalogs[3]
        first = make_generator(catalog, seed=11).generate(catalog.subject_codes)
        second = make_generator(catalog, seed=11).generate(catalog.subject_codes)
        assert first.picked == second.picked
        assert first.score == second.score
