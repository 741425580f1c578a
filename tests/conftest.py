"""Test fixtures for NRC planner tests."""

import json
import random

import pandas as pd
import pytest

from nrc_planner.constants import DAYS
from nrc_planner.models import Catalog, Meeting, Professor, Section, Subject
from nrc_planner.normalization import to_minutes


def make_catalog(sections: dict[str, tuple[str, list[tuple[str, str, str]]]]) -> Catalog:
    """Build a catalog from {nrc: (subject_code, [(day, start, end), ...])}."""
    subject_codes = sorted({subject for subject, _ in sections.values()})
    return Catalog(
        subjects=[Subject(code, f"Subject {code}") for code in subject_codes],
        professors=[Professor("P1", "Prof. Uno")],
        sections=[Section(nrc, subject, "P1") for nrc, (subject, _) in sections.items()],
        meetings=[
            Meeting(nrc, day, to_minutes(start), to_minutes(end))
            for nrc, (_, blocks) in sections.items()
            for day, start, end in blocks
        ],
    )


def random_catalog(seed: int, sections: int = 40, subjects: int = 8) -> Catalog:
    """Generate a catalog with random meetings on half-hour boundaries."""
    rng = random.Random(seed)
    layout = {}
    for i in range(sections):
        blocks = []
        for _ in range(rng.randint(0, 3)):
            start = rng.randrange(12, 40) * 30
            length = rng.choice([0, 60, 90, 120])
            day = rng.choice(DAYS[:6])
            end = start + length
            blocks.append((day, f"{start // 60}:{start % 60:02d}", f"{end // 60}:{end % 60:02d}"))
        layout[f"N{i:03d}"] = (f"SUB{rng.randrange(subjects)}", blocks)
    return make_catalog(layout)


@pytest.fixture
def catalog_builder():
    """Factory fixture for small hand-written catalogs."""
    return make_catalog


@pytest.fixture
def scenario_catalog():
    """A and B share MATH100; C (PHYS100) overlaps A on Monday morning."""
    return make_catalog(
        {
            "A": ("MATH100", [("LUN", "08:00", "09:00")]),
            "B": ("MATH100", [("LUN", "10:00", "11:00")]),
            "C": ("PHYS100", [("LUN", "08:30", "09:30")]),
        }
    )


@pytest.fixture
def unique_choice_catalog():
    """Only {P1, M2} schedules both MATH and PHYS.

    P1 also clashes with three ART sections on Thursday, which makes PHYS
    the most constrained subject.
    """
    return make_catalog(
        {
            "M1": ("MATH", [("LUN", "08:00", "10:00")]),
            "M2": ("MATH", [("MAR", "08:00", "10:00")]),
            "P1": ("PHYS", [("LUN", "08:00", "09:00"), ("JUE", "14:00", "15:00")]),
            "O1": ("ART1", [("JUE", "14:00", "15:00")]),
            "O2": ("ART2", [("JUE", "14:00", "15:00")]),
            "O3": ("ART3", [("JUE", "14:00", "15:00")]),
        }
    )


@pytest.fixture
def random_catalogs():
    """A handful of generated catalogs for property checks."""
    return [random_catalog(seed) for seed in range(6)]


@pytest.fixture
def catalog_dir(tmp_path):
    """Directory with the four catalog JSON files."""
    files = {
        "subjects.json": [
            {"subjectCode": "MATH100", "subjectName": "Cálculo I", "semester": 1, "credits": 4},
            {"subjectCode": "PHYS100", "subjectName": "Física I", "semester": 2},
        ],
        "professors.json": [
            {"professorId": "P1", "professorName": "Ana Pérez"},
            {"professorId": "P2", "professorName": "Luis Gómez"},
        ],
        "sections.json": [
            {"nrc": "A", "subjectCode": "MATH100", "professorId": "P1"},
            {"nrc": "B", "subjectCode": "MATH100", "professorId": "P2"},
            {"nrc": "C", "subjectCode": "PHYS100", "professorId": "P2"},
        ],
        "meetings.json": [
            {"nrc": "A", "day": "LUN", "start": "08:00", "end": "09:00"},
            {"nrc": "B", "day": "lunes", "start": 1000, "end": "11:00"},
            {"nrc": "C", "day": "Lu", "start": "830", "end": 930},
        ],
    }
    for name, records in files.items():
        with open(tmp_path / name, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False)
    return tmp_path


@pytest.fixture
def workbook(tmp_path):
    """Workbook using alternative column names and mixed time formats."""
    path = tmp_path / "catalog.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(
            {"code": ["MAT1", "FIS1"], "name": ["Cálculo", "Física"], "Semester": [1, 2]}
        ).to_excel(writer, sheet_name="Subjects", index=False)
        pd.DataFrame({"ProfessorId": ["P1"], "ProfessorName": ["Ana Pérez"]}).to_excel(
            writer, sheet_name="Professors", index=False
        )
        pd.DataFrame(
            {
                "NRC": [10234, 10235, None],
                "SubjectCode": ["MAT1", "FIS1", "MAT1"],
                "ProfessorId": ["P1", "P1", "P1"],
            }
        ).to_excel(writer, sheet_name="Sections", index=False)
        pd.DataFrame(
            {
                "NRC": [10234, 10235, 10235],
                "Day": ["Lunes", "LUN", "Miércoles"],
                "Start": ["08:00", 830, "14:00"],
                "End": ["10:00", 930, "16:00"],
            }
        ).to_excel(writer, sheet_name="Meetings", index=False)
    return path
