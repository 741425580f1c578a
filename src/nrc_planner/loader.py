"""Catalog loading from JSON files and Excel workbooks.

A workbook is expected to hold four sheets (Subjects, Professors,
Sections, Meetings). Column names are matched against a few common
aliases, rows missing required keys are dropped, and meeting days and
times are normalized on the way in.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from .exceptions import (
    CatalogFileNotFoundError,
    InvalidCatalogDataError,
    SheetNotFoundError,
    UnsupportedCatalogFormatError,
)
from .models import Catalog, Meeting, Professor, Section, Subject
from .normalization import is_known_day, normalize_day, to_minutes

logger = logging.getLogger(__name__)

JSON_FILES = {
    "subjects": "subjects.json",
    "professors": "professors.json",
    "sections": "sections.json",
    "meetings": "meetings.json",
}

SHEET_NAMES = {
    "subjects": "Subjects",
    "professors": "Professors",
    "sections": "Sections",
    "meetings": "Meetings",
}

COLUMN_ALIASES = {
    "subject_code": ["subjectCode", "code", "SubjectCode"],
    "subject_name": ["subjectName", "name", "SubjectName"],
    "semester": ["semester", "Semester"],
    "credits": ["credits", "Credits"],
    "professor_id": ["professorId", "id", "ProfessorId"],
    "professor_name": ["professorName", "name", "ProfessorName"],
    "nrc": ["nrc", "NRC"],
    "day": ["day", "Day"],
    "start": ["start", "Start"],
    "end": ["end", "End"],
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _raw(row: dict[str, Any], field: str) -> Any:
    """First non-blank value among a field's column aliases."""
    for column in COLUMN_ALIASES[field]:
        value = row.get(column)
        if not _is_blank(value):
            return value
    return None


def _text(row: dict[str, Any], field: str) -> str:
    value = _raw(row, field)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _number(row: dict[str, Any], field: str) -> int | None:
    value = _raw(row, field)
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def subjects_from_rows(rows: list[dict[str, Any]]) -> list[Subject]:
    subjects = []
    for row in rows:
        code, name = _text(row, "subject_code"), _text(row, "subject_name")
        if code and name:
            subjects.append(
                Subject(code, name, _number(row, "semester"), _number(row, "credits"))
            )
    return subjects


def professors_from_rows(rows: list[dict[str, Any]]) -> list[Professor]:
    professors = []
    for row in rows:
        professor_id, name = _text(row, "professor_id"), _text(row, "professor_name")
        if professor_id and name:
            professors.append(Professor(professor_id, name))
    return professors


def sections_from_rows(rows: list[dict[str, Any]]) -> list[Section]:
    sections = []
    for row in rows:
        nrc = _text(row, "nrc")
        subject_code = _text(row, "subject_code")
        professor_id = _text(row, "professor_id")
        if nrc and subject_code and professor_id:
            sections.append(Section(nrc, subject_code, professor_id))
    return sections


def meetings_from_rows(rows: list[dict[str, Any]]) -> list[Meeting]:
    meetings = []
    unknown_days: set[str] = set()
    for row in rows:
        nrc = _text(row, "nrc")
        day = normalize_day(_raw(row, "day"))
        if not nrc or not day:
            continue
        if not is_known_day(day):
            unknown_days.add(day)
        meetings.append(
            Meeting(
                nrc=nrc,
                day=day,
                start=to_minutes(_raw(row, "start")),
                end=to_minutes(_raw(row, "end")),
            )
        )
    if unknown_days:
        logger.warning(f"Unknown day codes in meetings: {', '.join(sorted(unknown_days))}")
    return meetings


def build_catalog(records: dict[str, list[dict[str, Any]]]) -> Catalog:
    """Build a Catalog from raw rows keyed by collection name."""
    catalog = Catalog(
        subjects=subjects_from_rows(records.get("subjects", [])),
        professors=professors_from_rows(records.get("professors", [])),
        sections=sections_from_rows(records.get("sections", [])),
        meetings=meetings_from_rows(records.get("meetings", [])),
    )

    known_subjects = {s.subject_code for s in catalog.subjects}
    orphans = [s.nrc for s in catalog.sections if s.subject_code not in known_subjects]
    if orphans and known_subjects:
        logger.warning(f"{len(orphans)} sections reference unknown subjects")

    logger.info(
        f"Loaded catalog: {len(catalog.subjects)} subjects, "
        f"{len(catalog.professors)} professors, {len(catalog.sections)} sections, "
        f"{len(catalog.meetings)} meetings"
    )
    return catalog


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidCatalogDataError(f"malformed JSON ({e.msg})", str(path)) from e


def _read_rows(path: Path, data: Any) -> list[dict[str, Any]]:
    """Check that a collection is a list of objects."""
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise InvalidCatalogDataError("expected a list of objects", str(path))
    return data


def _read_combined(path: Path) -> dict[str, list[dict[str, Any]]]:
    """Read a single JSON object holding the four collections."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise InvalidCatalogDataError(
            "expected an object with subjects, professors, sections and meetings",
            str(path),
        )
    return {key: _read_rows(path, data.get(key, [])) for key in JSON_FILES}


def load_catalog_json(directory: str | Path) -> Catalog:
    """Load a catalog from subjects/professors/sections/meetings JSON files.

    Args:
        directory: Directory containing the four JSON files

    Raises:
        CatalogFileNotFoundError: If the directory or a file is missing
        InvalidCatalogDataError: If a file is not a JSON list of objects
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise CatalogFileNotFoundError(str(directory))

    records = {}
    for key, filename in JSON_FILES.items():
        path = directory / filename
        if not path.exists():
            raise CatalogFileNotFoundError(str(path))
        records[key] = _read_rows(path, _read_json(path))
    return build_catalog(records)


def load_catalog_excel(file_path: str | Path) -> Catalog:
    """Load a catalog from an Excel workbook with one sheet per collection.

    Raises:
        CatalogFileNotFoundError: If the workbook does not exist
        SheetNotFoundError: If one of the four sheets is missing
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise CatalogFileNotFoundError(str(file_path))

    sheets = pd.read_excel(file_path, sheet_name=None, engine="openpyxl")

    records = {}
    for key, sheet_name in SHEET_NAMES.items():
        if sheet_name not in sheets:
            raise SheetNotFoundError(sheet_name, list(sheets.keys()))
        df = sheets[sheet_name].astype(object).where(sheets[sheet_name].notna(), None)
        records[key] = df.to_dict(orient="records")
    return build_catalog(records)


def load_catalog(source: str | Path) -> Catalog:
    """Load a catalog from a JSON directory, a combined JSON file or a workbook.

    Raises:
        CatalogFileNotFoundError: If the source does not exist
        InvalidCatalogDataError: If a JSON source has the wrong shape
        UnsupportedCatalogFormatError: If the source type is not recognized
    """
    source = Path(source)
    if not source.exists():
        raise CatalogFileNotFoundError(str(source))
    if source.is_dir():
        return load_catalog_json(source)
    if source.suffix.lower() == ".json":
        return build_catalog(_read_combined(source))
    if source.suffix.lower() in (".xlsx", ".xlsm"):
        return load_catalog_excel(source)
    raise UnsupportedCatalogFormatError(str(source))
