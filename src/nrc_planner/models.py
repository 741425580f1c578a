"""Data models for the course section planner."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Self

from .constants import Shift
from .normalization import format_minutes, is_known_day, normalize_day, to_minutes


FALSE_STRINGS = {"", "0", "false", "no", "off", "n", "f"}


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flag(value: Any, default: bool) -> bool:
    """Parse a boolean setting; strings such as "false" or "0" are False."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class Subject:
    """A subject offered in the term."""

    subject_code: str
    subject_name: str
    semester: int | None = None
    credits: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a Subject from a camelCase or snake_case dictionary."""
        return cls(
            subject_code=str(data.get("subjectCode", data.get("subject_code", ""))).strip(),
            subject_name=str(data.get("subjectName", data.get("subject_name", ""))).strip(),
            semester=_optional_int(data.get("semester")),
            credits=_optional_int(data.get("credits")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "subjectCode": self.subject_code,
            "subjectName": self.subject_name,
        }
        if self.semester is not None:
            result["semester"] = self.semester
        if self.credits is not None:
            result["credits"] = self.credits
        return result


@dataclass(frozen=True)
class Professor:
    """A professor teaching one or more sections."""

    professor_id: str
    professor_name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            professor_id=str(data.get("professorId", data.get("professor_id", ""))).strip(),
            professor_name=str(
                data.get("professorName", data.get("professor_name", ""))
            ).strip(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"professorId": self.professor_id, "professorName": self.professor_name}


@dataclass(frozen=True)
class Section:
    """A section (NRC) of a subject taught by one professor."""

    nrc: str
    subject_code: str
    professor_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            nrc=str(data.get("nrc", "")).strip(),
            subject_code=str(data.get("subjectCode", data.get("subject_code", ""))).strip(),
            professor_id=str(data.get("professorId", data.get("professor_id", ""))).strip(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nrc": self.nrc,
            "subjectCode": self.subject_code,
            "professorId": self.professor_id,
        }


@dataclass(frozen=True)
class Meeting:
    """A weekly recurring time block of a section.

    Attributes:
        nrc: Owning section
        day: Canonical day code (LUN..DOM)
        start: Start minute of day
        end: End minute of day
    """

    nrc: str
    day: str
    start: int
    end: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a Meeting, normalizing the day code and both times."""
        return cls(
            nrc=str(data.get("nrc", "")).strip(),
            day=normalize_day(data.get("day")),
            start=to_minutes(data.get("start")),
            end=to_minutes(data.get("end")),
        )

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Meeting") -> bool:
        """Check if two meetings share a known day and an open interval.

        Zero-length meetings never overlap anything.
        """
        return (
            self.day == other.day
            and is_known_day(self.day)
            and self.duration > 0
            and other.duration > 0
            and self.start < other.end
            and other.start < self.end
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nrc": self.nrc,
            "day": self.day,
            "start": format_minutes(self.start),
            "end": format_minutes(self.end),
        }


@dataclass
class Catalog:
    """The four record collections delivered together by ingestion.

    Lookup indexes are built once on construction; the collections are not
    meant to be mutated afterwards. A reload means building a new Catalog.
    """

    subjects: list[Subject] = field(default_factory=list)
    professors: list[Professor] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    meetings: list[Meeting] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._subject_by_code = {s.subject_code: s for s in self.subjects}
        self._professor_by_id = {p.professor_id: p for p in self.professors}
        self._section_by_nrc = {s.nrc: s for s in self.sections}
        self._meetings_by_nrc: dict[str, list[Meeting]] = {}
        for meeting in self.meetings:
            self._meetings_by_nrc.setdefault(meeting.nrc, []).append(meeting)
        self._sections_by_subject: dict[str, list[str]] = {}
        for section in self.sections:
            self._sections_by_subject.setdefault(section.subject_code, []).append(
                section.nrc
            )

    @classmethod
    def from_dict(cls, data: dict[str, list[dict[str, Any]]]) -> Self:
        """Create a Catalog from raw record dictionaries."""
        return cls(
            subjects=[Subject.from_dict(r) for r in data.get("subjects", [])],
            professors=[Professor.from_dict(r) for r in data.get("professors", [])],
            sections=[Section.from_dict(r) for r in data.get("sections", [])],
            meetings=[Meeting.from_dict(r) for r in data.get("meetings", [])],
        )

    def section_by_nrc(self, nrc: str) -> Section | None:
        return self._section_by_nrc.get(nrc)

    def meetings_for(self, nrc: str) -> list[Meeting]:
        """Meetings of a section; empty when its schedule is undefined."""
        return self._meetings_by_nrc.get(nrc, [])

    def sections_for_subject(self, subject_code: str) -> list[str]:
        """NRCs of a subject in ingestion order."""
        return self._sections_by_subject.get(subject_code, [])

    def subject_of(self, nrc: str) -> str | None:
        section = self._section_by_nrc.get(nrc)
        return section.subject_code if section else None

    def subject_name(self, subject_code: str) -> str:
        subject = self._subject_by_code.get(subject_code)
        return subject.subject_name if subject else subject_code

    def professor_name(self, professor_id: str) -> str:
        professor = self._professor_by_id.get(professor_id)
        return professor.professor_name if professor else professor_id

    @property
    def subject_codes(self) -> list[str]:
        """Subject codes that have at least one section, in first-seen order."""
        return list(self._sections_by_subject.keys())

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "subjects": [s.to_dict() for s in self.subjects],
            "professors": [p.to_dict() for p in self.professors],
            "sections": [s.to_dict() for s in self.sections],
            "meetings": [m.to_dict() for m in self.meetings],
        }


@dataclass(frozen=True)
class GraphMetrics:
    """Summary metrics of a conflict graph."""

    vertices: int = 0
    edges: int = 0
    max_degree: int = 0
    density: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "V": self.vertices,
            "E": self.edges,
            "maxDegree": self.max_degree,
            "density": self.density,
        }


class EdgeKind(str, Enum):
    """Why two sections are incompatible."""

    SAME_SUBJECT = "same_subject"
    TIME_OVERLAP = "time_overlap"


@dataclass(frozen=True)
class EdgeRecord:
    """A classified conflict edge with u < v."""

    u: str
    v: str
    kind: EdgeKind
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"u": self.u, "v": self.v, "type": self.kind.value, "detail": self.detail}


@dataclass(frozen=True)
class GeneratorPreferences:
    """Soft preferences for the schedule generator.

    Attributes:
        preferred_shift: Time-of-day window meetings should start in
        max_gap_minutes: Largest idle gap tolerated without extra penalty,
            None for unbounded
        prefer_compact_days: Penalize long days and using many days
        respect_fixed_selection: Keep the current selection in the result
    """

    preferred_shift: Shift = Shift.ANY
    max_gap_minutes: int | None = None
    prefer_compact_days: bool = False
    respect_fixed_selection: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create preferences from camelCase or snake_case keys.

        Unknown shift names fall back to Shift.ANY; a max gap of None,
        "unbounded" or anything non-numeric means unbounded.
        """
        shift_value = data.get("preferredShift", data.get("preferred_shift", "any"))
        try:
            shift = Shift(str(shift_value).lower())
        except ValueError:
            shift = Shift.ANY

        max_gap = _optional_int(data.get("maxGapMinutes", data.get("max_gap_minutes")))

        return cls(
            preferred_shift=shift,
            max_gap_minutes=max_gap,
            prefer_compact_days=_flag(
                data.get("preferCompactDays", data.get("prefer_compact_days")), False
            ),
            respect_fixed_selection=_flag(
                data.get("respectFixedSelection", data.get("respect_fixed_selection")), True
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferredShift": self.preferred_shift.value,
            "maxGapMinutes": (
                self.max_gap_minutes if self.max_gap_minutes is not None else "unbounded"
            ),
            "preferCompactDays": self.prefer_compact_days,
            "respectFixedSelection": self.respect_fixed_selection,
        }


class UnfilledReason(str, Enum):
    """Why a requested subject has no section in the generated pick."""

    NO_SECTIONS = "no_sections"
    INCOMPATIBLE_WITH_FIXED = "incompatible_with_fixed"
    NOT_PLACED = "not_placed"


@dataclass(frozen=True)
class UnfilledSubject:
    """A requested subject left without a section."""

    subject_code: str
    reason: UnfilledReason

    def to_dict(self) -> dict[str, Any]:
        return {"subjectCode": self.subject_code, "reason": self.reason.value}


@dataclass
class GenerationResult:
    """Result of one schedule generation.

    `picked` is the full target selection, mandatory sections included.
    When `success` is False the pick is the unchanged input selection and
    `reason` explains the failure.
    """

    picked: frozenset[str] = frozenset()
    score: int = 0
    success: bool = True
    reason: str | None = None
    breakdown: dict[str, int] = field(default_factory=dict)
    unfilled: list[UnfilledSubject] = field(default_factory=list)
    conflicting_pairs: list[tuple[str, str]] = field(default_factory=list)
    restarts: int = 0
    generation_date: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def unfilled_subjects(self) -> list[str]:
        return [u.subject_code for u in self.unfilled]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generation_date": self.generation_date,
            "success": self.success,
            "reason": self.reason,
            "picked": sorted(self.picked),
            "score": self.score,
            "breakdown": self.breakdown,
            "unfilled": [u.to_dict() for u in self.unfilled],
            "conflicting_pairs": [list(p) for p in self.conflicting_pairs],
            "restarts": self.restarts,
        }
