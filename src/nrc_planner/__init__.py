"""NRC Planner - conflict detection and schedule generation for course sections.

This package builds an incompatibility graph over course sections (NRCs),
keeps the set of sections blocked by a student's selection in sync, and
generates conflict-free schedules for a list of subjects.

Example usage:
    from nrc_planner import ScheduleGenerator, ScheduleState, load_catalog

    state = ScheduleState(load_catalog("data/"))
    state.toggle("10234")
    print(sorted(state.conflicts))

    generator = ScheduleGenerator(state.graph, state.catalog)
    result = generator.generate(["MAT1011", "FIS1023"], selection=state.selected)
    state.apply_result(result)
"""

from .config import PlannerConfig
from .conflicts import ScheduleState, find_violations, recompute_conflicts
from .constants import DAYS, Shift
from .exceptions import (
    CatalogError,
    CatalogFileNotFoundError,
    InvalidCatalogDataError,
    SheetNotFoundError,
    UnsupportedCatalogFormatError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .generator import ScheduleGenerator
from .graph import ConflictGraph, build_conflict_graph, classify_edges
from .loader import load_catalog, load_catalog_excel, load_catalog_json
from .metrics import color_count, compute_metrics, greedy_coloring
from .models import (
    Catalog,
    EdgeKind,
    EdgeRecord,
    GenerationResult,
    GeneratorPreferences,
    GraphMetrics,
    Meeting,
    Professor,
    Section,
    Subject,
    UnfilledReason,
    UnfilledSubject,
)
from .normalization import format_minutes, normalize_day, to_minutes

__version__ = "0.1.0"

__all__ = [
    # State and algorithms
    "ScheduleState",
    "ScheduleGenerator",
    "ConflictGraph",
    "build_conflict_graph",
    "classify_edges",
    "recompute_conflicts",
    "find_violations",
    "compute_metrics",
    "greedy_coloring",
    "color_count",
    # Models
    "Catalog",
    "Subject",
    "Professor",
    "Section",
    "Meeting",
    "EdgeKind",
    "EdgeRecord",
    "GraphMetrics",
    "GeneratorPreferences",
    "GenerationResult",
    "UnfilledReason",
    "UnfilledSubject",
    "Shift",
    "DAYS",
    # Configuration and loading
    "PlannerConfig",
    "load_catalog",
    "load_catalog_json",
    "load_catalog_excel",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Normalization
    "to_minutes",
    "normalize_day",
    "format_minutes",
    # Exceptions
    "CatalogError",
    "CatalogFileNotFoundError",
    "InvalidCatalogDataError",
    "SheetNotFoundError",
    "UnsupportedCatalogFormatError",
]
