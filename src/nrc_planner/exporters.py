"""Export functionality for conflict graphs, selections and generated schedules."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import pandas as pd

from .conflicts import ScheduleState
from .constants import EDGE_LABELS
from .graph import classify_edges
from .loader import JSON_FILES
from .metrics import adjacency_matrix, color_count, compute_metrics, greedy_coloring
from .models import Catalog


def build_report(state: ScheduleState) -> dict[str, Any]:
    """Collect everything presentation layers read from a state."""
    metrics = compute_metrics(state.graph)
    coloring = greedy_coloring(state.graph)
    return {
        "metrics": metrics.to_dict(),
        "color_count": color_count(coloring),
        "coloring": coloring,
        "edges": [e.to_dict() for e in classify_edges(state.graph, state.catalog)],
        "adjacency": state.graph.to_dict(),
        "selected": sorted(state.selected),
        "conflicts": sorted(state.conflicts),
        "violations": [list(p) for p in state.violations()],
        "last_result": state.last_result.to_dict() if state.last_result else None,
    }


def edge_rows(state: ScheduleState) -> list[dict[str, Any]]:
    """Edge list rows: u, v, type label and detail."""
    return [
        {
            "u": edge.u,
            "v": edge.v,
            "type": EDGE_LABELS[edge.kind.value],
            "detail": edge.detail,
        }
        for edge in classify_edges(state.graph, state.catalog)
    ]


def matrix_rows(state: ScheduleState) -> list[list[Any]]:
    """Adjacency matrix with a header row and a leading label column."""
    order, matrix = adjacency_matrix(state.graph)
    rows: list[list[Any]] = [["", *order]]
    for vertex, row in zip(order, matrix):
        rows.append([vertex, *row])
    return rows


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, state: ScheduleState, output_path: str | Path) -> None:
        """Export a schedule state to file.

        Args:
            state: State whose graph, selection and last result are exported
            output_path: Path to output file or directory
        """
        pass


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, state: ScheduleState, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                build_report(state),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def __init__(self, include_matrix: bool = True):
        self.include_matrix = include_matrix

    def export(self, state: ScheduleState, output_path: str | Path) -> None:
        """Export graph data to CSV files.

        Creates:
        - edges.csv: Classified edge list
        - coloring.csv: Greedy color per NRC
        - adjacency_matrix.csv: 0/1 matrix (when include_matrix is set)

        Args:
            state: State to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        self._write_csv(
            output_dir / "edges.csv",
            edge_rows(state),
            fieldnames=["u", "v", "type", "detail"],
        )
        coloring = greedy_coloring(state.graph)
        self._write_csv(
            output_dir / "coloring.csv",
            [{"nrc": nrc, "color": color} for nrc, color in coloring.items()],
            fieldnames=["nrc", "color"],
        )
        if self.include_matrix:
            with open(
                output_dir / "adjacency_matrix.csv", "w", encoding="utf-8", newline=""
            ) as f:
                csv.writer(f, quoting=csv.QUOTE_ALL).writerows(matrix_rows(state))

    def _write_csv(
        self, output_path: Path, rows: list[dict], fieldnames: list[str]
    ) -> None:
        """Write rows to CSV file; a header is written even without rows."""
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, quoting=csv.QUOTE_ALL)
            writer.writeheader()
            writer.writerows(rows)


class ExcelExporter(BaseExporter):
    """Export to Excel format (single workbook with multiple sheets)."""

    def export(self, state: ScheduleState, output_path: str | Path) -> None:
        """Export graph data to an Excel workbook.

        Creates workbook with sheets:
        - Metrics: V, E, max degree, density, colors
        - Edges: Classified edge list
        - Coloring: Greedy color per NRC
        - Selection: Selected and blocked NRCs
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        metrics = compute_metrics(state.graph)
        coloring = greedy_coloring(state.graph)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            pd.DataFrame(
                [
                    {"Metric": "Vertices", "Value": metrics.vertices},
                    {"Metric": "Edges", "Value": metrics.edges},
                    {"Metric": "Max Degree", "Value": metrics.max_degree},
                    {"Metric": "Density", "Value": round(metrics.density, 4)},
                    {"Metric": "Colors", "Value": color_count(coloring)},
                ]
            ).to_excel(writer, sheet_name="Metrics", index=False)

            edges = edge_rows(state)
            df = (
                pd.DataFrame(edges)
                if edges
                else pd.DataFrame(columns=["u", "v", "type", "detail"])
            )
            df.to_excel(writer, sheet_name="Edges", index=False)

            pd.DataFrame(
                [{"NRC": nrc, "Color": color} for nrc, color in coloring.items()],
                columns=["NRC", "Color"],
            ).to_excel(writer, sheet_name="Coloring", index=False)

            selection = [{"NRC": nrc, "Status": "selected"} for nrc in sorted(state.selected)]
            selection += [{"NRC": nrc, "Status": "blocked"} for nrc in sorted(state.conflicts)]
            pd.DataFrame(selection, columns=["NRC", "Status"]).to_excel(
                writer, sheet_name="Selection", index=False
            )


def export_catalog_json(catalog: Catalog, output_dir: str | Path) -> list[Path]:
    """Write a catalog as the four JSON files read by load_catalog_json().

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    data = catalog.to_dict()
    written = []
    for key, filename in JSON_FILES.items():
        path = output_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data[key], f, indent=2, ensure_ascii=False)
        written.append(path)
    return written


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()
