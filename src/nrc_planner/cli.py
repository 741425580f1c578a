"""CLI entry point for the NRC planner."""

import logging
import random
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import PlannerConfig
from .conflicts import ScheduleState
from .constants import Shift
from .exceptions import CatalogError
from .exporters import export_catalog_json, get_exporter
from .generator import ScheduleGenerator
from .loader import load_catalog, load_catalog_excel
from .metrics import color_count, compute_metrics, greedy_coloring, vertices_by_degree
from .models import Catalog
from .normalization import format_minutes

app = typer.Typer(
    name="nrc-planner",
    help="Detect section conflicts and generate conflict-free schedules",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"
    excel = "excel"


SourceArgument = Annotated[
    Path,
    typer.Argument(help="Catalog directory (JSON files), .json file or .xlsx workbook"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("-v", "--verbose", help="Show detailed output"),
]


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


def _load(source: Path) -> Catalog:
    try:
        with console.status("[bold green]Loading catalog..."):
            return load_catalog(source)
    except CatalogError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _describe_section(catalog: Catalog, nrc: str) -> str:
    section = catalog.section_by_nrc(nrc)
    if section is None:
        return "unknown section"
    meetings = " · ".join(
        f"{m.day} {format_minutes(m.start)}-{format_minutes(m.end)}"
        for m in catalog.meetings_for(nrc)
    )
    return (
        f"{section.subject_code} {catalog.subject_name(section.subject_code)} | "
        f"{catalog.professor_name(section.professor_id)} | "
        f"{meetings or 'schedule to be defined'}"
    )


@app.command()
def graph(
    source: SourceArgument,
    top: Annotated[
        int, typer.Option("--top", help="Number of highest-degree sections to list")
    ] = 10,
    verbose: VerboseOption = False,
) -> None:
    """Show conflict graph metrics and greedy coloring summary."""
    _setup_logging(verbose)
    state = ScheduleState(_load(source))

    metrics = compute_metrics(state.graph)
    coloring = greedy_coloring(state.graph)

    console.print(f"\n[bold]Conflict graph for:[/bold] {source.name}")
    overview = Table(title="Overview", show_header=False)
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", style="green")
    overview.add_row("|V| vertices", str(metrics.vertices))
    overview.add_row("|E| edges", str(metrics.edges))
    overview.add_row("Density", f"{metrics.density:.3f}")
    overview.add_row("Max degree", str(metrics.max_degree))
    overview.add_row("Greedy colors", str(color_count(coloring)))
    console.print(overview)

    if top > 0 and len(state.graph):
        degree_table = Table(title="Most constrained sections")
        degree_table.add_column("NRC", style="cyan")
        degree_table.add_column("Degree", style="green")
        degree_table.add_column("Color", style="magenta")
        degree_table.add_column("Section")
        for nrc in vertices_by_degree(state.graph)[:top]:
            degree_table.add_row(
                nrc,
                str(state.graph.degree(nrc)),
                str(coloring[nrc]),
                _describe_section(state.catalog, nrc),
            )
        console.print(degree_table)


@app.command()
def export(
    source: SourceArgument,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Output file or directory path"),
    ],
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.csv,
    select: Annotated[
        Optional[list[str]],
        typer.Option("-s", "--select", help="NRC to select before exporting"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Export the edge list, coloring and adjacency matrix."""
    _setup_logging(verbose)
    state = ScheduleState(_load(source))
    for nrc in select or []:
        state.toggle(nrc)

    if format != OutputFormat.csv and not output.suffix:
        output = output.with_suffix(".xlsx" if format == OutputFormat.excel else ".json")

    exporter = get_exporter(format.value)
    with console.status(f"[bold green]Exporting to {format.value}..."):
        exporter.export(state, output)

    console.print(f"\n[bold green]✓[/bold green] Exported to: {output}")


@app.command()
def conflicts(
    source: SourceArgument,
    nrcs: Annotated[list[str], typer.Argument(help="NRCs to toggle in order")],
    verbose: VerboseOption = False,
) -> None:
    """Toggle NRCs and show the resulting selection and blocked sections."""
    _setup_logging(verbose)
    state = ScheduleState(_load(source))

    for nrc in nrcs:
        if state.is_blocked(nrc):
            console.print(f"[yellow]• {nrc} is blocked by the current selection[/yellow]")
        state.toggle(nrc)

    console.print(f"\n[bold]Selected ({len(state.selected)}):[/bold]")
    for nrc in sorted(state.selected):
        console.print(f"  [green]{nrc}[/green] {_describe_section(state.catalog, nrc)}")

    console.print(f"\n[bold]Blocked ({len(state.conflicts)}):[/bold]")
    for nrc in sorted(state.conflicts):
        console.print(f"  [red]{nrc}[/red] {_describe_section(state.catalog, nrc)}")

    violations = state.violations()
    if violations:
        console.print(f"\n[bold red]Conflicting selected pairs ({len(violations)}):[/bold red]")
        for u, v in violations:
            console.print(f"  [red]• {u} - {v}[/red]")
        raise typer.Exit(1)


@app.command()
def generate(
    source: SourceArgument,
    subjects: Annotated[list[str], typer.Argument(help="Subject codes to schedule")],
    select: Annotated[
        Optional[list[str]],
        typer.Option("-s", "--select", help="NRC already selected"),
    ] = None,
    shift: Annotated[
        Optional[Shift],
        typer.Option("--shift", help="Preferred shift"),
    ] = None,
    max_gap: Annotated[
        Optional[int],
        typer.Option("--max-gap", help="Largest idle gap in minutes"),
    ] = None,
    compact: Annotated[
        Optional[bool],
        typer.Option("--compact/--no-compact", help="Prefer compact days"),
    ] = None,
    respect_fixed: Annotated[
        Optional[bool],
        typer.Option("--keep-selection/--replace-selection", help="Keep selected NRCs"),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Random seed for reproducible results"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("-c", "--config", help="Planner configuration JSON"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Write the resulting state as JSON"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a conflict-free schedule for a list of subjects."""
    _setup_logging(verbose)
    state = ScheduleState(_load(source))
    for nrc in select or []:
        state.toggle(nrc)

    config = PlannerConfig.load(config_path).with_overrides(
        preferred_shift=shift,
        max_gap_minutes=max_gap,
        prefer_compact_days=compact,
        respect_fixed_selection=respect_fixed,
    )
    if seed is not None:
        config.seed = seed

    rng = random.Random(config.seed) if config.seed is not None else None
    generator = ScheduleGenerator(state.graph, state.catalog, rng=rng, restarts=config.restarts)

    with console.status("[bold green]Generating schedule..."):
        result = generator.generate(subjects, config.preferences, state.selected)
    state.apply_result(result)

    if not result.success:
        console.print(f"[bold red]✗ {result.reason}[/bold red]")
        raise typer.Exit(1)

    table = Table(title=f"Generated schedule (score {result.score})")
    table.add_column("NRC", style="cyan")
    table.add_column("Section")
    for nrc in sorted(result.picked):
        table.add_row(nrc, _describe_section(state.catalog, nrc))
    console.print(table)

    penalties = ", ".join(f"{name}: {value}" for name, value in result.breakdown.items())
    console.print(f"  Penalties: {penalties}")

    for unfilled in result.unfilled:
        console.print(
            f"  [yellow]• {unfilled.subject_code} not scheduled "
            f"({unfilled.reason.value})[/yellow]"
        )

    if output:
        get_exporter("json").export(state, output)
        console.print(f"\n[bold green]✓[/bold green] Exported to: {output}")


@app.command()
def convert(
    workbook: Annotated[
        Path,
        typer.Argument(help="Excel workbook with Subjects/Professors/Sections/Meetings"),
    ],
    output_dir: Annotated[
        Path,
        typer.Argument(help="Directory for the JSON files"),
    ],
    verbose: VerboseOption = False,
) -> None:
    """Convert an Excel workbook into the four catalog JSON files."""
    _setup_logging(verbose)
    try:
        with console.status("[bold green]Reading workbook..."):
            catalog = load_catalog_excel(workbook)
    except CatalogError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    for path in export_catalog_json(catalog, output_dir):
        console.print(f"[bold green]✓[/bold green] {path.name}")


if __name__ == "__main__":
    app()
