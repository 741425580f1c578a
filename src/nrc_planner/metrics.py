"""Graph metrics and greedy coloring for grouping and visualization."""

from .graph import ConflictGraph
from .models import GraphMetrics


def compute_metrics(graph: ConflictGraph) -> GraphMetrics:
    """Compute vertex and edge counts, maximum degree and density.

    Density is E / (V * (V - 1) / 2) for graphs with more than one vertex,
    otherwise 0.
    """
    vertex_count = len(graph)
    degrees = [graph.degree(v) for v in graph]
    edge_count = sum(degrees) // 2
    max_degree = max(degrees, default=0)

    if vertex_count > 1:
        density = edge_count / (vertex_count * (vertex_count - 1) / 2)
    else:
        density = 0.0

    return GraphMetrics(
        vertices=vertex_count,
        edges=edge_count,
        max_degree=max_degree,
        density=density,
    )


def vertices_by_degree(graph: ConflictGraph) -> list[str]:
    """Vertices by descending degree; ties keep insertion order."""
    return sorted(graph.vertices, key=lambda v: -graph.degree(v))


def greedy_coloring(graph: ConflictGraph) -> dict[str, int]:
    """Assign each vertex the smallest color unused by its colored neighbors.

    Vertices are processed by descending degree (stable on ties), so the
    result is reproducible. It is an upper bound on the chromatic number,
    not a minimum coloring.

    Returns:
        Mapping of NRC to color index
    """
    colors: dict[str, int] = {}
    for vertex in vertices_by_degree(graph):
        forbidden = {colors[u] for u in graph.neighbors(vertex) if u in colors}
        color = 0
        while color in forbidden:
            color += 1
        colors[vertex] = color
    return colors


def color_count(coloring: dict[str, int]) -> int:
    """Number of color classes used by a coloring."""
    return max(coloring.values(), default=-1) + 1


def color_groups(coloring: dict[str, int]) -> dict[int, list[str]]:
    """Group NRCs by color; each group is mutually compatible."""
    groups: dict[int, list[str]] = {}
    for nrc, color in coloring.items():
        groups.setdefault(color, []).append(nrc)
    return {color: sorted(nrcs) for color, nrcs in sorted(groups.items())}


def adjacency_matrix(graph: ConflictGraph) -> tuple[list[str], list[list[int]]]:
    """Build a 0/1 adjacency matrix with vertices ordered by degree.

    Returns:
        Tuple of (vertex order, matrix rows)
    """
    order = vertices_by_degree(graph)
    index = {v: i for i, v in enumerate(order)}
    matrix = [[0] * len(order) for _ in order]
    for u in order:
        for v in graph.neighbors(u):
            if v in index:
                matrix[index[u]][index[v]] = 1
    return order, matrix
