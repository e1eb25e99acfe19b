"""
julia_atlas/viz/plotly_graph.py — Interactive Plotly force-directed DAG.

Generates an interactive HTML view of an exported DAG document.

Visual encoding:
    - Node size:   Proportional to descendant count (log scale, clamped [4, 36])
    - Node color:  Julia major.minor of the latest release (one trace per version,
                   so the legend doubles as a version filter)
    - Edges:       Gray, dependency direction P → dependent
    - Hover:       Package name, in/out degree, descendants, max level,
                   contributors, Julia interval
"""

import logging
import math
from math import sqrt

import networkx as nx
import plotly.graph_objects as go

from julia_atlas.config import BOGUS, NA

logger = logging.getLogger(__name__)

_EDGE_COLOR = "rgba(150, 150, 150, 0.35)"
_SENTINEL_COLORS = {NA: "lightgray", BOGUS: "black"}
_PALETTE = [
    "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
    "#8c564b", "#e377c2", "#bcbd22", "#17becf", "#393b79",
]


def document_to_graph(document: dict) -> nx.DiGraph:
    """Rebuild a name-keyed DiGraph (with node payloads) from a DAG document."""
    G = nx.DiGraph()
    for node in document["nodes"]:
        G.add_node(node["id"], **node)
    for link in document["links"]:
        G.add_edge(link["source"], link["target"])
    return G


def _compute_layout(G: nx.Graph, seed: int = 42) -> dict[str, tuple[float, float]]:
    """
    Spring layout with k=2/sqrt(N+1) so spacing scales with graph size.
    """
    k_value = 2.0 / sqrt(len(G.nodes) + 1)
    pos = nx.spring_layout(G, seed=seed, k=k_value)
    return {node: (float(x), float(y)) for node, (x, y) in pos.items()}


def _version_color(majorminor: str, ordered_versions: list[str]) -> str:
    if majorminor in _SENTINEL_COLORS:
        return _SENTINEL_COLORS[majorminor]
    return _PALETTE[ordered_versions.index(majorminor) % len(_PALETTE)]


def build_dag_figure(document: dict, seed: int = 42) -> go.Figure:
    """
    Build an interactive Plotly figure of a DAG document.

    Args:
        document: Output of build_dag_document() / load_dag_json().
        seed:     Layout seed for reproducible positions.

    Returns:
        Plotly Figure object (no IO, no files written).
    """
    G = document_to_graph(document)
    pos = _compute_layout(G, seed=seed)

    edge_x: list = []
    edge_y: list = []
    for u, v in G.edges():
        x0, y0 = pos[u]
        x1, y1 = pos[v]
        edge_x += [x0, x1, None]
        edge_y += [y0, y1, None]

    edge_trace = go.Scatter(
        x=edge_x,
        y=edge_y,
        mode="lines",
        line={"width": 0.6, "color": _EDGE_COLOR},
        name="depends on",
        hoverinfo="none",
    )

    # ── Group nodes by Julia major.minor ──────────────────────────────────────
    groups: dict[str, list[str]] = {}
    for node, data in G.nodes(data=True):
        mm = data.get("juliaversion", {}).get("majorminor", BOGUS)
        groups.setdefault(mm, []).append(node)

    declared = sorted(
        (v for v in groups if v not in _SENTINEL_COLORS),
        key=lambda v: tuple(int(p) for p in v.split(".") if p.isdigit()),
    )
    ordered = declared + [v for v in (NA, BOGUS) if v in groups]

    node_traces = []
    for mm in ordered:
        x_coords, y_coords, sizes, hover_texts = [], [], [], []
        for node in groups[mm]:
            data = G.nodes[node]
            descendants = data.get("descendents", [])
            levels = [d["level"] for d in descendants]
            version = data.get("juliaversion", {})

            x, y = pos[node]
            x_coords.append(x)
            y_coords.append(y)
            sizes.append(max(4, min(36, 4 + math.log1p(len(descendants)) * 6)))
            hover_texts.append(
                f"<b>{node}</b><br>"
                f"In/out degree: {data.get('indegree', 0)}/{data.get('outdegree', 0)}<br>"
                f"Descendants: {len(descendants)} (max level {max(levels, default=0)})<br>"
                f"Contributors: {len(data.get('contributors', []))}<br>"
                f"Julia: [{version.get('min', BOGUS)}, {version.get('max', BOGUS)})"
            )

        node_traces.append(
            go.Scatter(
                x=x_coords,
                y=y_coords,
                mode="markers",
                name=f"julia {mm}" if mm in declared else mm,
                marker={
                    "size": sizes,
                    "color": _version_color(mm, declared),
                    "line": {"color": "white", "width": 1},
                },
                text=hover_texts,
                hovertemplate="%{text}<extra></extra>",
            )
        )

    fig = go.Figure(
        data=[edge_trace] + node_traces,
        layout=go.Layout(
            title="Julia Package Dependency DAG",
            showlegend=True,
            hovermode="closest",
            xaxis={"showgrid": False, "zeroline": False, "showticklabels": False},
            yaxis={"showgrid": False, "zeroline": False, "showticklabels": False},
            margin={"l": 20, "r": 20, "t": 60, "b": 20},
            paper_bgcolor="white",
            plot_bgcolor="white",
        ),
    )

    logger.info(
        "Plotly figure built: %d nodes, %d edges, %d version groups.",
        G.number_of_nodes(),
        G.number_of_edges(),
        len(node_traces),
    )
    return fig


def save_figure_html(fig: go.Figure, output_path: str) -> None:
    """Write a Plotly figure to an HTML file (plotly.js from CDN)."""
    fig.write_html(output_path, include_plotlyjs="cdn")
    logger.info("Plotly figure saved to: %s", output_path)
