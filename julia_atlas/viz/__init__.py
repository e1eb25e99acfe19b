"""
julia_atlas.viz — Visualization of an exported DAG.

Modules:
    plotly_graph  — Interactive force-directed HTML graph.
    figures       — Static matplotlib PNG figures.
"""
