"""
julia_atlas.reports — Export and tabular summaries.

Modules:
    dag_json  — DAG-Julia-Pkgs.json writer and reader.
    summary   — pandas summary table, version distribution, CSV export.
"""
