"""
julia_atlas — Dependency DAG explorer for the Julia package registry.

Reads a METADATA-style registry checkout, builds the package dependency
graph with NetworkX, computes every package's transitive descendants with
their hop level, enriches packages with GitHub contributors and the Julia
version constraint of their latest release, and exports the result as
DAG-Julia-Pkgs.json for visualization.

Stages:
- Registry scan          (julia_atlas.registry)
- Graph + descendants    (julia_atlas.graph)
- Contributor enrichment (julia_atlas.ingestion)
- Export + summaries     (julia_atlas.reports, julia_atlas.viz)
"""

__version__ = "0.1.0"
