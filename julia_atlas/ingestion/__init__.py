"""
julia_atlas.ingestion — Remote data and per-package enrichment.

Modules:
    github_client  — Authenticated GitHub contributors client + URL parsing.
    enrichment     — Attach contributors and Julia version constraints to nodes.
"""
