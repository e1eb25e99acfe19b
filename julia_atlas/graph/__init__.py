"""
julia_atlas.graph — NetworkX graph construction and traversal layer.

Modules:
    store        — GraphStore capability and its NetworkX implementation.
    builder      — Build the dependency DAG from a PackageIndex.
    descendants  — Per-package descendant lists with hop levels (BFS).

Edge direction: P → C means "C depends on P".
"""
