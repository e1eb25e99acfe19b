"""
julia_atlas/graph/builder.py — Dependency graph construction.

Builds the package DAG over the ids of a PackageIndex. Edge direction
follows the registry's reverse-dependency view:

    P ──► C    means    "C depends on P"

so the descendants of P are exactly the packages that would be affected,
directly or transitively, by a change in P.

Acyclicity is not enforced. A package that requires itself produces a
self-loop; the descendant computation never reports a package as its own
descendant, so such loops are harmless.
"""

import logging
from typing import Protocol

from julia_atlas.config import DEFAULT_CONFIG, AtlasConfig
from julia_atlas.graph.store import GraphStore, NetworkXGraphStore
from julia_atlas.registry.scanner import PackageIndex

logger = logging.getLogger(__name__)


class UnknownDependentError(KeyError):
    """A dependent was reported that is not in the scanned package index."""


class DependentsSource(Protocol):
    def dependents(self, name: str) -> list[str]: ...


def build_dependency_graph(
    index: PackageIndex,
    dependents_source: DependentsSource,
    store: GraphStore | None = None,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> GraphStore:
    """
    Build the dependency DAG.

    Every package in the index becomes a node (node attribute `name`). For
    each package P and each dependent C reported by dependents_source, the
    edge P → C is added.

    Args:
        index:             PackageIndex from scan_registry().
        dependents_source: Anything with dependents(name) -> list[str].
        store:             GraphStore to populate. A fresh NetworkXGraphStore
                           is created when omitted.
        config:            AtlasConfig. Uses config.unknown_dependent_policy.

    Returns:
        The populated store.

    Raises:
        UnknownDependentError: a dependent is missing from the index and the
        policy is "fail".

    Notes:
        Under the default "skip" policy unknown dependents are logged at
        WARNING and collected in the `skipped_dependents` attribute of the
        returned store as (package, dependent) pairs.
    """
    store = store if store is not None else NetworkXGraphStore()

    for package_id, name in enumerate(index.names):
        store.add_node(package_id, name=name)
    logger.info("Added %d package nodes.", len(index))

    skipped: list[tuple[str, str]] = []
    edges_added = 0
    for name in index.names:
        source_id = index.id_of(name)
        for dependent in dependents_source.dependents(name):
            target_id = index.get(dependent)
            if target_id is None:
                if config.unknown_dependent_policy == "fail":
                    raise UnknownDependentError(
                        f"{dependent!r} (dependent of {name!r}) is not in the registry"
                    )
                logger.warning(
                    "Skipping unknown dependent '%s' of '%s'.", dependent, name
                )
                skipped.append((name, dependent))
                continue
            store.add_edge(source_id, target_id)
            edges_added += 1

    store.skipped_dependents = skipped
    logger.info(
        "Graph construction complete: %d nodes, %d edges (%d dependents skipped).",
        store.number_of_nodes(),
        edges_added,
        len(skipped),
    )
    return store
