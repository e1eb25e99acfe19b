"""
julia_atlas/pipeline.py — Single-call pipeline orchestrator.

Provides run_pipeline() which executes the DAG exploration in dependency
order and returns every intermediate result.

Usage:
    from julia_atlas.pipeline import run_pipeline
    result = run_pipeline()
    print(result.output_path)
"""

import logging
from dataclasses import dataclass, field

from julia_atlas.config import DEFAULT_CONFIG, AtlasConfig, resolve_github_token
from julia_atlas.graph.builder import DependentsSource, build_dependency_graph
from julia_atlas.graph.descendants import Descendant, compute_descendants
from julia_atlas.graph.store import GraphStore, NetworkXGraphStore
from julia_atlas.ingestion.enrichment import enrich_contributors, enrich_versions
from julia_atlas.ingestion.github_client import ContributorSource, GitHubContributorSource
from julia_atlas.registry.dependents import RegistryDependentsSource
from julia_atlas.registry.scanner import PackageIndex, scan_registry
from julia_atlas.reports.dag_json import export_dag_json

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Complete output of a single run."""

    index: PackageIndex
    store: GraphStore
    descendants: dict[int, list[Descendant]]
    document: dict
    output_path: str
    contributor_stats: dict = field(default_factory=dict)
    version_stats: dict = field(default_factory=dict)


def run_pipeline(
    config: AtlasConfig = DEFAULT_CONFIG,
    registry_dir: str | None = None,
    output_path: str | None = None,
    token: str | None = None,
    fetch_contributors: bool = True,
    contributor_source: ContributorSource | None = None,
    dependents_source: DependentsSource | None = None,
    store: GraphStore | None = None,
) -> PipelineResult:
    """
    Execute the complete pipeline in one call.

    Dependency order:
        1. Scan the registry and allocate package ids
        2. Build the dependency DAG
        3. Compute descendant levels for every package
        4. Enrich with contributors (GitHub) and Julia version constraints
        5. Export DAG-Julia-Pkgs.json

    Args:
        config:             AtlasConfig.
        registry_dir:       Registry root (default config.registry_dir).
        output_path:        JSON output path (default config.output_path).
        token:              GitHub token; falls back to the environment.
        fetch_contributors: False skips remote lookups entirely (no token needed).
        contributor_source: Injected ContributorSource (tests); built from the
                            token when omitted.
        dependents_source:  Injected DependentsSource; the registry's own
                            requires files are used when omitted.
        store:              GraphStore to populate (default NetworkXGraphStore).

    Returns:
        PipelineResult.

    Raises:
        ConfigurationError: contributors requested but no token available.
        GitHubAuthError / GitHubAPIError: fatal GitHub failures.
        OSError: the registry cannot be listed.
    """
    registry_dir = registry_dir or config.registry_dir
    output_path = output_path or config.output_path

    # Fail on a missing token before any work is done.
    if fetch_contributors and contributor_source is None:
        contributor_source = GitHubContributorSource(
            resolve_github_token(token, config), config
        )
    if not fetch_contributors:
        contributor_source = None

    # ── Step 1: Registry scan ─────────────────────────────────────────────────
    logger.info("Step 1/5: Scanning registry...")
    index = scan_registry(registry_dir, config)

    # ── Step 2: Dependency graph ──────────────────────────────────────────────
    logger.info("Step 2/5: Building dependency graph...")
    if dependents_source is None:
        dependents_source = RegistryDependentsSource(registry_dir, index, config)
    store = build_dependency_graph(
        index,
        dependents_source,
        store if store is not None else NetworkXGraphStore(),
        config,
    )

    # ── Step 3: Descendants ───────────────────────────────────────────────────
    logger.info("Step 3/5: Computing descendant levels...")
    descendants = compute_descendants(store)

    # ── Step 4: Enrichment ────────────────────────────────────────────────────
    logger.info("Step 4/5: Enriching with contributors and Julia versions...")
    contributor_stats = enrich_contributors(
        store, index, registry_dir, contributor_source, config
    )
    version_stats = enrich_versions(store, index, registry_dir, config)

    # ── Step 5: Export ────────────────────────────────────────────────────────
    logger.info("Step 5/5: Exporting %s...", output_path)
    document = export_dag_json(store, output_path)

    return PipelineResult(
        index=index,
        store=store,
        descendants=descendants,
        document=document,
        output_path=output_path,
        contributor_stats=contributor_stats,
        version_stats=version_stats,
    )
