"""
julia_atlas/ingestion/enrichment.py — Attach contributors and Julia versions to nodes.

Runs after the descendant pass. Both enrichers read per-package files from
the registry checkout and write node attributes on the GraphStore:

    url            str | None          raw contents of the url file
    host           str | None          host parsed from the url
    contributors   list[Contributor]
    julia_version  VersionConstraint

Data problems never abort enrichment: a missing or malformed url, or a host
other than GitHub, leaves an empty contributor list. Errors raised by the
ContributorSource itself (bad token, API failure) propagate.
"""

import logging

from julia_atlas.config import BOGUS, DEFAULT_CONFIG, NA, AtlasConfig
from julia_atlas.graph.store import GraphStore
from julia_atlas.ingestion.github_client import (
    Contributor,
    ContributorSource,
    github_owner_repo,
    parse_repo_url,
)
from julia_atlas.registry.scanner import PackageIndex, package_dir, read_repo_url
from julia_atlas.registry.versions import read_julia_version

logger = logging.getLogger(__name__)


def contributors_for_package(
    pkg_dir: str,
    source: ContributorSource | None,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> tuple[str | None, str | None, list[Contributor]]:
    """
    Look up the contributors of one package.

    Returns:
        (url, host, contributors). host is None when the url is missing or
        does not match scheme://host/path. contributors is empty unless the
        host is config.github_host and a source is given.
    """
    url = read_repo_url(pkg_dir)
    if url is None:
        return None, None, []

    location = parse_repo_url(url)
    if location is None:
        logger.warning("Unrecognised repository url '%s' in %s", url, pkg_dir)
        return url, None, []

    if location.host != config.github_host:
        logger.info("No contributor lookup for host %s (%s)", location.host, url)
        return url, location.host, []

    owner_repo = github_owner_repo(location)
    if owner_repo is None:
        logger.warning("Cannot extract owner/repo from GitHub url '%s'", url)
        return url, location.host, []

    if source is None:
        return url, location.host, []

    return url, location.host, source.contributors(owner_repo)


def enrich_contributors(
    store: GraphStore,
    index: PackageIndex,
    registry_dir: str,
    source: ContributorSource | None,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> dict[str, int]:
    """
    Set url, host and contributors on every package node.

    With source=None the url and host are still recorded but no remote
    lookups are made.

    Returns:
        Counts: {"looked_up", "no_url", "unparsed", "other_host", "contributors"}.
    """
    stats = {"looked_up": 0, "no_url": 0, "unparsed": 0, "other_host": 0, "contributors": 0}
    total = len(index)

    for count, name in enumerate(index.names, start=1):
        node = index.id_of(name)
        url, host, found = contributors_for_package(
            package_dir(registry_dir, name), source, config
        )
        store.set_node_attr(node, "url", url)
        store.set_node_attr(node, "host", host)
        store.set_node_attr(node, "contributors", found)

        if url is None:
            stats["no_url"] += 1
        elif host is None:
            stats["unparsed"] += 1
        elif host != config.github_host:
            stats["other_host"] += 1
        elif source is not None:
            stats["looked_up"] += 1
        stats["contributors"] += len(found)

        if count % 100 == 0:
            logger.info("Contributors: %d/%d packages processed.", count, total)

    logger.info(
        "Contributor enrichment complete: %d looked up, %d without url, "
        "%d unparseable, %d on other hosts, %d contributor entries.",
        stats["looked_up"], stats["no_url"], stats["unparsed"],
        stats["other_host"], stats["contributors"],
    )
    return stats


def enrich_versions(
    store: GraphStore,
    index: PackageIndex,
    registry_dir: str,
    config: AtlasConfig = DEFAULT_CONFIG,
) -> dict[str, int]:
    """
    Set julia_version on every package node.

    Returns:
        Counts of each outcome: {"declared", "NA", "BOGUS"}.
    """
    stats = {"declared": 0, NA: 0, BOGUS: 0}
    for name in index.names:
        constraint = read_julia_version(package_dir(registry_dir, name), config)
        store.set_node_attr(index.id_of(name), "julia_version", constraint)
        key = constraint.min if constraint.min in (NA, BOGUS) else "declared"
        stats[key] += 1

    logger.info(
        "Julia version constraints: %d declared, %d NA, %d BOGUS.",
        stats["declared"], stats[NA], stats[BOGUS],
    )
    return stats
