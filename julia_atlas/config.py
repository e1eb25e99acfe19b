"""
julia_atlas/config.py — All tunable parameters for the DAG explorer.

Every path, sentinel, rate limit and ordering policy lives here so that a
change in how the registry is read is a single-file diff.
"""

import os
from dataclasses import dataclass

NA = "NA"
BOGUS = "BOGUS"
UNBOUNDED = "∞"


class ConfigurationError(RuntimeError):
    """Raised when the run cannot start with the given settings."""


@dataclass(frozen=True)
class AtlasConfig:
    """
    Immutable configuration for the julia_atlas pipeline.

    Override by constructing a new AtlasConfig with the desired values,
    or with dataclasses.replace(DEFAULT_CONFIG, ...).
    """

    # ── Registry layout ───────────────────────────────────────────────────────
    registry_dir: str = "METADATA"
    # Root of the registry checkout: one subdirectory per package.

    reserved_names: tuple = (
        "METADATA",
        "REQUIRE",
        "README.md",
        "LICENSE.md",
        "META_BRANCH",
        ".git",
        ".gitignore",
        ".test",
        ".travis.yml",
    )
    # Top-level entries that are registry bookkeeping, not packages.

    platform_package: str = "julia"
    # Name used in requires files for the language version constraint.

    version_ordering: str = "semantic"
    # How the latest version directory is picked: "semantic" compares
    # numeric components, "lexicographic" sorts directory names as strings
    # (v0.10.0 sorts before v0.9.0).

    dependents_scope: str = "all_versions"
    # "all_versions": C depends on P if any release of C requires P.
    # "latest": only the latest release of C is considered.

    unknown_dependent_policy: str = "skip"
    # A dependent missing from the scanned index is either skipped with a
    # warning ("skip") or aborts the build ("fail").

    # ── GitHub API ────────────────────────────────────────────────────────────
    github_host: str = "github.com"
    github_api_base: str = "https://api.github.com"
    github_token_env: str = "GITHUB_TOKEN"

    github_min_interval_sec: float = 0.75
    # 5000 req/hr authenticated is one call every 0.72s.

    github_max_pages: int = 10
    # Contributors are paged 100 at a time; 10 pages covers 1000 logins.

    github_max_retries: int = 3
    # Backoff attempts on 429 / exhausted rate limit before giving up.

    github_timeout_sec: float = 30.0

    # ── Outputs ───────────────────────────────────────────────────────────────
    output_path: str = "DAG-Julia-Pkgs.json"
    summary_csv_path: str = "DAG-Julia-Pkgs-summary.csv"
    graph_html_path: str = "DAG-Julia-Pkgs.html"
    figures_dir: str = "figures"

    def __post_init__(self):
        if self.version_ordering not in ("semantic", "lexicographic"):
            raise ConfigurationError(
                f"version_ordering must be 'semantic' or 'lexicographic', "
                f"got {self.version_ordering!r}"
            )
        if self.dependents_scope not in ("all_versions", "latest"):
            raise ConfigurationError(
                f"dependents_scope must be 'all_versions' or 'latest', "
                f"got {self.dependents_scope!r}"
            )
        if self.unknown_dependent_policy not in ("skip", "fail"):
            raise ConfigurationError(
                f"unknown_dependent_policy must be 'skip' or 'fail', "
                f"got {self.unknown_dependent_policy!r}"
            )


def resolve_github_token(
    token: str | None = None,
    config: AtlasConfig | None = None,
) -> str:
    """
    Return the GitHub token to use for contributor lookups.

    An explicit token wins over the environment variable named by
    config.github_token_env. Absence of both is a fatal configuration error.
    """
    config = config or DEFAULT_CONFIG
    token = token or os.environ.get(config.github_token_env)
    if not token:
        raise ConfigurationError(
            f"{config.github_token_env} is not set. Contributor lookups need an "
            f"authenticated GitHub token (set it in .env or pass --token)."
        )
    return token


# Singleton default — import this everywhere instead of constructing anew.
DEFAULT_CONFIG = AtlasConfig()
