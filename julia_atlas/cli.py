"""
julia_atlas/cli.py — Command-line interface for the DAG explorer.

Usage:
    python -m julia_atlas run       # scan → graph → descendants → contributors → JSON
    python -m julia_atlas graph     # same, without GitHub lookups (no token needed)
    python -m julia_atlas viz       # summary CSV + figures + HTML from an existing JSON
    python -m julia_atlas status    # show token, registry and output state

All commands read GITHUB_TOKEN from .env in the working directory (or the
path given by --env-file) before falling back to the environment variable.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path

from julia_atlas.config import DEFAULT_CONFIG, ConfigurationError
from julia_atlas.graph.builder import UnknownDependentError
from julia_atlas.ingestion.github_client import GitHubAPIError, GitHubAuthError

_FATAL_ERRORS = (
    ConfigurationError,
    GitHubAuthError,
    GitHubAPIError,
    UnknownDependentError,
    OSError,
)


# ── .env loader ───────────────────────────────────────────────────────────────

def _find_dotenv() -> str | None:
    """Nearest .env walking up from the working directory, if any."""
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


def _load_dotenv(env_file: str | None = None) -> dict[str, str]:
    """Export KEY=VALUE lines of a .env file into os.environ.

    Variables already set in the environment keep their value. With no
    env_file the nearest .env above the working directory is used.

    Returns:
        The variables this call added.
    """
    path = env_file or _find_dotenv()
    if not path or not Path(path).is_file():
        return {}

    loaded: dict[str, str] = {}
    with open(path, encoding="utf-8") as fh:
        for raw_line in fh:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = (part.strip() for part in line.partition("="))
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value
    return loaded


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # Third-party loggers stay at WARNING.
    for name in ("urllib.request", "matplotlib", "PIL"):
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger("julia_atlas.cli")


def _config_from_args(args: argparse.Namespace):
    overrides = {}
    for arg_name, field_name in (
        ("registry", "registry_dir"),
        ("output", "output_path"),
        ("version_ordering", "version_ordering"),
        ("dependents_scope", "dependents_scope"),
        ("unknown_dependents", "unknown_dependent_policy"),
    ):
        value = getattr(args, arg_name, None)
        if value is not None:
            overrides[field_name] = value
    return dataclasses.replace(DEFAULT_CONFIG, **overrides)


# ── Subcommands: run / graph ──────────────────────────────────────────────────

def _run(args: argparse.Namespace, fetch_contributors: bool) -> int:
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from julia_atlas.pipeline import run_pipeline

    try:
        config = _config_from_args(args)
        logger.info("=" * 60)
        logger.info("Julia Atlas — %s", "Full Run" if fetch_contributors else "Graph Only")
        logger.info("  Registry     : %s", config.registry_dir)
        logger.info("  Output       : %s", config.output_path)
        logger.info("  Ordering     : %s", config.version_ordering)
        logger.info("  Contributors : %s", "GitHub" if fetch_contributors else "skipped")
        logger.info("=" * 60)

        t0 = time.monotonic()
        result = run_pipeline(
            config=config,
            token=args.token,
            fetch_contributors=fetch_contributors,
        )
        elapsed = time.monotonic() - t0
    except _FATAL_ERRORS as exc:
        logger.error("Run aborted: %s", exc)
        return 1

    store = result.store
    n_desc = [len(v) for v in result.descendants.values()]
    print()
    print("=" * 60)
    print("  JULIA ATLAS — RUN COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {elapsed:.0f}s ({elapsed/60:.1f} min)")
    print(f"  Packages         : {store.number_of_nodes()}")
    print(f"  Dependency edges : {store.number_of_edges()}")
    print(f"  Skipped deps     : {len(getattr(store, 'skipped_dependents', []))}")
    print(f"  Max descendants  : {max(n_desc, default=0)}")
    print(f"  Contributors     : {result.contributor_stats.get('contributors', 0)}")
    print(f"  Julia versions   : {result.version_stats}")
    print(f"  Output           : {result.output_path}")
    print("=" * 60)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Full pipeline including GitHub contributor lookups."""
    return _run(args, fetch_contributors=True)


def cmd_graph(args: argparse.Namespace) -> int:
    """Pipeline without GitHub lookups; contributor lists stay empty."""
    return _run(args, fetch_contributors=False)


# ── Subcommand: viz ───────────────────────────────────────────────────────────

def cmd_viz(args: argparse.Namespace) -> int:
    """Summary CSV, PNG figures and interactive HTML from an exported JSON."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from julia_atlas.reports.dag_json import load_dag_json
    from julia_atlas.reports.summary import dag_to_dataframe, export_summary_csv, top_packages
    from julia_atlas.viz.figures import generate_all_figures
    from julia_atlas.viz.plotly_graph import build_dag_figure, save_figure_html

    json_path = args.input or DEFAULT_CONFIG.output_path
    try:
        document = load_dag_json(json_path)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read %s: %s", json_path, exc)
        return 1

    df = dag_to_dataframe(document)
    csv_path = args.summary_csv or DEFAULT_CONFIG.summary_csv_path
    export_summary_csv(df, csv_path)

    figure_paths = {}
    if not args.no_figures:
        figure_paths = generate_all_figures(
            df, document, args.figures_dir or DEFAULT_CONFIG.figures_dir
        )

    html_path = None
    if not args.no_html:
        html_path = args.html or DEFAULT_CONFIG.graph_html_path
        save_figure_html(build_dag_figure(document), html_path)

    print()
    print("=" * 60)
    print("  JULIA ATLAS — VIZ COMPLETE")
    print("=" * 60)
    print(f"  Summary CSV : {csv_path}")
    print(f"  HTML graph  : {html_path or 'skipped'}")
    for name in sorted(figure_paths):
        print(f"    + {name}")
    print()
    print("  Most depended-upon packages:")
    for _, row in top_packages(df, n=10).iterrows():
        print(f"    {row['package']:<30} {row['n_descendants']:>5} descendants")
    print("=" * 60)
    return 0


# ── Subcommand: status ────────────────────────────────────────────────────────

def cmd_status(args: argparse.Namespace) -> int:
    """Show token presence, registry and output file state."""
    _load_dotenv(args.env_file)
    _setup_logging("WARNING")
    config = _config_from_args(args)

    print("\nJulia Atlas — Status Report")
    print("=" * 40)

    token = args.token or os.environ.get(config.github_token_env)
    print(f"  {config.github_token_env:<13} : {'✓ present' if token else '✗ not set'}")

    registry = Path(config.registry_dir)
    if registry.is_dir():
        print(f"  Registry      : ✓ {registry}")
    else:
        print(f"  Registry      : ✗ {registry} not found")

    print("\n  Output files:")
    for fname in [config.output_path, config.summary_csv_path, config.graph_html_path]:
        fpath = Path(fname)
        if fpath.exists():
            size = fpath.stat().st_size
            mtime = datetime.fromtimestamp(fpath.stat().st_mtime).strftime("%Y-%m-%d %H:%M")
            print(f"    ✓ {fname:<30} {size:>9} bytes  ({mtime})")
        else:
            print(f"    ✗ {fname:<30} not found")

    fig_dir = Path(config.figures_dir)
    pngs = sorted(fig_dir.glob("*.png")) if fig_dir.is_dir() else []
    print(f"\n  Figures ({fig_dir}/): {len(pngs)} PNG files")
    print()
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="julia-atlas",
        description=(
            "Julia Atlas — dependency DAG explorer for the Julia package registry.\n"
            "Reads GITHUB_TOKEN from .env automatically."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full run against a METADATA checkout
  python -m julia_atlas run --registry ~/METADATA.jl

  # Graph and versions only, no GitHub token needed
  python -m julia_atlas graph --registry ~/METADATA.jl

  # Reproduce the lexicographic latest-version choice of older exports
  python -m julia_atlas run --version-ordering lexicographic

  # Figures + interactive graph from the exported JSON
  python -m julia_atlas viz
        """,
    )

    # Global flags
    parser.add_argument(
        "--env-file",
        default=None,
        metavar="PATH",
        help="Path to .env file (default: auto-detect .env from the working directory up)",
    )
    parser.add_argument(
        "--token",
        default=None,
        metavar="GITHUB_TOKEN",
        help="GitHub personal access token (overrides .env and environment)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    def add_location_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--registry", default=None, metavar="PATH",
            help=f"Registry checkout (default: {DEFAULT_CONFIG.registry_dir})",
        )
        p.add_argument(
            "--output", default=None, metavar="PATH",
            help=f"JSON output path (default: {DEFAULT_CONFIG.output_path})",
        )

    def add_pipeline_flags(p: argparse.ArgumentParser) -> None:
        add_location_flags(p)
        p.add_argument(
            "--version-ordering", default=None, choices=["semantic", "lexicographic"],
            help="How the latest release is chosen (default: semantic)",
        )
        p.add_argument(
            "--dependents-scope", default=None, choices=["all_versions", "latest"],
            help="Releases considered when inverting requires files (default: all_versions)",
        )
        p.add_argument(
            "--unknown-dependents", default=None, choices=["skip", "fail"],
            help="Dependents missing from the registry: skip with a warning, or abort",
        )

    p_run = subparsers.add_parser("run", help="Full pipeline including GitHub contributors")
    add_pipeline_flags(p_run)
    p_run.set_defaults(func=cmd_run)

    p_graph = subparsers.add_parser("graph", help="Pipeline without GitHub lookups")
    add_pipeline_flags(p_graph)
    p_graph.set_defaults(func=cmd_graph)

    p_viz = subparsers.add_parser("viz", help="Summary CSV, figures and HTML from the JSON")
    p_viz.add_argument("--input", default=None, metavar="PATH", help="DAG JSON to read")
    p_viz.add_argument("--summary-csv", default=None, metavar="PATH")
    p_viz.add_argument("--figures-dir", default=None, metavar="PATH")
    p_viz.add_argument("--html", default=None, metavar="PATH")
    p_viz.add_argument("--no-figures", action="store_true", help="Skip PNG figures")
    p_viz.add_argument("--no-html", action="store_true", help="Skip the interactive graph")
    p_viz.set_defaults(func=cmd_viz)

    p_status = subparsers.add_parser("status", help="Show token, registry and output state")
    add_location_flags(p_status)
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
