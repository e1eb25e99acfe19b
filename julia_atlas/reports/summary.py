"""
julia_atlas/reports/summary.py — Tabular view of an exported DAG.

Flattens the DAG document into a pandas DataFrame with one row per package
so that the ecosystem can be ranked and plotted without walking the graph
again.
"""

import logging

import numpy as np
import pandas as pd

from julia_atlas.config import BOGUS, NA

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "package",
    "indegree",
    "outdegree",
    "n_descendants",
    "max_level",
    "mean_level",
    "n_contributors",
    "total_contributions",
    "julia_min",
    "julia_max",
    "julia_majorminor",
]


def dag_to_dataframe(document: dict) -> pd.DataFrame:
    """
    One row per package node of a DAG document.

    Columns:
        package, indegree, outdegree, n_descendants, max_level (0 when the
        package has no descendants), mean_level (NaN when it has none),
        n_contributors, total_contributions, julia_min, julia_max,
        julia_majorminor.
    """
    rows = []
    for node in document.get("nodes", []):
        levels = [d["level"] for d in node.get("descendents", [])]
        contributions = [c["contributions"] for c in node.get("contributors", [])]
        version = node.get("juliaversion", {})
        rows.append(
            {
                "package": node["id"],
                "indegree": node.get("indegree", 0),
                "outdegree": node.get("outdegree", 0),
                "n_descendants": len(levels),
                "max_level": max(levels, default=0),
                "mean_level": float(np.mean(levels)) if levels else np.nan,
                "n_contributors": len(contributions),
                "total_contributions": int(sum(contributions)),
                "julia_min": version.get("min", BOGUS),
                "julia_max": version.get("max", BOGUS),
                "julia_majorminor": version.get("majorminor", BOGUS),
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def top_packages(df: pd.DataFrame, n: int = 20, by: str = "n_descendants") -> pd.DataFrame:
    """The n packages with the largest value of `by`, ties broken by name."""
    return (
        df.sort_values([by, "package"], ascending=[False, True])
        .head(n)
        .reset_index(drop=True)
    )


def version_distribution(df: pd.DataFrame, include_sentinels: bool = True) -> pd.Series:
    """
    Package count per declared Julia major.minor.

    Versions are ordered numerically; the NA and BOGUS sentinels, if kept,
    come last.
    """
    counts = df["julia_majorminor"].value_counts()
    sentinels = [s for s in (NA, BOGUS) if s in counts.index]
    declared = [v for v in counts.index if v not in (NA, BOGUS)]
    declared.sort(key=lambda v: tuple(int(p) for p in v.split(".") if p.isdigit()))
    order = declared + (sentinels if include_sentinels else [])
    return counts.reindex(order)


def export_summary_csv(df: pd.DataFrame, path: str) -> None:
    df.to_csv(path, index=False)
    logger.info("Summary table saved to %s (%d rows).", path, len(df))
