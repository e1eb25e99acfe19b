"""
julia_atlas/viz/figures.py — Static matplotlib figures for an exported DAG.

Usage:
    from julia_atlas.viz.figures import generate_all_figures
    paths = generate_all_figures(df, document, output_dir="figures")
    # paths = {"fig1_descendant_histogram.png": "/abs/path/...", ...}
"""

from __future__ import annotations

import logging
import os
from collections import Counter

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from julia_atlas.config import BOGUS, NA
from julia_atlas.reports.summary import top_packages, version_distribution

logger = logging.getLogger(__name__)

C_BAR = "#4063D8"       # Julia blue
C_ACCENT = "#CB3C33"    # Julia red
C_SENTINEL = "#9E9E9E"
C_DARK = "#1A2B3C"
C_LIGHT = "#EEF1F8"

STYLE = {
    "figure.facecolor": "white",
    "axes.facecolor": C_LIGHT,
    "axes.edgecolor": C_DARK,
    "axes.labelcolor": C_DARK,
    "xtick.color": C_DARK,
    "ytick.color": C_DARK,
    "text.color": C_DARK,
    "grid.color": "white",
    "grid.linewidth": 1.0,
    "axes.spines.top": False,
    "axes.spines.right": False,
}


def _save(fig, output_dir: str, name: str) -> str:
    path = os.path.abspath(os.path.join(output_dir, name))
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved %s", path)
    return path


def fig_descendant_histogram(df: pd.DataFrame):
    """Log-binned histogram of descendant counts (packages with >= 1 descendant)."""
    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=(8, 5))
        counts = df.loc[df["n_descendants"] > 0, "n_descendants"].to_numpy()
        if counts.size:
            bins = np.unique(np.logspace(0, np.log10(counts.max() + 1), 30).astype(int))
            ax.hist(counts, bins=bins, color=C_BAR, edgecolor="white")
            ax.set_xscale("log")
        leaves = int((df["n_descendants"] == 0).sum())
        ax.set_title(f"Descendants per package ({leaves} packages have none)")
        ax.set_xlabel("Number of descendants (log scale)")
        ax.set_ylabel("Packages")
        ax.grid(axis="y")
    return fig


def fig_version_distribution(df: pd.DataFrame):
    """Bar chart of the Julia major.minor required by each package's latest release."""
    dist = version_distribution(df)
    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=(9, 5))
        colors = [C_SENTINEL if v in (NA, BOGUS) else C_BAR for v in dist.index]
        ax.bar([str(v) for v in dist.index], dist.to_numpy(), color=colors)
        ax.set_title("Minimum Julia version required by latest release")
        ax.set_xlabel("Julia major.minor")
        ax.set_ylabel("Packages")
        ax.tick_params(axis="x", rotation=45)
        ax.grid(axis="y")
    return fig


def fig_level_profile(document: dict, df: pd.DataFrame, n: int = 10):
    """Stacked bars: descendants per level for the n packages with most descendants."""
    top = top_packages(df, n=n)
    by_name = {node["id"]: node for node in document["nodes"]}

    profiles = {
        name: Counter(d["level"] for d in by_name[name].get("descendents", []))
        for name in top["package"]
    }
    max_level = max((max(p, default=0) for p in profiles.values()), default=0)

    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=(10, 5))
        names = list(profiles)
        bottom = np.zeros(len(names))
        cmap = plt.get_cmap("viridis", max(max_level, 1))
        for level in range(1, max_level + 1):
            values = np.array([profiles[name].get(level, 0) for name in names])
            ax.bar(names, values, bottom=bottom, color=cmap(level - 1), label=f"level {level}")
            bottom += values
        ax.set_title(f"Descendants by level — top {len(names)} packages")
        ax.set_ylabel("Descendants")
        ax.tick_params(axis="x", rotation=45)
        if max_level:
            ax.legend(fontsize=8, ncol=2)
        ax.grid(axis="y")
    return fig


def generate_all_figures(df: pd.DataFrame, document: dict, output_dir: str) -> dict[str, str]:
    """
    Render every figure into output_dir.

    Returns:
        Dict mapping file name → absolute path.
    """
    os.makedirs(output_dir, exist_ok=True)
    figures = {
        "fig1_descendant_histogram.png": fig_descendant_histogram(df),
        "fig2_julia_version_distribution.png": fig_version_distribution(df),
        "fig3_level_profile.png": fig_level_profile(document, df),
    }
    return {name: _save(fig, output_dir, name) for name, fig in figures.items()}
