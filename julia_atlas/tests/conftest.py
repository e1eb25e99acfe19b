"""
julia_atlas/tests/conftest.py — Shared pytest fixtures for the julia_atlas test suite.

The synthetic registry is written under tmp_path so that every test reads a
real directory tree without touching the network.

Fixtures:
    make_registry      — Factory writing a METADATA-style tree from a dict.
    small_registry     — A → B → C chain plus a GitLab package and a
                         package without versions.
    fake_contributors  — ContributorSource returning canned lists.
"""

import os

import pytest

from julia_atlas.ingestion.github_client import Contributor


# ── Integration marker ────────────────────────────────────────────────────────

def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Also run tests that talk to api.github.com (needs GITHUB_TOKEN).",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: needs network access and a real GitHub token"
    )


def pytest_collection_modifyitems(config, items):
    markexpr = config.getoption("-m", default="") or ""
    wanted = config.getoption("--run-integration") or "integration" in markexpr
    if wanted:
        return
    skip = pytest.mark.skip(reason="needs --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


# ── Synthetic registry ────────────────────────────────────────────────────────

def write_registry(root, packages: dict) -> str:
    """
    Write a registry tree.

    packages maps name → {"url": str | None, "versions": {version: requires_text} | None}.
    A missing "versions" key (or None) leaves out the versions directory.
    """
    root = str(root)
    os.makedirs(root, exist_ok=True)
    for name, entry in packages.items():
        pkg_dir = os.path.join(root, name)
        os.makedirs(pkg_dir, exist_ok=True)
        url = entry.get("url")
        if url is not None:
            with open(os.path.join(pkg_dir, "url"), "w", encoding="utf-8") as fh:
                fh.write(url + "\n")
        versions = entry.get("versions")
        if versions is None:
            continue
        os.makedirs(os.path.join(pkg_dir, "versions"), exist_ok=True)
        for version, requires in versions.items():
            vdir = os.path.join(pkg_dir, "versions", version)
            os.makedirs(vdir, exist_ok=True)
            if requires is not None:
                with open(os.path.join(vdir, "requires"), "w", encoding="utf-8") as fh:
                    fh.write(requires)
    return root


@pytest.fixture
def make_registry(tmp_path):
    def _make(packages: dict, name: str = "METADATA") -> str:
        return write_registry(tmp_path / name, packages)
    return _make


SMALL_REGISTRY = {
    # A has dependent B, B has dependent C.
    "A": {
        "url": "git://github.com/owner/A.jl.git",
        "versions": {"0.1.0": "julia 0.5\n", "0.2.0": "julia 0.6 0.7-\n"},
    },
    "B": {
        "url": "https://github.com/owner/B.jl.git",
        "versions": {"1.0.0": "julia 0.6\nA 0.1\n"},
    },
    "C": {
        "url": "https://github.com/owner/C.jl.git",
        "versions": {"0.9.0": "julia 0.6\nB\n", "0.10.0": "B 1.0\n"},
    },
    "Gitlabbed": {
        "url": "https://gitlab.com/foo/bar.git",
        "versions": {"0.1.0": "julia 0.7\n"},
    },
    "NoVersions": {
        "url": "https://github.com/owner/NoVersions.jl.git",
    },
}


@pytest.fixture
def small_registry(make_registry):
    root = make_registry(SMALL_REGISTRY)
    # Registry bookkeeping that must never be scanned as packages.
    with open(os.path.join(root, "README.md"), "w", encoding="utf-8") as fh:
        fh.write("registry\n")
    os.makedirs(os.path.join(root, ".git"))
    os.makedirs(os.path.join(root, "METADATA"))
    return root


class FakeContributorSource:
    """ContributorSource returning canned lists and recording calls."""

    def __init__(self, data: dict | None = None):
        self.data = data or {}
        self.calls: list[str] = []

    def contributors(self, owner_repo: str) -> list[Contributor]:
        self.calls.append(owner_repo)
        return list(self.data.get(owner_repo, []))


@pytest.fixture
def fake_contributors():
    return FakeContributorSource(
        {
            "owner/A.jl": [Contributor("alice", 40), Contributor("bob", 2)],
            "owner/B.jl": [Contributor("carol", 7)],
        }
    )


class DictDependents:
    """DependentsSource over a plain {name: [dependents]} mapping."""

    def __init__(self, mapping: dict):
        self.mapping = mapping

    def dependents(self, name: str) -> list[str]:
        return list(self.mapping.get(name, []))
