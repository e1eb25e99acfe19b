"""
julia_atlas/tests/test_pipeline.py — End-to-end runs over a synthetic registry.

Tests verify:
- run_pipeline executes all stages and writes the JSON.
- The A → B → C registry produces the expected descendant lists.
- GitLab and versionless packages degrade to empty / BOGUS values.
- A missing token is a configuration error raised before any work.
- fetch_contributors=False needs no token.
"""

import os

import pytest

from julia_atlas.config import ConfigurationError
from julia_atlas.pipeline import run_pipeline
from julia_atlas.reports.dag_json import load_dag_json
from julia_atlas.tests.conftest import DictDependents


def _by_id(document):
    return {node["id"]: node for node in document["nodes"]}


def test_full_run(small_registry, fake_contributors, tmp_path):
    out = tmp_path / "out" / "DAG-Julia-Pkgs.json"
    result = run_pipeline(
        registry_dir=small_registry,
        output_path=str(out),
        contributor_source=fake_contributors,
    )

    assert out.is_file()
    assert result.output_path == str(out)
    nodes = _by_id(load_dag_json(str(out)))
    assert set(nodes) == {"A", "B", "C", "Gitlabbed", "NoVersions"}

    assert nodes["A"]["descendents"] == [{"id": "B", "level": 1}, {"id": "C", "level": 2}]
    assert nodes["B"]["descendents"] == [{"id": "C", "level": 1}]
    assert nodes["C"]["descendents"] == []

    assert nodes["A"]["contributors"] == [
        {"id": "alice", "contributions": 40},
        {"id": "bob", "contributions": 2},
    ]
    assert nodes["Gitlabbed"]["contributors"] == []
    assert nodes["NoVersions"]["juliaversion"] == {
        "min": "BOGUS", "max": "BOGUS", "majorminor": "BOGUS"
    }
    assert nodes["C"]["juliaversion"]["majorminor"] == "NA"


def test_round_trip_matches_graph(small_registry, fake_contributors, tmp_path):
    out = tmp_path / "dag.json"
    result = run_pipeline(
        registry_dir=small_registry, output_path=str(out), contributor_source=fake_contributors
    )
    document = load_dag_json(str(out))
    assert len(document["nodes"]) == result.store.number_of_nodes()
    assert len(document["links"]) == result.store.number_of_edges()


def test_missing_token_is_fatal(small_registry, tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    out = tmp_path / "dag.json"
    with pytest.raises(ConfigurationError):
        run_pipeline(registry_dir=small_registry, output_path=str(out))
    assert not out.exists()


def test_graph_only_run_needs_no_token(small_registry, tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    result = run_pipeline(
        registry_dir=small_registry,
        output_path=str(tmp_path / "dag.json"),
        fetch_contributors=False,
    )
    assert all(node["contributors"] == [] for node in result.document["nodes"])
    assert result.contributor_stats["looked_up"] == 0


def test_injected_dependents_source(small_registry, tmp_path):
    result = run_pipeline(
        registry_dir=small_registry,
        output_path=str(tmp_path / "dag.json"),
        fetch_contributors=False,
        dependents_source=DictDependents({"Gitlabbed": ["NoVersions", "Unknown"]}),
    )
    assert result.document["links"] == [{"source": "Gitlabbed", "target": "NoVersions"}]
    assert result.store.skipped_dependents == [("Gitlabbed", "Unknown")]


def test_missing_registry_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_pipeline(
            registry_dir=os.path.join(str(tmp_path), "nope"),
            output_path=str(tmp_path / "dag.json"),
            fetch_contributors=False,
        )
