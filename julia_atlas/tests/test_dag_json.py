"""
julia_atlas/tests/test_dag_json.py — Tests for the JSON exporter.

Tests verify:
- Node and link key layout.
- Re-reading the file reproduces the node and link counts of the graph.
- Descendants are exported by name with their level.
- Defaults for nodes that were never enriched.
- An existing file is overwritten; non-ASCII survives as UTF-8.
"""

import json

import pytest

from julia_atlas.graph.builder import build_dependency_graph
from julia_atlas.graph.descendants import compute_descendants
from julia_atlas.ingestion.github_client import Contributor
from julia_atlas.registry.scanner import PackageIndex
from julia_atlas.registry.versions import VersionConstraint
from julia_atlas.reports.dag_json import build_dag_document, export_dag_json, load_dag_json
from julia_atlas.tests.conftest import DictDependents


@pytest.fixture
def chain_store():
    index = PackageIndex.from_names(["A", "B", "C"])
    store = build_dependency_graph(index, DictDependents({"A": ["B"], "B": ["C"]}))
    compute_descendants(store)
    store.set_node_attr(0, "contributors", [Contributor("alice", 5)])
    store.set_node_attr(0, "julia_version", VersionConstraint("0.6.0", "∞", "0.6"))
    return store


def _by_id(document):
    return {node["id"]: node for node in document["nodes"]}


def test_node_keys(chain_store):
    document = build_dag_document(chain_store)
    for node in document["nodes"]:
        assert set(node) == {
            "id", "indegree", "outdegree", "juliaversion", "descendents", "contributors"
        }
        assert isinstance(node["id"], str)


def test_link_keys_use_names(chain_store):
    document = build_dag_document(chain_store)
    assert document["links"] == [
        {"source": "A", "target": "B"},
        {"source": "B", "target": "C"},
    ]


def test_chain_payload(chain_store):
    nodes = _by_id(build_dag_document(chain_store))
    assert nodes["A"]["descendents"] == [{"id": "B", "level": 1}, {"id": "C", "level": 2}]
    assert nodes["B"]["descendents"] == [{"id": "C", "level": 1}]
    assert nodes["C"]["descendents"] == []
    assert nodes["A"]["indegree"] == 0
    assert nodes["A"]["outdegree"] == 1
    assert nodes["A"]["contributors"] == [{"id": "alice", "contributions": 5}]
    assert nodes["A"]["juliaversion"] == {"min": "0.6.0", "max": "∞", "majorminor": "0.6"}


def test_unenriched_node_defaults(chain_store):
    nodes = _by_id(build_dag_document(chain_store))
    assert nodes["C"]["contributors"] == []
    assert nodes["C"]["juliaversion"] == {"min": "BOGUS", "max": "BOGUS", "majorminor": "BOGUS"}


def test_round_trip_counts(chain_store, tmp_path):
    path = tmp_path / "DAG-Julia-Pkgs.json"
    export_dag_json(chain_store, str(path))
    document = load_dag_json(str(path))
    assert len(document["nodes"]) == chain_store.number_of_nodes()
    assert len(document["links"]) == chain_store.number_of_edges()


def test_overwrites_and_keeps_utf8(chain_store, tmp_path):
    path = tmp_path / "out.json"
    path.write_text("stale")
    export_dag_json(chain_store, str(path))
    text = path.read_text(encoding="utf-8")
    assert "∞" in text
    assert text.startswith("{\n  ")
    assert json.loads(text)["nodes"]


def test_creates_parent_directory(chain_store, tmp_path):
    path = tmp_path / "nested" / "dir" / "out.json"
    export_dag_json(chain_store, str(path))
    assert path.is_file()


def test_load_rejects_other_json(tmp_path):
    path = tmp_path / "other.json"
    path.write_text('{"hello": 1}')
    with pytest.raises(ValueError):
        load_dag_json(str(path))
