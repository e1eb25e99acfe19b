"""
julia_atlas/tests/test_builder.py — Tests for graph construction.

Tests verify:
- One node per package, carrying its name.
- Edge P → C for every reported dependent C of P.
- out-degree equals the number of recorded dependents.
- Unknown dependents are skipped (default) or fatal (policy "fail").
- RegistryDependentsSource inverts requires files correctly.
"""

import dataclasses

import networkx as nx
import pytest

from julia_atlas.config import DEFAULT_CONFIG
from julia_atlas.graph.builder import UnknownDependentError, build_dependency_graph
from julia_atlas.graph.store import NetworkXGraphStore
from julia_atlas.registry.dependents import RegistryDependentsSource
from julia_atlas.registry.scanner import PackageIndex, scan_registry
from julia_atlas.tests.conftest import DictDependents


def _names_of_edges(store, index):
    return {(index.name_of(u), index.name_of(v)) for u, v in store.edges()}


class TestBuildDependencyGraph:

    def test_chain_edges(self):
        index = PackageIndex.from_names(["A", "B", "C"])
        store = build_dependency_graph(index, DictDependents({"A": ["B"], "B": ["C"]}))
        assert _names_of_edges(store, index) == {("A", "B"), ("B", "C")}

    def test_returns_networkx_store_by_default(self):
        index = PackageIndex.from_names(["A"])
        store = build_dependency_graph(index, DictDependents({}))
        assert isinstance(store, NetworkXGraphStore)
        assert isinstance(store.graph, nx.DiGraph)

    def test_every_package_is_a_node(self):
        index = PackageIndex.from_names(["A", "B", "Isolated"])
        store = build_dependency_graph(index, DictDependents({"A": ["B"]}))
        assert store.number_of_nodes() == 3
        assert store.node_attrs(index.id_of("Isolated"))["name"] == "Isolated"

    def test_out_degree_equals_dependent_count(self):
        mapping = {"A": ["B", "C", "D"], "B": ["D"], "C": []}
        index = PackageIndex.from_names(["A", "B", "C", "D"])
        store = build_dependency_graph(index, DictDependents(mapping))
        for name in index.names:
            assert store.out_degree(index.id_of(name)) == len(mapping.get(name, []))

    def test_packages_without_dependents_have_no_outgoing_edges(self):
        index = PackageIndex.from_names(["A", "B"])
        store = build_dependency_graph(index, DictDependents({"A": ["B"]}))
        assert store.out_degree(index.id_of("B")) == 0
        assert store.in_degree(index.id_of("A")) == 0

    def test_self_loop_is_kept(self):
        index = PackageIndex.from_names(["A"])
        store = build_dependency_graph(index, DictDependents({"A": ["A"]}))
        assert store.number_of_edges() == 1

    def test_unknown_dependent_skipped(self):
        index = PackageIndex.from_names(["A", "B"])
        store = build_dependency_graph(index, DictDependents({"A": ["B", "Ghost"]}))
        assert store.number_of_edges() == 1
        assert store.skipped_dependents == [("A", "Ghost")]

    def test_unknown_dependent_fails_under_fail_policy(self):
        index = PackageIndex.from_names(["A"])
        config = dataclasses.replace(DEFAULT_CONFIG, unknown_dependent_policy="fail")
        with pytest.raises(UnknownDependentError):
            build_dependency_graph(index, DictDependents({"A": ["Ghost"]}), config=config)

    def test_populates_given_store(self):
        store = NetworkXGraphStore()
        index = PackageIndex.from_names(["A", "B"])
        returned = build_dependency_graph(index, DictDependents({"A": ["B"]}), store)
        assert returned is store


class TestRegistryDependentsSource:

    def test_inverts_requires(self, small_registry):
        index = scan_registry(small_registry)
        source = RegistryDependentsSource(small_registry, index)
        assert source.dependents("A") == ["B"]
        assert source.dependents("B") == ["C"]
        assert source.dependents("C") == []

    def test_platform_is_not_a_dependency(self, small_registry):
        index = scan_registry(small_registry)
        source = RegistryDependentsSource(small_registry, index)
        assert source.dependents("julia") == []

    def test_latest_scope_ignores_older_releases(self, make_registry):
        root = make_registry(
            {
                "Old": {"versions": {"0.1.0": ""}},
                "User": {"versions": {"0.1.0": "Old\n", "0.2.0": "julia 0.6\n"}},
            }
        )
        index = scan_registry(root)
        all_versions = RegistryDependentsSource(root, index)
        latest = RegistryDependentsSource(
            root, index, dataclasses.replace(DEFAULT_CONFIG, dependents_scope="latest")
        )
        assert all_versions.dependents("Old") == ["User"]
        assert latest.dependents("Old") == []

    def test_registry_graph_edges(self, small_registry):
        index = scan_registry(small_registry)
        store = build_dependency_graph(
            index, RegistryDependentsSource(small_registry, index)
        )
        assert _names_of_edges(store, index) == {("A", "B"), ("B", "C")}
