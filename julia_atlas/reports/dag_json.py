"""
julia_atlas/reports/dag_json.py — DAG-Julia-Pkgs.json export.

Document layout (consumed by the force-directed visualization):

    {
      "nodes": [
        {
          "id": "Example",
          "indegree": 1,
          "outdegree": 2,
          "juliaversion": {"min": "0.6.0", "max": "∞", "majorminor": "0.6"},
          "descendents": [{"id": "Foo", "level": 1}, ...],
          "contributors": [{"id": "alice", "contributions": 42}, ...]
        },
        ...
      ],
      "links": [{"source": "Example", "target": "Foo"}, ...]
    }

Nodes and links follow the graph's iteration order. Packages are referred
to by name everywhere in the document.
"""

import json
import logging
import os

from julia_atlas.graph.store import GraphStore
from julia_atlas.registry.versions import VersionConstraint

logger = logging.getLogger(__name__)


def _node_name(store: GraphStore, node: int) -> str:
    return store.node_attrs(node).get("name", str(node))


def node_to_dict(store: GraphStore, node: int) -> dict:
    """Serialise one package node."""
    attrs = store.node_attrs(node)
    version = attrs.get("julia_version") or VersionConstraint.bogus()
    return {
        "id": _node_name(store, node),
        "indegree": store.in_degree(node),
        "outdegree": store.out_degree(node),
        "juliaversion": version.to_dict(),
        "descendents": [
            {"id": _node_name(store, d.package_id), "level": d.level}
            for d in attrs.get("descendants", [])
        ],
        "contributors": [
            {"id": c.login, "contributions": c.contributions}
            for c in attrs.get("contributors", [])
        ],
    }


def build_dag_document(store: GraphStore) -> dict:
    """Build the {nodes, links} document from an enriched store."""
    nodes = [node_to_dict(store, node) for node in store.nodes()]
    links = [
        {"source": _node_name(store, u), "target": _node_name(store, v)}
        for u, v in store.edges()
    ]
    return {"nodes": nodes, "links": links}


def export_dag_json(store: GraphStore, output_path: str) -> dict:
    """
    Write the DAG document to output_path (UTF-8, indented), overwriting.

    Returns:
        The document that was written.
    """
    document = build_dag_document(store)
    parent = os.path.dirname(output_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(document, fh, indent=2, ensure_ascii=False)

    logger.info(
        "DAG exported to %s: %d nodes, %d links.",
        output_path,
        len(document["nodes"]),
        len(document["links"]),
    )
    return document


def load_dag_json(path: str) -> dict:
    """Read a previously exported DAG document."""
    with open(path, encoding="utf-8") as fh:
        document = json.load(fh)
    if "nodes" not in document or "links" not in document:
        raise ValueError(f"{path} is not a DAG document (missing nodes/links)")
    return document
