"""Default tree metadata extractor — node and relation descriptors.

The extractors and the writer only need a callable that turns a flat list of
statements into a TreeMetadata. Any implementation can be injected; this one
covers the TREE/LDES properties the views are built from:

  nodes:     subjects typed tree:Node, objects of tree:view, subjects of
             tree:relation
  relations: objects of tree:relation
"""

from __future__ import annotations

from typing import Any, Iterable

from rdflib import Graph

from .terms import resolve_deep, resolve_shallow, term_id
from .types import TreeMetadata
from .vocabularies import LDES, RDF, TREE

# (output key, predicate) pairs expanded in depth on node descriptors
_NODE_PROPERTIES = (
    ("search", TREE.search),
    ("retentionPolicy", LDES.retentionPolicy),
    ("conditionalImport", TREE.conditionalImport),
    ("import", TREE["import"]),
)

_RELATION_PROPERTIES = (
    ("node", TREE.node),
    ("path", TREE.path),
    ("value", TREE.value),
    ("remainingItems", TREE.remainingItems),
)


def extract_tree_metadata(triples: Iterable[tuple]) -> TreeMetadata:
    graph = Graph()
    for triple in triples:
        graph.add(triple)

    node_terms: dict[str, Any] = {}
    candidates = [
        *graph.subjects(RDF.type, TREE.Node),
        *graph.objects(None, TREE.view),
        *graph.subjects(TREE.relation, None),
    ]
    for term in candidates:
        identifier = term_id(term)
        if identifier is not None:
            node_terms.setdefault(identifier, term)

    metadata = TreeMetadata()
    for identifier, term in node_terms.items():
        metadata.nodes[identifier] = _describe_node(graph, term, identifier)
        for relation in graph.objects(term, TREE.relation):
            relation_id = term_id(relation)
            if relation_id is not None and relation_id not in metadata.relations:
                metadata.relations[relation_id] = _describe_relation(graph, relation, relation_id)
    return metadata


def _describe_node(graph: Graph, term, identifier: str) -> dict[str, Any]:
    node: dict[str, Any] = {
        "@context": {"@vocab": str(TREE)},
        "@id": identifier,
        "@type": [term_id(t) for t in graph.objects(term, RDF.type)],
        "relation": [resolve_shallow(graph, r) for r in graph.objects(term, TREE.relation)],
    }
    for key, predicate in _NODE_PROPERTIES:
        values = [resolve_deep(graph, o) for o in graph.objects(term, predicate)]
        if values:
            node[key] = values
    return node


def _describe_relation(graph: Graph, term, identifier: str) -> dict[str, Any]:
    relation: dict[str, Any] = {
        "@id": identifier,
        "@type": [term_id(t) for t in graph.objects(term, RDF.type)],
    }
    for key, predicate in _RELATION_PROPERTIES:
        values = [resolve_shallow(graph, o) for o in graph.objects(term, predicate)]
        if values:
            relation[key] = values
    return relation
