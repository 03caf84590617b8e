"""Term resolution — dereferencing graph terms into JSON-LD shaped values.

Two modes:

  resolve_shallow(): literals become value records, nodes become {"@id": ...}
  resolve_deep():    nodes are expanded by following every outgoing statement,
                     with a per-path guard against reference cycles

Identifiers are strings: named nodes are their IRI, blank nodes are rendered
"_:<label>" as in JSON-LD. to_term() converts them back.
"""

from __future__ import annotations

import logging
from typing import Any

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Node

from .types import CircularReference
from .vocabularies import RDF, XSD

logger = logging.getLogger(__name__)


def term_id(term: Node) -> str | None:
    """Return the document identifier of a node, or None for literals."""
    if isinstance(term, BNode):
        return f"_:{term}"
    if isinstance(term, URIRef):
        return str(term)
    return None


def to_term(identifier: str) -> URIRef | BNode:
    """Inverse of term_id()."""
    if identifier.startswith("_:"):
        return BNode(identifier[2:])
    return URIRef(identifier)


def as_list(value: Any) -> list:
    """Normalize a JSON-LD value that may be a single item or a list."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    return list(value)


def reference_id(reference: Any) -> str | None:
    """Identifier of a reference written either as "iri" or {"@id": "iri"}."""
    if isinstance(reference, str):
        return reference
    if isinstance(reference, dict):
        return reference.get("@id")
    return None


def create_literal(literal: Literal) -> dict[str, str]:
    """Render a literal as {"@value", "@type" | "@language"}.

    The language tag wins over the datatype. Plain literals carry xsd:string.
    """
    item = {"@value": str(literal)}
    if literal.language:
        item["@language"] = literal.language
    elif literal.datatype is not None:
        item["@type"] = str(literal.datatype)
    else:
        item["@type"] = str(XSD.string)
    return item


def resolve_shallow(graph: Graph, term: Node) -> dict[str, Any]:
    if isinstance(term, Literal):
        return create_literal(term)
    if isinstance(term, (URIRef, BNode)):
        return {"@id": term_id(term)}
    # Variables and other exotic terms carry no metadata
    return {}


def resolve_deep(
    graph: Graph,
    term: Node,
    visited: frozenset[str] | None = None,
    diagnostics: list[CircularReference] | None = None,
) -> dict[str, Any]:
    """Expand a term by recursively following all of its outgoing statements.

    ``visited`` holds the identifiers being expanded on the current path; the
    term itself is added to it before its statements are followed. Each
    branch gets its own copy, so a node reached twice through different
    siblings is expanded twice, while a node reached again through its own
    descendants is emitted as {"@id": ...}. Such cycles are appended to
    ``diagnostics`` (when given) and logged.

    Predicate keys map to lists in statement order. rdf:type sets "@type"
    (a list once more than one type is seen). Named nodes keep their "@id";
    blank nodes are anonymous in the output.
    """
    if isinstance(term, Literal):
        return create_literal(term)
    if not isinstance(term, (URIRef, BNode)):
        return {}

    node_id = term_id(term)
    path = (visited or frozenset()) | {node_id}

    item: dict[str, Any] = {"@id": node_id} if isinstance(term, URIRef) else {}
    for _, predicate, obj in graph.triples((term, None, None)):
        if predicate == RDF.type:
            _add_type(item, term_id(obj) or str(obj))
            continue

        key = str(predicate)
        target = term_id(obj)
        if target is not None and target in path:
            cycle = CircularReference(subject=node_id, predicate=key, target=target)
            logger.warning("Circular dependency discovered for %s", target)
            if diagnostics is not None:
                diagnostics.append(cycle)
            value = {"@id": target}
        else:
            value = resolve_deep(graph, obj, path, diagnostics)
        item.setdefault(key, []).append(value)

    return item


def _add_type(item: dict[str, Any], type_id: str) -> None:
    current = item.get("@type")
    if current is None:
        item["@type"] = type_id
    elif isinstance(current, list):
        current.append(type_id)
    else:
        item["@type"] = [current, type_id]
