"""Graph scanning — discovery of candidate entity subjects by rdf:type."""

from __future__ import annotations

from rdflib import Graph, URIRef

from .terms import term_id
from .vocabularies import RDF


def find_subjects_by_type(graph: Graph, *type_values: URIRef) -> list[str]:
    """Return the distinct subjects typed with any of ``type_values``.

    Several type values may denote the same entity category (a dataset is
    recognizable as dcat:Dataset or ldes:EventStream); a subject matching
    more than one is returned once, at its first-seen position.
    """
    seen: dict[str, None] = {}
    for type_value in type_values:
        for subject in graph.subjects(RDF.type, type_value):
            identifier = term_id(subject)
            if identifier is not None:
                seen.setdefault(identifier, None)
    return list(seen)
