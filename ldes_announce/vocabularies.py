"""Vocabulary namespaces used by the extractors and the writer.

The predicate tables built on these namespaces are what downstream consumers
read, so the IRIs here must stay exactly as published.
"""

from __future__ import annotations

from rdflib import Namespace
from rdflib.namespace import RDF, XSD

AS = Namespace("https://www.w3.org/ns/activitystreams#")
DCT = Namespace("http://purl.org/dc/terms/")
DCAT = Namespace("http://www.w3.org/ns/dcat#")
VOID = Namespace("http://rdfs.org/ns/void#")
TREE = Namespace("https://w3id.org/tree#")
LDES = Namespace("https://w3id.org/ldes#")
LDP = Namespace("http://www.w3.org/ns/ldp#")

__all__ = ["AS", "DCAT", "DCT", "LDES", "LDP", "RDF", "TREE", "VOID", "XSD"]
