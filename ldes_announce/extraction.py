"""Extraction — typed announcement, dataset, data service and view documents.

Each entity is described by a declarative field table (see types.FieldSpec)
interpreted by extract_by_table(). The tables are the wire format consumers
depend on: output key, source predicate, cardinality and whether the field is
required.

  extract_announcement()              as:Announce, with nested as:Add
  extract_dataset()                   dcat:Dataset / ldes:EventStream
  extract_data_service()              dcat:DataService
  extract_bucketizer_configuration()  ldes:BucketizerConfiguration
  extract_view()                      tree:Node + tree metadata

extract_announcements_metadata() runs discovery, calls the tree metadata
extractor once over the whole graph, and extracts every category.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from rdflib import Graph

from .context import make_view_context
from .scanner import find_subjects_by_type
from .terms import as_list, reference_id, resolve_shallow, term_id, to_term
from .tree_metadata import extract_tree_metadata
from .types import (
    AnnouncementError,
    Cardinality,
    FieldSpec,
    MetadataExtractor,
    MissingRequiredPredicate,
    Table,
    TreeMetadata,
    UnknownViewNode,
)
from .vocabularies import AS, DCAT, DCT, LDES, RDF, TREE, VOID

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

def _types() -> FieldSpec:
    return FieldSpec("@type", RDF.type, Cardinality.ALL_IDS)


LINK_TABLE: Table = (
    _types(),
    FieldSpec("name", AS.name),
    FieldSpec("href", AS.href),
)

PERSON_TABLE: Table = (
    _types(),
    FieldSpec("name", AS.name),
    FieldSpec("url", AS.url),
)

# The announcing actor publishes its location under as:href
ANNOUNCE_ACTOR_TABLE: Table = (
    _types(),
    FieldSpec("name", AS.name),
    FieldSpec("url", AS.href),
)

ADD_TABLE: Table = (
    _types(),
    FieldSpec("actor", AS.actor, required=True, nested=PERSON_TABLE),
    FieldSpec("object", AS.object),
    FieldSpec("url", AS.url, required=True, nested=LINK_TABLE),
)

ANNOUNCEMENT_TABLE: Table = (
    _types(),
    FieldSpec("actor", AS.actor, required=True, nested=ANNOUNCE_ACTOR_TABLE),
    FieldSpec("object", AS.object, required=True, nested=ADD_TABLE, nested_when_type=AS.Add),
)

DATASET_TABLE: Table = (
    _types(),
    FieldSpec("dct:conformsTo", DCT.conformsTo),
    FieldSpec("dct:creator", DCT.creator),
    FieldSpec("dct:description", DCT.description),
    FieldSpec("dct:identifier", DCT.identifier),
    FieldSpec("dct:issued", DCT.issued),
    FieldSpec("dct:license", DCT.license),
    FieldSpec("dct:title", DCT["title"]),
    FieldSpec("tree:shape", TREE.shape),
    FieldSpec("tree:view", TREE.view),
)

DATA_SERVICE_TABLE: Table = (
    _types(),
    FieldSpec("dcat:contactPoint", DCAT.contactPoint),
    FieldSpec("dcat:endpointURL", DCAT.endpointURL),
    FieldSpec("dcat:servesDataset", DCAT.servesDataset),
    FieldSpec("dct:conformsTo", DCT.conformsTo),
    FieldSpec("dct:creator", DCT.creator),
    FieldSpec("dct:description", DCT.description),
    FieldSpec("dct:title", DCT["title"]),
)

BUCKETIZER_CONFIGURATION_TABLE: Table = (
    _types(),
    FieldSpec("bucketizer", LDES.bucketizer),
    FieldSpec("pageSize", LDES.pageSize),
    FieldSpec("path", TREE.path),
)


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------

ANNOUNCEMENT_CONTEXT = {"@vocab": str(AS)}
DATASET_CONTEXT = {"dct": str(DCT), "dcat": str(DCAT), "tree": str(TREE), "ldes": str(LDES)}
DATA_SERVICE_CONTEXT = {"dct": str(DCT), "dcat": str(DCAT)}
BUCKETIZER_CONFIGURATION_CONTEXT = {"@vocab": str(LDES), "path": str(TREE.path)}

# Node descriptor fields copied onto the view: (view key, descriptor key)
_VIEW_NODE_FIELDS = (
    ("conditionalImport", "conditionalImport"),
    ("import", "import"),
    ("importStream", "import"),
    ("relation", "relation"),
    ("retentionPolicy", "retentionPolicy"),
    ("search", "search"),
)


# ---------------------------------------------------------------------------
# Generic table extraction
# ---------------------------------------------------------------------------

def extract_by_table(
    graph: Graph,
    subject_id: str,
    table: Table,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a document for ``subject_id`` from a field table.

    Raises MissingRequiredPredicate when a required field has no statement.
    Optional fields without a statement are left out of the document.
    """
    subject = to_term(subject_id)
    document: dict[str, Any] = {}
    if context is not None:
        document["@context"] = dict(context)
    document["@id"] = subject_id

    for spec in table:
        objects = list(graph.objects(subject, spec.predicate))
        if spec.cardinality is Cardinality.ALL_IDS:
            document[spec.key] = [term_id(o) or str(o) for o in objects]
            continue
        if not objects:
            if spec.required:
                raise MissingRequiredPredicate(subject_id, str(spec.predicate))
            continue

        first = objects[0]
        if _expands(graph, first, spec):
            document[spec.key] = extract_by_table(graph, term_id(first), spec.nested)
        else:
            document[spec.key] = resolve_shallow(graph, first)

    return document


def _expands(graph: Graph, obj, spec: FieldSpec) -> bool:
    if spec.nested is None or term_id(obj) is None:
        return False
    if spec.nested_when_type is None:
        return True
    return (obj, RDF.type, spec.nested_when_type) in graph


# ---------------------------------------------------------------------------
# Entity extractors
# ---------------------------------------------------------------------------

def extract_announcement(graph: Graph, announcement_id: str) -> dict[str, Any]:
    return extract_by_table(graph, announcement_id, ANNOUNCEMENT_TABLE, ANNOUNCEMENT_CONTEXT)


def extract_dataset(graph: Graph, dataset_id: str) -> dict[str, Any]:
    return extract_by_table(graph, dataset_id, DATASET_TABLE, DATASET_CONTEXT)


def extract_data_service(graph: Graph, data_service_id: str) -> dict[str, Any]:
    return extract_by_table(graph, data_service_id, DATA_SERVICE_TABLE, DATA_SERVICE_CONTEXT)


def extract_bucketizer_configuration(graph: Graph, configuration_id: str) -> dict[str, Any]:
    document = extract_by_table(
        graph, configuration_id, BUCKETIZER_CONFIGURATION_TABLE, BUCKETIZER_CONFIGURATION_CONTEXT
    )
    # "@id" leads in this document
    document = {"@id": document.pop("@id"), **document}
    return document


@dataclass
class ViewExtraction:
    """A view paired with the relations leaving it, keyed by relation id."""
    view: dict[str, Any]
    relations: dict[str, dict[str, Any]] = field(default_factory=dict)


def extract_view(graph: Graph, view_id: str, metadata: TreeMetadata) -> ViewExtraction:
    """Extract a view from its statements and its tree metadata node.

    Both the ldes:configuration link and the metadata node are required.
    """
    subject = to_term(view_id)
    configurations = list(graph.objects(subject, LDES.configuration))
    if not configurations:
        raise MissingRequiredPredicate(view_id, str(LDES.configuration))
    node = metadata.nodes.get(view_id)
    if node is None:
        raise UnknownViewNode(view_id)

    view: dict[str, Any] = {
        "@context": make_view_context(node.get("@context")),
        "@id": view_id,
        "@type": as_list(node.get("@type")),
        "ldes:configuration": extract_bucketizer_configuration(graph, term_id(configurations[0])),
    }
    subsets = list(graph.objects(subject, VOID.subset))
    if subsets:
        view["void:subset"] = resolve_shallow(graph, subsets[0])
    for key, source in _VIEW_NODE_FIELDS:
        if node.get(source) is not None:
            view[key] = node[source]

    relations: dict[str, dict[str, Any]] = {}
    for reference in as_list(node.get("relation")):
        relation_id = reference_id(reference)
        if relation_id in metadata.relations:
            relations[relation_id] = metadata.relations[relation_id]

    return ViewExtraction(view=view, relations=relations)


def relation_targets(metadata: TreeMetadata) -> list[str]:
    """Page identifiers reachable through the relations in ``metadata``."""
    targets: dict[str, None] = {}
    for relation in metadata.relations.values():
        for node in as_list(relation.get("node")):
            target = reference_id(node)
            if target:
                targets.setdefault(target, None)
    return list(targets)


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractionFailure:
    """An entity skipped by a non-strict extraction run."""
    category: str
    subject_id: str
    error: AnnouncementError

    def __repr__(self) -> str:
        return f"ExtractionFailure({self.category} {self.subject_id}: {self.error})"


@dataclass
class AnnouncementMetadata:
    """All entities found in a graph, keyed by subject id in discovery order."""
    announcements: dict[str, dict[str, Any]] = field(default_factory=dict)
    datasets: dict[str, dict[str, Any]] = field(default_factory=dict)
    data_services: dict[str, dict[str, Any]] = field(default_factory=dict)
    views: dict[str, ViewExtraction] = field(default_factory=dict)
    errors: list[ExtractionFailure] = field(default_factory=list)

    def summary(self) -> str:
        lines = [
            f"Announcements: {len(self.announcements)}",
            f"Datasets:      {len(self.datasets)}",
            f"Data services: {len(self.data_services)}",
            f"Views:         {len(self.views)}",
        ]
        if self.errors:
            lines.append(f"Skipped ({len(self.errors)}):")
            lines.extend(f"  - {failure!r}" for failure in self.errors)
        return "\n".join(lines)


def extract_announcements_metadata(
    graph: Graph,
    metadata_extractor: MetadataExtractor = extract_tree_metadata,
    strict: bool = True,
) -> AnnouncementMetadata:
    """Extract every announcement, dataset, data service and view in ``graph``.

    The tree metadata extractor runs once, over all statements, before any
    view is extracted.

    With ``strict`` (the default) the first failing entity aborts the run.
    Otherwise failures are recorded in ``errors`` and the remaining entities
    are still extracted.
    """
    announcement_ids = find_subjects_by_type(graph, AS.Announce)
    dataset_ids = find_subjects_by_type(graph, DCAT.Dataset, LDES.EventStream)
    data_service_ids = find_subjects_by_type(graph, DCAT.DataService)
    view_ids = find_subjects_by_type(graph, TREE.Node)

    metadata = metadata_extractor(list(graph))

    result = AnnouncementMetadata()
    _collect(result, "announcement", announcement_ids, result.announcements,
             lambda i: extract_announcement(graph, i), strict)
    _collect(result, "dataset", dataset_ids, result.datasets,
             lambda i: extract_dataset(graph, i), strict)
    _collect(result, "data service", data_service_ids, result.data_services,
             lambda i: extract_data_service(graph, i), strict)
    _collect(result, "view", view_ids, result.views,
             lambda i: extract_view(graph, i, metadata), strict)

    logger.info(
        "Extracted %d announcements, %d datasets, %d data services, %d views (%d skipped)",
        len(result.announcements), len(result.datasets),
        len(result.data_services), len(result.views), len(result.errors),
    )
    return result


def _collect(
    result: AnnouncementMetadata,
    category: str,
    ids: list[str],
    target: dict[str, Any],
    extract: Callable[[str], Any],
    strict: bool,
) -> None:
    for identifier in ids:
        try:
            target[identifier] = extract(identifier)
        except AnnouncementError as error:
            if strict:
                raise
            logger.warning("Skipping %s %s: %s", category, identifier, error)
            result.errors.append(ExtractionFailure(category, identifier, error))
