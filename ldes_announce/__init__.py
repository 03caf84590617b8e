"""LDES announcements — projecting RDF graphs into typed JSON-LD documents.

Read path: an rdflib Graph holding announcements, DCAT descriptions and TREE
views is projected into fixed-shape documents.

- terms:          dereferencing graph terms (shallow, or deep with cycle guard)
- scanner:        discovery of subjects by rdf:type
- extraction:     field tables and extractors per entity, plus the coordinator
- tree_metadata:  default node/relation metadata extractor for views
- context:        JSON-LD context composition for views

Write path:

- writer:         builds a View from an AnnouncementConfig and wraps it in
                  an as:Announce

Both paths are synchronous and never touch the network. Serializing the
resulting JSON-LD (e.g. with rdflib's json-ld parser and a Turtle writer) is
up to the caller.
"""

from .extraction import (
    AnnouncementMetadata,
    ExtractionFailure,
    ViewExtraction,
    extract_announcement,
    extract_announcements_metadata,
    extract_bucketizer_configuration,
    extract_data_service,
    extract_dataset,
    extract_view,
)
from .types import (
    AnnouncementError,
    CircularReference,
    InvalidBucketizer,
    MissingRequiredPredicate,
    TreeMetadata,
    UnknownViewNode,
)
from .writer import AnnouncementConfig, create_view_announcement

__all__ = [
    "AnnouncementConfig",
    "AnnouncementError",
    "AnnouncementMetadata",
    "CircularReference",
    "ExtractionFailure",
    "InvalidBucketizer",
    "MissingRequiredPredicate",
    "TreeMetadata",
    "UnknownViewNode",
    "ViewExtraction",
    "create_view_announcement",
    "extract_announcement",
    "extract_announcements_metadata",
    "extract_bucketizer_configuration",
    "extract_data_service",
    "extract_dataset",
    "extract_view",
]
