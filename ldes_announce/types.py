"""Core types shared by the read path (extraction) and the write path (writer).

Documents themselves are plain JSON-LD shaped dicts. The types here describe
how they are produced: field tables, the external tree metadata, diagnostics
and the error hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from rdflib import URIRef


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AnnouncementError(Exception):
    """Base class for every fatal extraction or construction failure."""


class MissingRequiredPredicate(AnnouncementError):
    """A field marked required had no matching statement for its subject."""

    def __init__(self, subject: str, predicate: str, message: str = ""):
        self.subject = subject
        self.predicate = predicate
        super().__init__(message or f"{subject} has no value for required predicate {predicate}")


class UnknownViewNode(MissingRequiredPredicate):
    """The tree metadata has no node descriptor for a view identifier."""

    def __init__(self, view_id: str):
        self.view_id = view_id
        super().__init__(
            view_id,
            "tree:Node",
            f"The tree:Node (a view) {view_id} was not found in the tree metadata.",
        )


class InvalidBucketizer(AnnouncementError, ValueError):
    """The configured bucketizer name is not in the bucketizer table."""

    def __init__(self, name: str, valid: Iterable[str]):
        self.name = name
        self.valid = list(valid)
        super().__init__(
            f"{name} is not a valid bucketizer. Valid options are: {', '.join(self.valid)}."
        )


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CircularReference:
    """A reference cycle met during deep resolution.

    Non-fatal: the target was emitted as a bare reference instead of being
    expanded again.
    """
    subject: str
    predicate: str
    target: str

    def __repr__(self) -> str:
        return f"CircularReference({self.subject} --{self.predicate}--> {self.target})"


# ---------------------------------------------------------------------------
# Declarative field tables
# ---------------------------------------------------------------------------

class Cardinality(Enum):
    """How the values found for a predicate become a document field."""
    FIRST = "first"  # first shallow-resolved value
    ALL_IDS = "all_ids"  # every object identifier, as a list


@dataclass(frozen=True)
class FieldSpec:
    """One row of an extraction table: (output key, predicate, cardinality, required).

    When ``nested`` is set, the first object is extracted as a sub-document
    using that table instead of being resolved shallowly. ``nested_when_type``
    restricts this to objects carrying the given rdf:type; other objects fall
    back to a shallow reference.
    """
    key: str
    predicate: URIRef
    cardinality: Cardinality = Cardinality.FIRST
    required: bool = False
    nested: tuple[FieldSpec, ...] | None = None
    nested_when_type: URIRef | None = None


Table = tuple[FieldSpec, ...]


# ---------------------------------------------------------------------------
# Tree metadata (external node/relation extractor output)
# ---------------------------------------------------------------------------

@dataclass
class TreeMetadata:
    """Node and relation descriptors keyed by identifier.

    Treated as read-only input by every consumer.
    """
    nodes: dict[str, dict[str, Any]] = field(default_factory=dict)
    relations: dict[str, dict[str, Any]] = field(default_factory=dict)


MetadataExtractor = Callable[[list], TreeMetadata]
