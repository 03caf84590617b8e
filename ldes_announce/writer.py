"""Writer — construction of view announcements.

The inverse of extraction: from a graph holding a published view and an
operator-supplied AnnouncementConfig, build a new View document describing
the view's fragmentation and wrap it in an as:Announce.

No network I/O and no serialization happen here. Turning the returned
JSON-LD into text is left to the caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping

from dotenv import load_dotenv
from rdflib import Graph

from .context import make_written_view_context
from .terms import as_list
from .tree_metadata import extract_tree_metadata
from .types import InvalidBucketizer, MetadataExtractor, TreeMetadata, UnknownViewNode
from .vocabularies import AS, DCT, LDES, TREE, XSD

logger = logging.getLogger(__name__)

BUCKETIZERS: dict[str, str] = {
    "substring": str(LDES.SubstringBucketizer),
    "basic": str(LDES.BasicBucketizer),
    "subjectpage": str(LDES.SubjectPageBucketizer),
}

# The view carries dct: keys, so the write path binds dct on top of ldes/void
WRITER_PREFIXES = {"dct": str(DCT)}

VIEW_ID = "#view"
BUCKETIZER_CONFIGURATION_ID = "#bucketizerConfig"
ANNOUNCEMENT_ID = "#announce"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# camelCase keys used by upstream operator configuration
_CAMEL_CASE_KEYS = {
    "creatorName": "creator_name",
    "creatorURL": "creator_url",
    "propertyPath": "property_path",
    "pageSize": "page_size",
    "bucketizer": "bucketizer",
    "viewId": "view_id",
    "originalLDESURL": "original_ldes_url",
}


@dataclass(frozen=True)
class AnnouncementConfig:
    """Operator-supplied parameters of a view announcement.

    creator_name / creator_url  the person announcing the view
    property_path               the path the bucketizer fragments on
    page_size                   members per page
    bucketizer                  a key of the bucketizer table
    view_id                     the root node of the view
    original_ldes_url           the ldes:EventStream (or tree:Collection) viewed
    """
    creator_name: str
    creator_url: str
    property_path: str
    page_size: str | int
    bucketizer: str
    view_id: str
    original_ldes_url: str

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> AnnouncementConfig:
        """Build a config from snake_case or camelCase keys."""
        values = {}
        for key, value in mapping.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            values[name] = value

        names = [f.name for f in fields(cls)]
        missing = [name for name in names if values.get(name) in (None, "")]
        if missing:
            raise ValueError(f"Missing announcement configuration keys: {', '.join(missing)}")
        return cls(**{name: values[name] for name in names})

    @classmethod
    def from_env(cls, env_file: str | None = None, prefix: str = "LDES_") -> AnnouncementConfig:
        """Build a config from environment variables such as LDES_VIEW_ID.

        When ``env_file`` is given and exists it is loaded first; variables
        already set in the environment take precedence.
        """
        if env_file:
            if os.path.exists(env_file):
                logger.info("Loading announcement configuration from %s", env_file)
                load_dotenv(env_file)
            else:
                logger.warning("Configuration file not found: %s", env_file)

        values = {}
        for f in fields(cls):
            value = os.environ.get(f"{prefix}{f.name.upper()}")
            if value is not None:
                values[f.name] = value
        return cls.from_mapping(values)


# ---------------------------------------------------------------------------
# Validation and normalization
# ---------------------------------------------------------------------------

def resolve_bucketizer(name: str, bucketizers: Mapping[str, str] = BUCKETIZERS) -> str:
    """Return the vocabulary identifier of a bucketizer short name."""
    try:
        return bucketizers[name]
    except KeyError:
        raise InvalidBucketizer(name, bucketizers.keys()) from None


def normalize_property_path(property_path: str) -> str:
    """Strip the angle brackets of an "<iri>" path; bare IRIs pass through."""
    path = property_path.strip()
    if path.startswith("<") and path.endswith(">"):
        return path[1:-1]
    return path


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def create_bucketizer_configuration(bucketizer: str, path: str, page_size: str | int) -> dict[str, Any]:
    return {
        "@id": BUCKETIZER_CONFIGURATION_ID,
        "@context": {"@vocab": str(LDES), "path": str(TREE.path)},
        "@type": [str(LDES.BucketizerConfiguration)],
        "bucketizer": {"@id": bucketizer},
        "pageSize": {"@value": str(page_size), "@type": str(XSD.positiveInteger)},
        "path": {"@id": path},
    }


def create_view(
    graph: Graph,
    config: AnnouncementConfig,
    metadata: TreeMetadata | None = None,
    metadata_extractor: MetadataExtractor = extract_tree_metadata,
    bucketizers: Mapping[str, str] = BUCKETIZERS,
    issued: datetime | None = None,
) -> dict[str, Any]:
    """Build the View document announced for ``config.view_id``.

    ``metadata`` is computed with ``metadata_extractor`` when not supplied.
    Raises InvalidBucketizer or UnknownViewNode.
    """
    bucketizer = resolve_bucketizer(config.bucketizer, bucketizers)
    path = normalize_property_path(config.property_path)
    configuration = create_bucketizer_configuration(bucketizer, path, config.page_size)

    if metadata is None:
        metadata = metadata_extractor(list(graph))
    node = metadata.nodes.get(config.view_id)
    if node is None:
        raise UnknownViewNode(config.view_id)

    issued = issued or datetime.now(timezone.utc)
    view: dict[str, Any] = {
        "@context": make_written_view_context(node.get("@context"), WRITER_PREFIXES),
        "@id": VIEW_ID,
        "@type": as_list(node.get("@type")),
        "dct:isVersionOf": {"@id": config.view_id},
        "dct:issued": {"@value": _isoformat(issued), "@type": str(XSD.dateTime)},
        "ldes:configuration": configuration,
        "@reverse": {str(TREE.view): {"@id": config.original_ldes_url}},
    }
    for key, source in (
        ("conditionalImport", "conditionalImport"),
        ("import", "import"),
        ("importStream", "import"),
        ("retentionPolicy", "retentionPolicy"),
        ("search", "search"),
    ):
        if node.get(source) is not None:
            view[key] = node[source]

    logger.debug("Built view for %s with bucketizer %s", config.view_id, bucketizer)
    return view


def create_announcement(config: AnnouncementConfig) -> dict[str, Any]:
    """Build the as:Announce shell; its object is filled in by the caller."""
    return {
        "@context": {"@vocab": str(AS)},
        "@id": ANNOUNCEMENT_ID,
        "@type": [str(AS.Announce)],
        "actor": {
            "@id": config.creator_url,
            "@type": [str(AS.Person)],
            "name": config.creator_name,
        },
        "object": None,
    }


def create_view_announcement(
    graph: Graph,
    config: AnnouncementConfig,
    metadata: TreeMetadata | None = None,
    metadata_extractor: MetadataExtractor = extract_tree_metadata,
    bucketizers: Mapping[str, str] = BUCKETIZERS,
    issued: datetime | None = None,
) -> dict[str, Any]:
    """Build a view announcement, ready to be serialized and sent to an inbox."""
    view = create_view(graph, config, metadata, metadata_extractor, bucketizers, issued)
    announcement = create_announcement(config)
    announcement["object"] = view
    logger.info("Created view announcement for %s", config.view_id)
    return announcement


def _isoformat(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
