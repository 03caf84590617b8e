"""Tests for the entity extractors and the extraction coordinator."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import BNode, Graph, Literal, Namespace, URIRef

from ldes_announce.extraction import (
    ANNOUNCEMENT_CONTEXT,
    DATASET_CONTEXT,
    ExtractionFailure,
    extract_announcement,
    extract_announcements_metadata,
    extract_bucketizer_configuration,
    extract_data_service,
    extract_dataset,
    extract_view,
    relation_targets,
)
from ldes_announce.types import MissingRequiredPredicate, TreeMetadata, UnknownViewNode
from ldes_announce.vocabularies import AS, DCAT, DCT, LDES, RDF, TREE, VOID, XSD

EX = Namespace("http://example.org/")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _announcement_graph() -> Graph:
    """as:Announce -> as:Add -> (actor, url link, object)."""
    g = Graph()
    g.add((EX.announce, RDF.type, AS.Announce))
    g.add((EX.announce, AS.actor, EX.alice))
    g.add((EX.announce, AS.object, EX.add))
    g.add((EX.alice, RDF.type, AS.Person))
    g.add((EX.alice, AS.name, Literal("Alice")))
    g.add((EX.alice, AS.href, EX.alicePage))

    g.add((EX.add, RDF.type, AS.Add))
    g.add((EX.add, AS.actor, EX.bob))
    g.add((EX.add, AS.object, EX.view))
    g.add((EX.add, AS.url, EX.link))
    g.add((EX.bob, AS.name, Literal("Bob")))
    g.add((EX.bob, AS.url, EX.bobPage))
    g.add((EX.link, RDF.type, AS.Link))
    g.add((EX.link, AS.href, EX.original))
    return g


def _view_graph(view=EX.view1) -> Graph:
    """A tree:Node with a blank-node bucketizer configuration."""
    g = Graph()
    config = BNode("config")
    g.add((view, RDF.type, TREE.Node))
    g.add((view, LDES.configuration, config))
    g.add((config, RDF.type, LDES.BucketizerConfiguration))
    g.add((config, LDES.bucketizer, LDES.BasicBucketizer))
    g.add((config, LDES.pageSize, Literal(10)))
    g.add((config, TREE.path, EX.prop))
    return g


def _stub_extractor(nodes=None, relations=None):
    calls = []

    def extractor(triples):
        calls.append(len(triples))
        return TreeMetadata(nodes=nodes or {}, relations=relations or {})

    extractor.calls = calls
    return extractor


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

class TestAnnouncement:
    def test_header(self):
        doc = extract_announcement(_announcement_graph(), str(EX.announce))
        assert doc["@context"] == ANNOUNCEMENT_CONTEXT
        assert doc["@id"] == str(EX.announce)
        assert doc["@type"] == [str(AS.Announce)]

    def test_announcing_actor_uses_href(self):
        doc = extract_announcement(_announcement_graph(), str(EX.announce))
        actor = doc["actor"]
        assert actor["@id"] == str(EX.alice)
        assert actor["@type"] == [str(AS.Person)]
        assert actor["name"]["@value"] == "Alice"
        assert actor["url"] == {"@id": str(EX.alicePage)}

    def test_add_is_expanded(self):
        add = extract_announcement(_announcement_graph(), str(EX.announce))["object"]
        assert add["@type"] == [str(AS.Add)]
        assert add["actor"]["url"] == {"@id": str(EX.bobPage)}
        assert add["object"] == {"@id": str(EX.view)}
        assert add["url"]["href"] == {"@id": str(EX.original)}
        assert "name" not in add["url"]

    def test_non_add_object_is_reference(self):
        g = Graph()
        g.add((EX.announce, RDF.type, AS.Announce))
        g.add((EX.announce, AS.actor, EX.alice))
        g.add((EX.announce, AS.object, EX.view))
        g.add((EX.view, RDF.type, TREE.Node))

        doc = extract_announcement(g, str(EX.announce))
        assert doc["object"] == {"@id": str(EX.view)}

    def test_missing_actor(self):
        g = _announcement_graph()
        g.remove((EX.announce, AS.actor, None))
        with pytest.raises(MissingRequiredPredicate, match="actor") as info:
            extract_announcement(g, str(EX.announce))
        assert info.value.subject == str(EX.announce)

    def test_missing_add_url(self):
        g = _announcement_graph()
        g.remove((EX.add, AS.url, None))
        with pytest.raises(MissingRequiredPredicate):
            extract_announcement(g, str(EX.announce))


# ---------------------------------------------------------------------------
# DCAT
# ---------------------------------------------------------------------------

class TestDataset:
    def test_fields(self):
        g = Graph()
        g.add((EX.stream, RDF.type, LDES.EventStream))
        g.add((EX.stream, DCT["title"], Literal("Stream", lang="en")))
        g.add((EX.stream, DCT.license, EX.cc0))
        g.add((EX.stream, TREE.view, EX.view1))

        doc = extract_dataset(g, str(EX.stream))
        assert doc["@context"] == DATASET_CONTEXT
        assert doc["@type"] == [str(LDES.EventStream)]
        assert doc["dct:title"] == {"@value": "Stream", "@language": "en"}
        assert doc["dct:license"] == {"@id": str(EX.cc0)}
        assert doc["tree:view"] == {"@id": str(EX.view1)}

    def test_absent_fields_omitted(self):
        g = Graph()
        g.add((EX.stream, RDF.type, DCAT.Dataset))
        doc = extract_dataset(g, str(EX.stream))
        assert set(doc) == {"@context", "@id", "@type"}

    def test_context_is_a_copy(self):
        g = Graph()
        g.add((EX.stream, RDF.type, DCAT.Dataset))
        extract_dataset(g, str(EX.stream))["@context"]["extra"] = "x"
        assert "extra" not in DATASET_CONTEXT


class TestDataService:
    def test_fields(self):
        g = Graph()
        g.add((EX.service, RDF.type, DCAT.DataService))
        g.add((EX.service, DCAT.endpointURL, EX.endpoint))
        g.add((EX.service, DCAT.servesDataset, EX.stream))
        g.add((EX.service, DCT.description, Literal("An LDES server")))

        doc = extract_data_service(g, str(EX.service))
        assert doc["@context"] == {"dct": str(DCT), "dcat": str(DCAT)}
        assert doc["dcat:endpointURL"] == {"@id": str(EX.endpoint)}
        assert doc["dcat:servesDataset"] == {"@id": str(EX.stream)}
        assert doc["dct:description"]["@value"] == "An LDES server"


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class TestBucketizerConfiguration:
    def test_fields(self):
        doc = extract_bucketizer_configuration(_view_graph(), "_:config")
        assert list(doc)[0] == "@id"
        assert doc["@context"] == {"@vocab": str(LDES), "path": str(TREE.path)}
        assert doc["@type"] == [str(LDES.BucketizerConfiguration)]
        assert doc["bucketizer"] == {"@id": str(LDES.BasicBucketizer)}
        assert doc["pageSize"] == {"@value": "10", "@type": str(XSD.integer)}
        assert doc["path"] == {"@id": str(EX.prop)}


class TestView:
    def test_view_with_empty_context(self):
        metadata = TreeMetadata(nodes={str(EX.view1): {"@context": {}, "@type": [str(TREE.Node)]}})
        extraction = extract_view(_view_graph(), str(EX.view1), metadata)

        view = extraction.view
        assert view["@context"] == {"@vocab": str(TREE)}
        assert view["@type"] == [str(TREE.Node)]
        assert view["ldes:configuration"]["pageSize"]["@value"] == "10"
        assert extraction.relations == {}

    def test_node_fields_copied(self):
        search = [{"@type": str(TREE.SearchTree)}]
        metadata = TreeMetadata(nodes={str(EX.view1): {
            "@context": {"@vocab": str(TREE)},
            "import": [{"@id": str(EX.shapes)}],
            "search": search,
        }})
        view = extract_view(_view_graph(), str(EX.view1), metadata).view
        assert view["@context"]["ldes"] == str(LDES)
        assert view["@type"] == []
        assert view["import"] == view["importStream"] == [{"@id": str(EX.shapes)}]
        assert view["search"] == search
        assert "retentionPolicy" not in view

    def test_subset(self):
        g = _view_graph()
        g.add((EX.view1, VOID.subset, EX.stream))
        metadata = TreeMetadata(nodes={str(EX.view1): {}})
        assert extract_view(g, str(EX.view1), metadata).view["void:subset"] == {"@id": str(EX.stream)}

    def test_outgoing_relations_only(self):
        metadata = TreeMetadata(
            nodes={str(EX.view1): {"relation": [{"@id": "_:r1"}]}},
            relations={
                "_:r1": {"@id": "_:r1", "node": [{"@id": str(EX.page2)}]},
                "_:r9": {"@id": "_:r9", "node": [{"@id": str(EX.page9)}]},
            },
        )
        extraction = extract_view(_view_graph(), str(EX.view1), metadata)
        assert list(extraction.relations) == ["_:r1"]

    def test_single_type_string(self):
        metadata = TreeMetadata(nodes={str(EX.view1): {"@type": str(TREE.Node)}})
        view = extract_view(_view_graph(), str(EX.view1), metadata).view
        assert view["@type"] == [str(TREE.Node)]

    def test_relation_references_as_strings(self):
        metadata = TreeMetadata(
            nodes={str(EX.view1): {"relation": ["_:r1", {"@id": "_:r2"}]}},
            relations={
                "_:r1": {"@id": "_:r1", "node": [{"@id": str(EX.page2)}]},
                "_:r2": {"@id": "_:r2", "node": [{"@id": str(EX.page3)}]},
            },
        )
        extraction = extract_view(_view_graph(), str(EX.view1), metadata)
        assert list(extraction.relations) == ["_:r1", "_:r2"]
        assert extraction.view["relation"] == [{"@id": "_:r1"}]

    def test_missing_configuration(self):
        g = Graph()
        g.add((EX.view1, RDF.type, TREE.Node))
        metadata = TreeMetadata(nodes={str(EX.view1): {}})
        with pytest.raises(MissingRequiredPredicate, match="configuration"):
            extract_view(g, str(EX.view1), metadata)

    def test_missing_metadata_node(self):
        with pytest.raises(UnknownViewNode) as info:
            extract_view(_view_graph(), str(EX.view1), TreeMetadata())
        assert isinstance(info.value, MissingRequiredPredicate)
        assert str(EX.view1) in str(info.value)


class TestRelationTargets:
    def test_distinct_targets(self):
        metadata = TreeMetadata(relations={
            "_:r1": {"node": [{"@id": str(EX.page2)}]},
            "_:r2": {"node": [{"@id": str(EX.page2)}, {"@id": str(EX.page3)}]},
            "_:r3": {},
        })
        assert relation_targets(metadata) == [str(EX.page2), str(EX.page3)]

    def test_single_string_node(self):
        metadata = TreeMetadata(relations={"_:r1": {"node": str(EX.page2)}})
        assert relation_targets(metadata) == [str(EX.page2)]


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class TestCoordinator:
    def test_end_to_end_view(self):
        view_id = "urn:view1"
        g = Graph()
        config = BNode()
        g.add((URIRef(view_id), RDF.type, TREE.Node))
        g.add((URIRef(view_id), LDES.configuration, config))
        g.add((config, LDES.bucketizer, LDES.BasicBucketizer))
        g.add((config, LDES.pageSize, Literal(10)))
        g.add((config, TREE.path, URIRef("urn:prop")))

        extractor = _stub_extractor(nodes={view_id: {"@context": {}}})
        result = extract_announcements_metadata(g, metadata_extractor=extractor)

        assert list(result.views) == [view_id]
        view = result.views[view_id].view
        assert view["ldes:configuration"]["pageSize"]["@value"] == "10"
        assert view["@context"] == {"@vocab": str(TREE)}

    def test_all_categories(self):
        g = _announcement_graph() + _view_graph()
        g.add((EX.stream, RDF.type, DCAT.Dataset))
        g.add((EX.stream, RDF.type, LDES.EventStream))
        g.add((EX.service, RDF.type, DCAT.DataService))

        extractor = _stub_extractor(nodes={str(EX.view1): {}})
        result = extract_announcements_metadata(g, metadata_extractor=extractor)

        assert list(result.announcements) == [str(EX.announce)]
        assert list(result.datasets) == [str(EX.stream)]
        assert list(result.data_services) == [str(EX.service)]
        assert list(result.views) == [str(EX.view1)]
        assert result.errors == []

    def test_metadata_extracted_once(self):
        g = _view_graph(EX.view1) + _view_graph(EX.view2)
        extractor = _stub_extractor(nodes={str(EX.view1): {}, str(EX.view2): {}})
        extract_announcements_metadata(g, metadata_extractor=extractor)
        assert extractor.calls == [len(g)]

    def test_strict_propagates(self):
        g = _announcement_graph()
        g.remove((EX.announce, AS.actor, None))
        with pytest.raises(MissingRequiredPredicate):
            extract_announcements_metadata(g, metadata_extractor=_stub_extractor())

    def test_lenient_collects_failures(self):
        g = _announcement_graph() + _view_graph()
        g.add((EX.broken, RDF.type, AS.Announce))

        result = extract_announcements_metadata(
            g, metadata_extractor=_stub_extractor(), strict=False
        )
        assert list(result.announcements) == [str(EX.announce)]
        categories = {(f.category, f.subject_id) for f in result.errors}
        assert categories == {("announcement", str(EX.broken)), ("view", str(EX.view1))}
        assert all(isinstance(f, ExtractionFailure) for f in result.errors)
        assert "Skipped (2)" in result.summary()

    def test_default_metadata_extractor(self):
        result = extract_announcements_metadata(_view_graph())
        view = result.views[str(EX.view1)].view
        assert view["@context"] == {"@vocab": str(TREE), "ldes": str(LDES), "void": str(VOID)}
        assert view["@type"] == [str(TREE.Node)]
