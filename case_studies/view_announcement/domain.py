"""Sample data for the view announcement case study.

An LDES publishing a paged view, an announcement feed describing it, and the
configuration an operator supplies to announce a new view.
"""

from rdflib import Graph

from ldes_announce.writer import AnnouncementConfig

BASE = "https://example.org/inbox/announcement-view"

PUBLISHED_VIEW = """
@prefix tree: <https://w3id.org/tree#> .
@prefix ldes: <https://w3id.org/ldes#> .
@prefix dct:  <http://purl.org/dc/terms/> .
@prefix xsd:  <http://www.w3.org/2001/XMLSchema#> .
@prefix ex:   <https://example.org/ldes/> .

ex:collection a ldes:EventStream ;
    dct:title "Sensor observations"@en ;
    tree:view ex:root .

ex:root a tree:Node ;
    tree:relation [
        a tree:GreaterThanOrEqualToRelation ;
        tree:node ex:page2 ;
        tree:path dct:modified ;
        tree:value "2021-11-01T00:00:00Z"^^xsd:dateTime
    ] ;
    ldes:retentionPolicy [ a ldes:LatestVersionSubset ; ldes:amount 1 ] .
"""

ANNOUNCEMENT_FEED = """
@prefix as:   <https://www.w3.org/ns/activitystreams#> .
@prefix dcat: <http://www.w3.org/ns/dcat#> .
@prefix dct:  <http://purl.org/dc/terms/> .
@prefix tree: <https://w3id.org/tree#> .
@prefix ldes: <https://w3id.org/ldes#> .
@prefix void: <http://rdfs.org/ns/void#> .
@prefix ex:   <https://example.org/feed/> .

ex:announce a as:Announce ;
    as:actor ex:alice ;
    as:object ex:add .

ex:alice a as:Person ;
    as:name "Alice" ;
    as:href <https://alice.example.org/profile#me> .

ex:add a as:Add ;
    as:actor ex:alice ;
    as:object ex:view ;
    as:url ex:link .

ex:link a as:Link ;
    as:name "Original event stream" ;
    as:href <https://example.org/ldes/collection> .

ex:service a dcat:DataService ;
    dct:title "Alice's LDES server" ;
    dcat:endpointURL <https://example.org/ldes/> ;
    dcat:servesDataset <https://example.org/ldes/collection> .

ex:view a tree:Node ;
    void:subset <https://example.org/ldes/collection> ;
    tree:relation ex:next ;
    ldes:configuration [
        a ldes:BucketizerConfiguration ;
        ldes:bucketizer ldes:SubstringBucketizer ;
        ldes:pageSize 50 ;
        tree:path dct:title
    ] .

ex:next a tree:Relation ;
    tree:node ex:view2 .

ex:broken a as:Announce .
"""


def build_published_view() -> Graph:
    return Graph().parse(data=PUBLISHED_VIEW, format="turtle")


def build_announcement_feed() -> Graph:
    return Graph().parse(data=ANNOUNCEMENT_FEED, format="turtle")


def build_config() -> AnnouncementConfig:
    return AnnouncementConfig.from_mapping({
        "creatorName": "Alice",
        "creatorURL": "https://alice.example.org/profile#me",
        "propertyPath": "<http://purl.org/dc/terms/modified>",
        "pageSize": "100",
        "bucketizer": "basic",
        "viewId": "https://example.org/ldes/root",
        "originalLDESURL": "https://example.org/ldes/collection",
    })
