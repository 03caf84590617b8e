"""View Announcement — end-to-end demonstration of both paths.

  WRITE PATH
    A published view plus an operator configuration -> View document ->
    as:Announce, serialized to Turtle by the caller (rdflib json-ld parser).

  READ PATH
    An announcement feed -> announcements, data services and views, each view
    paired with its outgoing relations. The feed contains a malformed
    announcement, so the strict run fails and the lenient run reports it.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import json
import logging

from rdflib import Graph

from ldes_announce.extraction import extract_announcements_metadata, relation_targets
from ldes_announce.tree_metadata import extract_tree_metadata
from ldes_announce.types import AnnouncementError
from ldes_announce.writer import create_view_announcement

from .domain import BASE, build_announcement_feed, build_config, build_published_view


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def run_write_path() -> Graph:
    print_header("WRITE PATH: view announcement")

    config = build_config()
    graph = build_published_view()
    announcement = create_view_announcement(graph, config)

    print("\n  JSON-LD:")
    for line in json.dumps(announcement, indent=2).split("\n"):
        print(f"    {line}")

    # Serialization is the caller's job; relative ids need a base
    serialized = Graph().parse(data=json.dumps(announcement), format="json-ld", publicID=BASE)
    print("\n  Turtle:")
    for line in serialized.serialize(format="turtle").split("\n"):
        print(f"    {line}")
    return serialized


def run_read_path() -> None:
    print_header("READ PATH: announcement feed")
    feed = build_announcement_feed()

    print("\n  Strict extraction:")
    try:
        extract_announcements_metadata(feed)
    except AnnouncementError as e:
        print(f"    FAILED: {e}")

    print("\n  Lenient extraction:")
    result = extract_announcements_metadata(feed, strict=False)
    for line in result.summary().split("\n"):
        print(f"    {line}")

    for view_id, extraction in result.views.items():
        configuration = extraction.view["ldes:configuration"]
        print(f"\n  View {view_id}")
        print(f"    bucketizer: {configuration['bucketizer']['@id']}")
        print(f"    pageSize:   {configuration['pageSize']['@value']}")
        print(f"    relations:  {', '.join(extraction.relations) or '(none)'}")

    pages = relation_targets(extract_tree_metadata(list(feed)))
    print(f"\n  Pages reachable through relations: {', '.join(pages) or '(none)'}")


def run_round_trip(announcement_graph: Graph) -> None:
    print_header("ROUND TRIP: re-extracting the announced view")
    result = extract_announcements_metadata(announcement_graph)
    for view_id, extraction in result.views.items():
        configuration = extraction.view["ldes:configuration"]
        print(f"  {view_id}: {configuration['bucketizer']['@id']} "
              f"pageSize={configuration['pageSize']['@value']}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    announcement_graph = run_write_path()
    run_read_path()
    run_round_trip(announcement_graph)


if __name__ == "__main__":
    main()
