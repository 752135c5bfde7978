"""
Unit tests for neighbourhood summaries and digests.
"""

from rex_explorer.domain.selection import TypeSelection
from rex_explorer.services.traversal_stats import (
    digest_neighborhood,
    entity_label,
    summarize_neighborhood,
)


def test_summary_counts_each_type(neighborhood_graph) -> None:
    stats = summarize_neighborhood(neighborhood_graph, "guid-focus", 1)

    assert stats.entity_guid == "guid-focus"
    assert stats.depth == 1
    assert stats.entity_instance_counts["GlossaryTerm"].count == 2
    assert stats.entity_instance_counts["GlossaryTerm"].type_guid == "type-term"
    assert stats.relationship_instance_counts["TermAnchor"].count == 2
    assert stats.relationship_instance_counts["AttachedTag"].count == 1


def test_summary_leaves_out_the_origin(neighborhood_graph) -> None:
    stats = summarize_neighborhood(neighborhood_graph, "guid-focus", 1)

    # The focus is the only Asset in the graph
    assert "Asset" not in stats.entity_instance_counts
    assert sum(s.count for s in stats.entity_instance_counts.values()) == 2


def test_summary_counts_classifications_by_name(neighborhood_graph) -> None:
    stats = summarize_neighborhood(neighborhood_graph, "guid-focus", 1)

    # Only guid-term carries Confidentiality once the focus is left out
    confidentiality = stats.classification_instance_counts["Confidentiality"]
    assert confidentiality.count == 1
    assert confidentiality.type_guid is None
    assert stats.classification_instance_counts["SpineObject"].count == 1


def test_summary_from_another_origin(neighborhood_graph) -> None:
    stats = summarize_neighborhood(neighborhood_graph, "guid-term", 1)

    assert stats.entity_instance_counts["Asset"].count == 1
    assert stats.entity_instance_counts["GlossaryTerm"].count == 1
    assert stats.classification_instance_counts["Confidentiality"].count == 1
    assert "SpineObject" not in stats.classification_instance_counts


def test_summary_of_empty_graph() -> None:
    stats = summarize_neighborhood({"entities": [], "relationships": []}, "guid-focus", 1)

    assert stats.entity_instance_counts == {}
    assert stats.relationship_instance_counts == {}
    assert stats.classification_instance_counts == {}


def test_entity_label_preference(neighborhood_graph) -> None:
    focus, term, bare = neighborhood_graph["entities"]

    assert entity_label(focus) == "Customer"
    assert entity_label(term) == "Customer Id"
    assert entity_label(bare) == "guid-term-2"


def test_digest_spreads_parallel_relationships(neighborhood_graph) -> None:
    traversal = digest_neighborhood(neighborhood_graph, "guid-focus", 1, gen=3)

    first = traversal.relationships["guid-rel-1"]
    second = traversal.relationships["guid-rel-2"]
    other = traversal.relationships["guid-rel-3"]
    assert (first.idx, second.idx, other.idx) == (0, 1, 0)
    assert first.label == "TermAnchor"
    assert first.end1_guid == "guid-focus"
    assert first.gen == 3
    assert traversal.entities["guid-focus"].metadata_collection_name == "cocoMDS1"


def test_digest_names_requested_entity_types(neighborhood_graph) -> None:
    selection = TypeSelection(
        entity_type_guids=["type-term", "type-unseen"],
        classification_names=["Confidentiality"],
    )

    traversal = digest_neighborhood(
        neighborhood_graph, "guid-focus", 1, selection=selection, server_name="cocoMDS1"
    )

    assert traversal.entity_type_names == ["GlossaryTerm", "type-unseen"]
    assert traversal.classification_names == ["Confidentiality"]
    assert traversal.server_name == "cocoMDS1"
    assert set(traversal.entities) == {"guid-focus", "guid-term", "guid-term-2"}


def test_digest_skips_relationships_without_ends() -> None:
    graph = {
        "entities": [],
        "relationships": [{"guid": "guid-rel", "entityOneProxy": {"guid": "a"}}],
    }

    assert digest_neighborhood(graph, "a", 1).relationships == {}
