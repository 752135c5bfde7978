"""
Summaries of entity neighbourhoods returned by repository services.

``summarize_neighborhood`` produces the per-type counts that feed the
filter dialog; ``digest_neighborhood`` produces the lightweight digests the
explorer graph is drawn from.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Optional

from rex_explorer.core.constants import LABEL_PROPERTIES
from rex_explorer.domain.envelopes import (
    EntityDigest,
    RelationshipDigest,
    RexPreTraversal,
    RexTraversal,
    RexTypeStats,
)
from rex_explorer.domain.selection import TypeSelection


def _type_of(instance: dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    instance_type = instance.get("type") or {}
    return instance_type.get("typeDefGUID"), instance_type.get("typeDefName")


def _count(stats: dict[str, RexTypeStats], name: Optional[str], type_guid: Optional[str]) -> None:
    if not name:
        return
    if name in stats:
        stats[name].count += 1
    else:
        stats[name] = RexTypeStats(count=1, type_guid=type_guid)


def summarize_neighborhood(
    graph: dict[str, Any],
    entity_guid: str,
    depth: int,
) -> RexPreTraversal:
    """Count the neighbours of an entity and the relationships around it by type."""
    entity_counts: dict[str, RexTypeStats] = {}
    classification_counts: dict[str, RexTypeStats] = {}
    relationship_counts: dict[str, RexTypeStats] = {}

    for entity in graph.get("entities") or []:
        # The origin is not its own neighbour
        if entity.get("guid") == entity_guid:
            continue
        type_guid, type_name = _type_of(entity)
        _count(entity_counts, type_name, type_guid)
        for classification in entity.get("classifications") or []:
            _count(classification_counts, classification.get("name"), None)

    for relationship in graph.get("relationships") or []:
        type_guid, type_name = _type_of(relationship)
        _count(relationship_counts, type_name, type_guid)

    return RexPreTraversal(
        entity_guid=entity_guid,
        depth=depth,
        entity_instance_counts=entity_counts,
        relationship_instance_counts=relationship_counts,
        classification_instance_counts=classification_counts,
    )


def _property_text(entity: dict[str, Any], property_name: str) -> Optional[str]:
    properties = (entity.get("properties") or {}).get("instanceProperties") or {}
    value = properties.get(property_name)
    if isinstance(value, dict):
        value = value.get("primitiveValue")
    if value is None or value == "":
        return None
    return str(value)


def entity_label(entity: dict[str, Any]) -> str:
    """Pick a readable label, falling back to the GUID."""
    for property_name in LABEL_PROPERTIES:
        text = _property_text(entity, property_name)
        if text:
            return text
    return entity.get("guid", "")


def relationship_label(relationship: dict[str, Any]) -> str:
    _, type_name = _type_of(relationship)
    return type_name or relationship.get("guid", "")


def _type_names(
    entities: Iterable[dict[str, Any]],
    type_guids: Optional[list[str]],
) -> list[str]:
    known = {}
    for entity in entities:
        type_guid, type_name = _type_of(entity)
        if type_guid and type_name:
            known[type_guid] = type_name
    return [known.get(guid, guid) for guid in type_guids or []]


def digest_neighborhood(
    graph: dict[str, Any],
    entity_guid: str,
    depth: int,
    selection: Optional[TypeSelection] = None,
    gen: Optional[int] = None,
    server_name: Optional[str] = None,
) -> RexTraversal:
    """
    Reduce a neighbourhood graph to entity and relationship digests.

    Relationships joining the same pair of entities get increasing ``idx``
    values so they can be drawn apart.
    """
    selection = selection or TypeSelection()
    entities = graph.get("entities") or []
    relationships = graph.get("relationships") or []

    entity_digests = {
        entity["guid"]: EntityDigest(
            entity_guid=entity["guid"],
            label=entity_label(entity),
            gen=gen,
            metadata_collection_name=entity.get("metadataCollectionName"),
        )
        for entity in entities
        if entity.get("guid")
    }

    pair_counts: dict[frozenset[str], int] = defaultdict(int)
    relationship_digests = {}
    for relationship in relationships:
        guid = relationship.get("guid")
        end1 = (relationship.get("entityOneProxy") or {}).get("guid")
        end2 = (relationship.get("entityTwoProxy") or {}).get("guid")
        if not (guid and end1 and end2):
            continue
        pair = frozenset((end1, end2))
        relationship_digests[guid] = RelationshipDigest(
            relationship_guid=guid,
            end1_guid=end1,
            end2_guid=end2,
            idx=pair_counts[pair],
            label=relationship_label(relationship),
            gen=gen,
            metadata_collection_name=relationship.get("metadataCollectionName"),
        )
        pair_counts[pair] += 1

    return RexTraversal(
        entity_guid=entity_guid,
        depth=depth,
        gen=gen,
        server_name=server_name,
        entity_type_names=_type_names(entities, selection.entity_type_guids),
        relationship_type_guids=selection.relationship_type_guids,
        classification_names=selection.classification_names,
        entities=entity_digests,
        relationships=relationship_digests,
    )
