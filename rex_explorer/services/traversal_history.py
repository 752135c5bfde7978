"""
Generations of instances added to an explorer graph.

Each traversal that teaches the explorer something new becomes the next
generation. Instances already on the graph are dropped from later
traversals so every GUID belongs to exactly one generation.
"""

from __future__ import annotations

from typing import Optional

from rex_explorer.core.logging import get_logger
from rex_explorer.domain.envelopes import RexTraversal

logger = get_logger(__name__)


class TraversalHistory:
    """Ordered record of the traversals accepted onto the graph."""

    def __init__(self) -> None:
        self.gens: list[RexTraversal] = []
        self.guid_to_gen: dict[str, int] = {}
        self.current_gen = 0

    def gen_of(self, guid: str) -> Optional[int]:
        return self.guid_to_gen.get(guid)

    def is_known(self, guid: str) -> bool:
        return guid in self.guid_to_gen

    def process_traversal(self, traversal: RexTraversal) -> bool:
        """
        Accept the unseen part of a traversal as the next generation.

        Known instances are removed from ``traversal`` and new ones are
        stamped with the next gen. Returns False, recording nothing, when
        the traversal held nothing new.
        """
        gen = self.current_gen + 1

        new_entities = {
            guid: digest
            for guid, digest in traversal.entities.items()
            if not self.is_known(guid)
        }
        new_relationships = {
            guid: digest
            for guid, digest in traversal.relationships.items()
            if not self.is_known(guid)
        }
        traversal.entities = new_entities
        traversal.relationships = new_relationships

        if not new_entities and not new_relationships:
            logger.info("Traversal added nothing new", entity_guid=traversal.entity_guid)
            return False

        for guid, digest in new_entities.items():
            digest.gen = gen
            self.guid_to_gen[guid] = gen
        for guid, digest in new_relationships.items():
            digest.gen = gen
            self.guid_to_gen[guid] = gen

        traversal.gen = gen
        self.gens.append(traversal)
        self.current_gen = gen

        logger.info(
            "Graph extended",
            gen=gen,
            entities=len(new_entities),
            relationships=len(new_relationships),
        )
        return True

    def clear(self) -> None:
        self.gens = []
        self.guid_to_gen = {}
        self.current_gen = 0
