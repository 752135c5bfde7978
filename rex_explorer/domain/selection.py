"""
Traversal selection domain model.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rex_explorer.core.constants import (
    PRE_TRAVERSAL_DEPTH,
    CandidateCategory,
    InstanceCategory,
    MessageLevel,
    TraversalStatus,
)


class TypedCandidate(BaseModel):
    """A type offered to the user for filtering a traversal."""

    name: str = Field(..., description="Type name, unique within its category")
    id: Optional[str] = Field(default=None, description="Type GUID; never set for classifications")
    count: int = Field(default=0, description="Instances of this type adjacent to the origin")
    included: bool = Field(default=False, description="Whether the user checked this type")


class TraversalSpecification(BaseModel):
    """Parameters of a traversal request."""

    entity_guid: str
    entity_label: str = ""
    depth: int = PRE_TRAVERSAL_DEPTH
    server_name: Optional[str] = None


class TypeSelection(BaseModel):
    """The checked candidates reduced to what an expansion request needs."""

    entity_type_guids: list[str] = Field(default_factory=list)
    relationship_type_guids: list[str] = Field(default_factory=list)
    classification_names: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.entity_type_guids or self.relationship_type_guids or self.classification_names
        )


class TraversalSelectionState(BaseModel):
    """
    Aggregate root for one explorer's traversal filtering.

    Owned by a single controller. The three candidate lists are kept sorted
    ascending by name.
    """

    status: TraversalStatus = TraversalStatus.IDLE
    spec: Optional[TraversalSpecification] = None
    entity_candidates: list[TypedCandidate] = Field(default_factory=list)
    relationship_candidates: list[TypedCandidate] = Field(default_factory=list)
    classification_candidates: list[TypedCandidate] = Field(default_factory=list)

    def candidates(self, category: CandidateCategory) -> list[TypedCandidate]:
        """Return the live list for a category."""
        if category == CandidateCategory.ENTITY:
            return self.entity_candidates
        if category == CandidateCategory.RELATIONSHIP:
            return self.relationship_candidates
        return self.classification_candidates

    def all_candidates(self) -> list[TypedCandidate]:
        return [
            *self.entity_candidates,
            *self.relationship_candidates,
            *self.classification_candidates,
        ]

    def clear_candidates(self) -> None:
        self.entity_candidates = []
        self.relationship_candidates = []
        self.classification_candidates = []


class FocusInstance(BaseModel):
    """The instance currently focused in the explorer."""

    guid: str
    label: str = ""
    category: InstanceCategory = InstanceCategory.ENTITY


class UserMessage(BaseModel):
    """A message for the user-facing message channel."""

    model_config = ConfigDict(use_enum_values=True)

    level: MessageLevel = MessageLevel.INFO
    text: str
    code: Optional[int] = None
    system_action: Optional[str] = None
    user_action: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


def candidates_from_counts(
    counts: Mapping[str, Any],
    with_ids: bool = True,
) -> list[TypedCandidate]:
    """
    Turn a ``typeName -> {count, typeGUID}`` map into sorted candidates.

    Values may be ``RexTypeStats`` models or plain dicts. Every candidate
    starts unchecked; ``with_ids=False`` drops the type GUID.
    """
    candidates = []
    for type_name, stats in counts.items():
        if isinstance(stats, Mapping):
            count = stats.get("count", 0)
            type_guid = stats.get("typeGUID")
        else:
            count = stats.count
            type_guid = stats.type_guid
        candidates.append(
            TypedCandidate(
                name=type_name,
                id=type_guid if with_ids else None,
                count=count or 0,
            )
        )
    candidates.sort(key=lambda c: c.name)
    return candidates
