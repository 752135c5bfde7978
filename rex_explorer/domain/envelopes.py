"""
Wire envelopes exchanged with the view-service and repository services.

Field names on the wire are camelCase; models are populated and read by
their snake_case names.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from rex_explorer.core.constants import HTTP_OK


class WireModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RexTypeStats(WireModel):
    """Count of adjacent instances of one type."""

    count: int = 0
    type_guid: Optional[str] = Field(default=None, alias="typeGUID")


class RexPreTraversal(WireModel):
    """Type statistics for the neighbourhood of an entity."""

    entity_guid: Optional[str] = Field(default=None, alias="entityGUID")
    depth: int = 1
    entity_instance_counts: dict[str, RexTypeStats] = Field(
        default_factory=dict, alias="entityInstanceCounts"
    )
    relationship_instance_counts: dict[str, RexTypeStats] = Field(
        default_factory=dict, alias="relationshipInstanceCounts"
    )
    classification_instance_counts: dict[str, RexTypeStats] = Field(
        default_factory=dict, alias="classificationInstanceCounts"
    )

    @field_validator(
        "entity_instance_counts",
        "relationship_instance_counts",
        "classification_instance_counts",
        mode="before",
    )
    @classmethod
    def _null_counts_are_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class ErrorEnvelope(WireModel):
    """Status fields common to every response.

    A response only succeeds with an explicit ``relatedHTTPCode`` of 200.
    """

    related_http_code: Optional[int] = Field(
        default=None,
        alias="relatedHTTPCode",
        validation_alias=AliasChoices("relatedHTTPCode", "httpStatusCode"),
    )
    exception_error_message: Optional[str] = Field(
        default=None,
        alias="exceptionErrorMessage",
        validation_alias=AliasChoices("exceptionErrorMessage", "exceptionText"),
    )
    exception_system_action: Optional[str] = Field(default=None, alias="exceptionSystemAction")
    exception_user_action: Optional[str] = Field(default=None, alias="exceptionUserAction")

    @property
    def error_text(self) -> str:
        return self.exception_error_message or "no exception message given"


class PreTraversalResponse(ErrorEnvelope):
    """Response to a pre-traversal request."""

    rex_pre_traversal: Optional[RexPreTraversal] = Field(
        default=None,
        alias="rexPreTraversal",
        validation_alias=AliasChoices("rexPreTraversal", "preTraversal"),
    )

    @property
    def is_success(self) -> bool:
        return self.related_http_code == HTTP_OK and self.rex_pre_traversal is not None


class EntityDigest(WireModel):
    """Summary of an entity placed on the explorer graph."""

    entity_guid: str = Field(..., alias="entityGUID")
    label: str = ""
    gen: Optional[int] = None
    metadata_collection_name: Optional[str] = Field(default=None, alias="metadataCollectionName")


class RelationshipDigest(WireModel):
    """Summary of a relationship placed on the explorer graph."""

    relationship_guid: str = Field(..., alias="relationshipGUID")
    end1_guid: str = Field(..., alias="end1GUID")
    end2_guid: str = Field(..., alias="end2GUID")
    idx: int = 0
    label: str = ""
    gen: Optional[int] = None
    metadata_collection_name: Optional[str] = Field(default=None, alias="metadataCollectionName")


class RexTraversal(WireModel):
    """The result of a filtered traversal, as digests keyed by GUID."""

    entity_guid: Optional[str] = Field(default=None, alias="entityGUID")
    depth: int = 1
    gen: Optional[int] = None
    server_name: Optional[str] = Field(default=None, alias="serverName")
    operation: str = "traversal"
    entity_type_names: list[str] = Field(default_factory=list, alias="entityTypeNames")
    relationship_type_guids: list[str] = Field(default_factory=list, alias="relationshipTypeGUIDs")
    classification_names: list[str] = Field(default_factory=list, alias="classificationNames")
    entities: dict[str, EntityDigest] = Field(default_factory=dict)
    relationships: dict[str, RelationshipDigest] = Field(default_factory=dict)

    @field_validator(
        "entity_type_names",
        "relationship_type_guids",
        "classification_names",
        "entities",
        "relationships",
        mode="before",
    )
    @classmethod
    def _null_is_empty(cls, v: Any, info: Any) -> Any:
        if v is None:
            return {} if info.field_name in ("entities", "relationships") else []
        return v


class TraversalResponse(ErrorEnvelope):
    """Response to a traversal request."""

    rex_traversal: Optional[RexTraversal] = Field(default=None, alias="rexTraversal")

    @property
    def is_success(self) -> bool:
        return self.related_http_code == HTTP_OK and self.rex_traversal is not None


class TraversalRequestBody(WireModel):
    """Body of pre-traversal and traversal requests."""

    server_name: Optional[str] = Field(default=None, alias="serverName")
    server_url_root: Optional[str] = Field(default=None, alias="serverURLRoot")
    entity_guid: Optional[str] = Field(default=None, alias="entityGUID")
    depth: int = 1
    gen: Optional[int] = None
    # None means "no filtering" downstream, so these stay optional
    entity_type_guids: Optional[list[str]] = Field(default=None, alias="entityTypeGUIDs")
    relationship_type_guids: Optional[list[str]] = Field(
        default=None, alias="relationshipTypeGUIDs"
    )
    classification_names: Optional[list[str]] = Field(default=None, alias="classificationNames")
