"""
View-service answering pre-traversal and traversal queries.

Failures are reported inside the response envelope (code 400 and a
message) rather than as HTTP errors, which is what explorer clients expect.
"""

from typing import Optional

from rex_explorer.clients.repository_client import RepositoryServicesClient
from rex_explorer.core.config import settings
from rex_explorer.core.constants import HTTP_BAD_REQUEST, HTTP_OK
from rex_explorer.core.exceptions import GatewayResponseError, InvalidRequestError, RexError
from rex_explorer.core.logging import get_logger
from rex_explorer.domain.envelopes import (
    PreTraversalResponse,
    TraversalRequestBody,
    TraversalResponse,
)
from rex_explorer.domain.selection import TypeSelection
from rex_explorer.services.traversal_stats import digest_neighborhood, summarize_neighborhood

logger = get_logger(__name__)


class ViewService:
    """Turns repository neighbourhood queries into explorer envelopes."""

    def __init__(
        self,
        repository: RepositoryServicesClient,
        default_server_name: Optional[str] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        self.repository = repository
        self.default_server_name = default_server_name or settings.platform.server_name
        self.max_depth = max_depth if max_depth is not None else settings.traversal.max_depth

    def _validate(self, body: TraversalRequestBody) -> tuple[str, str]:
        if not body.entity_guid:
            raise InvalidRequestError("An entity GUID is needed to traverse", field="entityGUID")
        if body.depth < 0 or body.depth > self.max_depth:
            raise InvalidRequestError(
                f"Depth must be between 0 and {self.max_depth}", field="depth"
            )
        if body.server_url_root and body.server_url_root.rstrip("/") != self.repository.server_url:
            # The platform is fixed by configuration; callers cannot redirect it
            logger.debug("Ignoring serverURLRoot from request", server_url_root=body.server_url_root)
        return body.server_name or self.default_server_name, body.entity_guid

    @staticmethod
    def _failure_fields(e: RexError) -> dict:
        fields = {
            "related_http_code": HTTP_BAD_REQUEST,
            "exception_error_message": e.message,
        }
        if isinstance(e, GatewayResponseError):
            fields["exception_system_action"] = e.details.get("system_action")
            fields["exception_user_action"] = e.details.get("user_action")
        return fields

    async def pre_traversal(self, body: TraversalRequestBody) -> PreTraversalResponse:
        """Count the types adjacent to an entity. Type filters in the body are ignored."""
        try:
            server_name, entity_guid = self._validate(body)
            graph = await self.repository.get_entity_neighborhood(
                server_name, entity_guid, body.depth
            )
        except RexError as e:
            logger.warning("Pre-traversal query failed", entity_guid=body.entity_guid, error=e.message)
            return PreTraversalResponse(**self._failure_fields(e))

        stats = summarize_neighborhood(graph, entity_guid, body.depth)
        logger.info(
            "Pre-traversal answered",
            entity_guid=entity_guid,
            entity_types=len(stats.entity_instance_counts),
            relationship_types=len(stats.relationship_instance_counts),
        )
        return PreTraversalResponse(related_http_code=HTTP_OK, rex_pre_traversal=stats)

    async def traversal(self, body: TraversalRequestBody) -> TraversalResponse:
        """Return digests of the neighbourhood restricted to the requested types."""
        try:
            server_name, entity_guid = self._validate(body)
            graph = await self.repository.get_entity_neighborhood(
                server_name,
                entity_guid,
                body.depth,
                entity_type_guids=body.entity_type_guids,
                relationship_type_guids=body.relationship_type_guids,
                classification_names=body.classification_names,
            )
        except RexError as e:
            logger.warning("Traversal query failed", entity_guid=body.entity_guid, error=e.message)
            return TraversalResponse(**self._failure_fields(e))

        selection = TypeSelection(
            entity_type_guids=body.entity_type_guids or [],
            relationship_type_guids=body.relationship_type_guids or [],
            classification_names=body.classification_names or [],
        )
        traversal = digest_neighborhood(
            graph,
            entity_guid,
            body.depth,
            selection=selection,
            gen=body.gen,
            server_name=server_name,
        )
        logger.info(
            "Traversal answered",
            entity_guid=entity_guid,
            entities=len(traversal.entities),
            relationships=len(traversal.relationships),
        )
        return TraversalResponse(related_http_code=HTTP_OK, rex_traversal=traversal)
