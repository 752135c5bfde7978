"""
Client for the view-service traversal endpoints.
"""

from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from rex_explorer.clients.base_client import BasePlatformClient
from rex_explorer.core.config import settings
from rex_explorer.core.constants import PRE_TRAVERSAL_DEPTH
from rex_explorer.core.exceptions import GatewayResponseError
from rex_explorer.core.logging import get_logger
from rex_explorer.domain.envelopes import TraversalRequestBody, TraversalResponse
from rex_explorer.domain.selection import TypeSelection

logger = get_logger(__name__)


class RexViewClient(BasePlatformClient):
    """
    Remote query gateway used by the selection controller and the expander.

    Traversal requests are not retried; a failed call ends the cycle and the
    user re-issues it.
    """

    def __init__(
        self,
        server_url: Optional[str] = None,
        server_name: Optional[str] = None,
        platform_url_root: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            server_url=server_url or settings.view.url,
            timeout=timeout or settings.view.timeout,
            max_retries=1,
            transport=transport,
        )
        self.server_name = server_name or settings.platform.server_name
        self.platform_url_root = platform_url_root or settings.platform.url_root

    @property
    def service_name(self) -> str:
        return "View service"

    def _body(
        self,
        entity_guid: str,
        depth: int,
        server_name: Optional[str],
        selection: Optional[TypeSelection] = None,
        gen: Optional[int] = None,
    ) -> dict[str, Any]:
        body = TraversalRequestBody(
            server_name=server_name or self.server_name,
            server_url_root=self.platform_url_root,
            entity_guid=entity_guid,
            depth=depth,
            gen=gen,
        )
        if selection is not None:
            # Unchecked categories are omitted so the repository does not filter them
            body.entity_type_guids = selection.entity_type_guids or None
            body.relationship_type_guids = selection.relationship_type_guids or None
            body.classification_names = selection.classification_names or None
        return body.to_wire()

    async def pre_traversal(
        self,
        entity_guid: str,
        depth: int = PRE_TRAVERSAL_DEPTH,
        server_name: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Fetch per-type neighbour counts for an entity.

        The envelope is returned undecoded; the selection controller owns
        the success and malformed-payload rules.
        """
        logger.debug("Requesting pre-traversal", entity_guid=entity_guid, depth=depth)
        return await self._request(
            "POST",
            settings.view.pre_traversal_path,
            data=self._body(entity_guid, depth, server_name),
        )

    async def traversal(
        self,
        entity_guid: str,
        depth: int,
        selection: TypeSelection,
        server_name: Optional[str] = None,
        gen: Optional[int] = None,
    ) -> TraversalResponse:
        """Fetch the neighbourhood of an entity restricted to the selected types."""
        logger.debug(
            "Requesting traversal",
            entity_guid=entity_guid,
            depth=depth,
            entity_types=len(selection.entity_type_guids),
        )
        data = await self._request(
            "POST",
            settings.view.traversal_path,
            data=self._body(entity_guid, depth, server_name, selection, gen),
        )
        try:
            return TraversalResponse.model_validate(data)
        except PydanticValidationError as e:
            raise GatewayResponseError(
                f"Malformed traversal response ({e.error_count()} problems)",
                related_http_code=data.get("relatedHTTPCode") if isinstance(data, dict) else None,
            ) from e
