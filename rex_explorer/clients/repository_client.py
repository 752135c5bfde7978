"""
Client for the metadata platform's repository services REST API.
"""

from typing import Any, Optional

import httpx

from rex_explorer.clients.base_client import BasePlatformClient
from rex_explorer.core.config import settings
from rex_explorer.core.constants import HTTP_OK
from rex_explorer.core.exceptions import GatewayResponseError
from rex_explorer.core.logging import get_logger

logger = get_logger(__name__)


class RepositoryServicesClient(BasePlatformClient):
    """
    Reads instances from a repository server on the metadata platform.

    Results are returned as plain instance graphs:
    ``{"entities": [...], "relationships": [...]}``.
    """

    def __init__(
        self,
        url_root: Optional[str] = None,
        user_id: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            server_url=url_root or settings.platform.url_root,
            timeout=timeout or settings.platform.timeout,
            max_retries=max_retries or settings.platform.max_retries,
            verify=settings.platform.verify_tls,
            transport=transport,
        )
        self.user_id = user_id or settings.platform.user_id

    @property
    def service_name(self) -> str:
        return "Repository services"

    def _instances_path(self, server_name: str) -> str:
        return (
            f"/servers/{server_name}/open-metadata/repository-services"
            f"/users/{self.user_id}/instances"
        )

    @staticmethod
    def _check(envelope: dict[str, Any]) -> dict[str, Any]:
        code = envelope.get("relatedHTTPCode")
        if code is None:
            raise GatewayResponseError("Repository response carried no status code")
        if code != HTTP_OK:
            raise GatewayResponseError(
                envelope.get("exceptionErrorMessage") or "Repository request failed",
                related_http_code=code,
                system_action=envelope.get("exceptionSystemAction"),
                user_action=envelope.get("exceptionUserAction"),
            )
        return envelope

    async def get_entity_detail(self, server_name: str, entity_guid: str) -> dict[str, Any]:
        """Fetch a single entity."""
        envelope = self._check(
            await self._request_with_retry(
                "GET", f"{self._instances_path(server_name)}/entity/{entity_guid}"
            )
        )
        entity = envelope.get("entity")
        if entity is None:
            raise GatewayResponseError(
                f"The system could not find an entity with the GUID {entity_guid}",
                related_http_code=404,
            )
        return entity

    async def get_entity_neighborhood(
        self,
        server_name: str,
        entity_guid: str,
        depth: int,
        entity_type_guids: Optional[list[str]] = None,
        relationship_type_guids: Optional[list[str]] = None,
        classification_names: Optional[list[str]] = None,
    ) -> dict[str, list[dict[str, Any]]]:
        """
        Fetch the instances within ``depth`` hops of an entity.

        A ``None`` filter list means no filtering on that dimension.
        Depth 0 returns the entity on its own.
        """
        if depth == 0:
            entity = await self.get_entity_detail(server_name, entity_guid)
            return {"entities": [entity], "relationships": []}

        logger.debug(
            "Fetching entity neighborhood",
            server_name=server_name,
            entity_guid=entity_guid,
            depth=depth,
        )
        envelope = self._check(
            await self._request_with_retry(
                "POST",
                f"{self._instances_path(server_name)}/entity/{entity_guid}/by-neighborhood",
                data={
                    "class": "EntityNeighborhoodFindRequest",
                    "entityTypeGUIDs": entity_type_guids,
                    "relationshipTypeGUIDs": relationship_type_guids,
                    "limitResultsByClassification": classification_names,
                },
                params={"level": depth},
            )
        )
        return {
            "entities": envelope.get("entityElementList") or [],
            "relationships": envelope.get("relationshipElementList") or [],
        }
