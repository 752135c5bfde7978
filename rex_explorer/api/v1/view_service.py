"""
View-service endpoints queried by explorer clients.

Both endpoints always answer 200; failures travel in the envelope's
relatedHTTPCode and exceptionErrorMessage fields.
"""

from typing import Any

from fastapi import APIRouter, Depends

from rex_explorer.api.deps import get_view_service
from rex_explorer.core.constants import PRE_TRAVERSAL_PATH, TRAVERSAL_PATH
from rex_explorer.domain.envelopes import TraversalRequestBody
from rex_explorer.services.view_service import ViewService

router = APIRouter()


@router.post(PRE_TRAVERSAL_PATH)
async def rex_pre_traversal(
    body: TraversalRequestBody,
    service: ViewService = Depends(get_view_service),
) -> dict[str, Any]:
    """Count the entity, relationship and classification types around an entity."""
    response = await service.pre_traversal(body)
    return response.to_wire()


@router.post(TRAVERSAL_PATH)
async def rex_traversal(
    body: TraversalRequestBody,
    service: ViewService = Depends(get_view_service),
) -> dict[str, Any]:
    """Fetch the neighbourhood of an entity restricted to the requested types."""
    response = await service.traversal(body)
    return response.to_wire()
