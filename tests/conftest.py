"""
Pytest configuration and fixtures.
"""

import asyncio
import copy
from typing import Any, AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from rex_explorer.domain.envelopes import TraversalResponse
from rex_explorer.domain.selection import FocusInstance, TypeSelection, UserMessage
from rex_explorer.main import app

PRE_TRAVERSAL_ENVELOPE: dict[str, Any] = {
    "relatedHTTPCode": 200,
    "rexPreTraversal": {
        "entityGUID": "guid-focus",
        "depth": 1,
        "entityInstanceCounts": {
            "GlossaryTerm": {"count": 3, "typeGUID": "type-term"},
            "Asset": {"count": 1, "typeGUID": "type-asset"},
        },
        "relationshipInstanceCounts": {
            "TermAnchor": {"count": 3, "typeGUID": "type-anchor"},
            "AttachedTag": {"count": 1, "typeGUID": "type-tag"},
        },
        "classificationInstanceCounts": {
            "Confidentiality": {"count": 2},
        },
    },
}

TRAVERSAL_ENVELOPE: dict[str, Any] = {
    "relatedHTTPCode": 200,
    "rexTraversal": {
        "entityGUID": "guid-focus",
        "depth": 1,
        "entities": {
            "guid-focus": {"entityGUID": "guid-focus", "label": "Customer"},
            "guid-term": {"entityGUID": "guid-term", "label": "Customer Id"},
        },
        "relationships": {
            "guid-rel": {
                "relationshipGUID": "guid-rel",
                "end1GUID": "guid-focus",
                "end2GUID": "guid-term",
                "label": "TermAnchor",
            },
        },
    },
}


class FakeViewGateway:
    """
    Stand-in for the view-service client.

    With ``gated`` set, every pre-traversal call waits on its own event in
    ``gates`` until the test releases it. ``pre_traversal_responses`` are
    handed out in call order; the last one repeats.
    """

    def __init__(self) -> None:
        self.pre_traversal_responses: list[Any] = [copy.deepcopy(PRE_TRAVERSAL_ENVELOPE)]
        self.traversal_response: Any = TRAVERSAL_ENVELOPE
        self.gated = False
        self.gates: list[asyncio.Event] = []
        self.pre_traversal_calls: list[tuple[str, int, Optional[str]]] = []
        self.traversal_calls: list[dict[str, Any]] = []
        self.closed = False

    async def pre_traversal(
        self,
        entity_guid: str,
        depth: int = 1,
        server_name: Optional[str] = None,
    ) -> Any:
        call = len(self.pre_traversal_calls)
        self.pre_traversal_calls.append((entity_guid, depth, server_name))
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        response = self.pre_traversal_responses[min(call, len(self.pre_traversal_responses) - 1)]
        if isinstance(response, Exception):
            raise response
        return response

    async def traversal(
        self,
        entity_guid: str,
        depth: int,
        selection: TypeSelection,
        server_name: Optional[str] = None,
        gen: Optional[int] = None,
    ) -> TraversalResponse:
        self.traversal_calls.append(
            {
                "entity_guid": entity_guid,
                "depth": depth,
                "selection": selection,
                "server_name": server_name,
                "gen": gen,
            }
        )
        if isinstance(self.traversal_response, Exception):
            raise self.traversal_response
        return TraversalResponse.model_validate(copy.deepcopy(self.traversal_response))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_gateway() -> FakeViewGateway:
    """View-service stand-in answering with canned envelopes."""
    return FakeViewGateway()


@pytest.fixture
def messages() -> list[UserMessage]:
    """Collects whatever is posted to the message channel."""
    return []


@pytest.fixture
def entity_focus() -> FocusInstance:
    """An entity focus matching the canned envelopes."""
    return FocusInstance(guid="guid-focus", label="Customer")


@pytest.fixture
def neighborhood_graph() -> dict[str, Any]:
    """Instances shaped like repository services' neighbourhood results."""
    return {
        "entities": [
            {
                "guid": "guid-focus",
                "type": {"typeDefGUID": "type-asset", "typeDefName": "Asset"},
                "properties": {
                    "instanceProperties": {
                        "qualifiedName": {"primitiveValue": "asset::customer"},
                        "name": {"primitiveValue": "Customer"},
                    }
                },
                "classifications": [{"name": "Confidentiality"}],
                "metadataCollectionName": "cocoMDS1",
            },
            {
                "guid": "guid-term",
                "type": {"typeDefGUID": "type-term", "typeDefName": "GlossaryTerm"},
                "properties": {
                    "instanceProperties": {
                        "displayName": {"primitiveValue": "Customer Id"},
                    }
                },
                "classifications": [{"name": "Confidentiality"}, {"name": "SpineObject"}],
            },
            {
                "guid": "guid-term-2",
                "type": {"typeDefGUID": "type-term", "typeDefName": "GlossaryTerm"},
            },
        ],
        "relationships": [
            {
                "guid": "guid-rel-1",
                "type": {"typeDefGUID": "type-anchor", "typeDefName": "TermAnchor"},
                "entityOneProxy": {"guid": "guid-focus"},
                "entityTwoProxy": {"guid": "guid-term"},
            },
            {
                "guid": "guid-rel-2",
                "type": {"typeDefGUID": "type-tag", "typeDefName": "AttachedTag"},
                "entityOneProxy": {"guid": "guid-term"},
                "entityTwoProxy": {"guid": "guid-focus"},
            },
            {
                "guid": "guid-rel-3",
                "type": {"typeDefGUID": "type-anchor", "typeDefName": "TermAnchor"},
                "entityOneProxy": {"guid": "guid-focus"},
                "entityTwoProxy": {"guid": "guid-term-2"},
            },
        ],
    }


@pytest.fixture
def pre_traversal_envelope() -> dict[str, Any]:
    """A successful pre-traversal envelope."""
    return copy.deepcopy(PRE_TRAVERSAL_ENVELOPE)
