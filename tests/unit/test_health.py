"""
Unit tests for health endpoints.
"""

import httpx
import pytest
from httpx import AsyncClient

from rex_explorer.api.deps import get_platform_proxy
from rex_explorer.clients.platform_proxy import PlatformProxy
from rex_explorer.main import app


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient) -> None:
    """Test basic health check endpoint."""
    response = await async_client.get("/api/v1/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["app"] == "rex-explorer"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_readiness_check_asks_the_platform(async_client: AsyncClient) -> None:
    """Readiness is reported once the platform answers."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"relatedHTTPCode": 200, "resultString": "Egeria"})

    proxy = PlatformProxy(url_root="https://platform.test:9443", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_platform_proxy] = lambda: proxy

    response = await async_client.get("/api/v1/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["platform"] is True
    assert data["platform_url"] == "https://platform.test:9443"
    assert requests[0].url.path.endswith("/server-platform/origin")


@pytest.mark.asyncio
async def test_readiness_check_when_platform_is_down(async_client: AsyncClient) -> None:
    """An unreachable platform is reported once, without retrying."""
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    proxy = PlatformProxy(
        url_root="https://platform.test:9443",
        max_retries=3,
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_platform_proxy] = lambda: proxy

    response = await async_client.get("/api/v1/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["platform"] is False
    assert len(attempts) == 1



@pytest.mark.asyncio
async def test_liveness_check(async_client: AsyncClient) -> None:
    """Test liveness check endpoint."""
    response = await async_client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_api_info_lists_view_service_paths(async_client: AsyncClient) -> None:
    response = await async_client.get("/api")
    assert response.status_code == 200

    data = response.json()
    assert data["endpoints"]["pre_traversal"] == "/api/instances/rex-pre-traversal"
    assert "/servers" in data["proxied"]
