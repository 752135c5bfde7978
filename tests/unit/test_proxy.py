"""
Unit tests for the platform pass-through.
"""

import json

import httpx
import pytest
from httpx import AsyncClient

from rex_explorer.api.deps import get_platform_proxy
from rex_explorer.clients.platform_proxy import PlatformProxy, filter_headers
from rex_explorer.core.exceptions import PlatformError
from rex_explorer.main import app


def test_filter_headers_drops_hop_by_hop() -> None:
    headers = {"Connection": "keep-alive", "Host": "x", "Accept": "application/json"}

    assert filter_headers(headers) == {"Accept": "application/json"}


@pytest.mark.asyncio
async def test_forward_relays_platform_answer() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(404, json={"relatedHTTPCode": 404}, headers={"X-Trace": "1"})

    proxy = PlatformProxy(url_root="https://platform.test:9443", transport=httpx.MockTransport(handler))

    forwarded = await proxy.forward(
        "GET",
        "servers/cocoMDS1/open-metadata/repository-services/users/garygeeke/instances/entity/g",
        query=[("asOfTime", "0")],
        headers={"Accept": "application/json", "Connection": "close"},
    )

    assert forwarded.status_code == 404
    assert forwarded.media_type == "application/json"
    assert forwarded.headers["x-trace"] == "1"
    assert requests[0].url.params["asOfTime"] == "0"
    assert requests[0].url.path.startswith("/servers/cocoMDS1/")


@pytest.mark.asyncio
async def test_forward_raises_when_platform_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    proxy = PlatformProxy(
        url_root="https://platform.test:9443",
        max_retries=1,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(PlatformError):
        await proxy.forward("GET", "servers/cocoMDS1/x")


@pytest.mark.asyncio
async def test_reads_are_retried_when_platform_drops_connection() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(200, json={"relatedHTTPCode": 200})

    proxy = PlatformProxy(
        url_root="https://platform.test:9443",
        max_retries=2,
        transport=httpx.MockTransport(handler),
    )

    forwarded = await proxy.forward("GET", "servers/cocoMDS1/x")

    assert forwarded.status_code == 200
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_writes_and_error_answers_are_not_retried() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if request.method == "POST":
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(503, text="starting")

    proxy = PlatformProxy(
        url_root="https://platform.test:9443",
        max_retries=3,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(PlatformError):
        await proxy.forward("POST", "servers/cocoMDS1/x", body=b"{}")
    assert len(attempts) == 1

    forwarded = await proxy.forward("GET", "servers/cocoMDS1/x")
    assert forwarded.status_code == 503
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_servers_route_passes_request_through(async_client: AsyncClient) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"relatedHTTPCode": 200, "echo": True})

    proxy = PlatformProxy(url_root="https://platform.test:9443", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_platform_proxy] = lambda: proxy

    response = await async_client.post(
        "/servers/cocoMDS1/open-metadata/repository-services/users/garygeeke/types/all",
        json={"class": "TypeDefGallery"},
    )

    assert response.status_code == 200
    assert response.json() == {"relatedHTTPCode": 200, "echo": True}
    assert requests[0].method == "POST"
    assert requests[0].url.path.endswith("/users/garygeeke/types/all")
    assert json.loads(requests[0].content) == {"class": "TypeDefGallery"}


@pytest.mark.asyncio
async def test_admin_services_route_relays_errors(async_client: AsyncClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="forbidden")

    proxy = PlatformProxy(url_root="https://platform.test:9443", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_platform_proxy] = lambda: proxy

    response = await async_client.get("/open-metadata/admin-services/users/garygeeke/servers")

    assert response.status_code == 403
    assert response.text == "forbidden"


@pytest.mark.asyncio
async def test_unreachable_platform_is_bad_gateway(async_client: AsyncClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    proxy = PlatformProxy(
        url_root="https://platform.test:9443",
        max_retries=1,
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_platform_proxy] = lambda: proxy

    response = await async_client.get("/servers/cocoMDS1/x")

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "PLATFORM_ERROR"
