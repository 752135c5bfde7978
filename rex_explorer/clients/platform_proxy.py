"""
Reverse proxy to the metadata platform.

Used for ``/servers/*`` and ``/open-metadata/admin-services/*`` calls made by
the browser, which are passed through untouched apart from hop-by-hop
headers.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from rex_explorer.clients.base_client import BasePlatformClient
from rex_explorer.core.config import settings
from rex_explorer.core.constants import HOP_BY_HOP_HEADERS, PLATFORM_ORIGIN_PATH
from rex_explorer.core.exceptions import PlatformError
from rex_explorer.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ProxiedResponse:
    """What the platform answered, ready to relay."""

    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def media_type(self) -> Optional[str]:
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return None


def filter_headers(
    headers: Mapping[str, str],
    also_drop: frozenset[str] = frozenset(),
) -> dict[str, str]:
    """Drop hop-by-hop headers."""
    dropped = HOP_BY_HOP_HEADERS | also_drop
    return {k: v for k, v in headers.items() if k.lower() not in dropped}


class PlatformProxy(BasePlatformClient):
    """
    Forwards raw requests to the configured platform URL root.

    GET and HEAD requests are retried when the platform cannot be reached;
    other methods get a single attempt. Answers from the platform, error
    statuses included, are never retried.
    """

    _RETRIED_METHODS = frozenset({"GET", "HEAD"})

    def __init__(
        self,
        url_root: Optional[str] = None,
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

    @property
    def service_name(self) -> str:
        return "Platform proxy"

    async def _forward_once(
        self,
        method: str,
        url: str,
        query: Optional[Any],
        body: Optional[bytes],
        headers: dict[str, str],
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.request(
                method=method,
                url=url,
                params=query,
                content=body or None,
                headers=headers,
            )
        except httpx.RequestError as e:
            logger.warning("Platform unreachable", method=method, path=url, error=str(e))
            raise PlatformError(
                service_name=self.service_name,
                message=f"Request failed: {e!s}",
                details={"endpoint": url},
            ) from e

    async def forward(
        self,
        method: str,
        path: str,
        query: Optional[Any] = None,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ProxiedResponse:
        """
        Forward a request and return the platform's answer as-is.

        Error statuses from the platform are relayed, not raised; only a
        transport failure raises PlatformError.
        """
        url = "/" + path.lstrip("/")
        outbound = filter_headers(headers or {})
        attempts = self.max_retries if method.upper() in self._RETRIED_METHODS else 1

        logger.debug("Forwarding request", method=method, path=url)
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(PlatformError),
            reraise=True,
        ):
            with attempt:
                response = await self._forward_once(method, url, query, body, outbound)

        return ProxiedResponse(
            status_code=response.status_code,
            content=response.content,
            # httpx has already decoded the body
            headers=filter_headers(response.headers, also_drop=frozenset({"content-encoding"})),
        )

    async def is_reachable(self, user_id: Optional[str] = None) -> bool:
        """Ask the platform for its origin once; any HTTP answer means it is up."""
        path = "/" + PLATFORM_ORIGIN_PATH.format(user_id=user_id or settings.platform.user_id)
        try:
            response = await self._forward_once("GET", path, None, None, {})
        except PlatformError:
            return False
        logger.debug("Platform answered readiness check", status_code=response.status_code)
        return True
