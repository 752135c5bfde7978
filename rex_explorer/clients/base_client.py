"""
Base HTTP client for the metadata platform and the view-service.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from rex_explorer.core.exceptions import PlatformError
from rex_explorer.core.logging import get_logger

logger = get_logger(__name__)


def _is_transient(exc: BaseException) -> bool:
    if not isinstance(exc, PlatformError):
        return False
    status_code = exc.details.get("status_code")
    return status_code is None or status_code >= 500


class BasePlatformClient(ABC):
    """
    Shared httpx plumbing and error mapping.

    ``_request`` makes exactly one attempt. ``_request_with_retry`` retries
    transport failures and 5xx answers and is meant for idempotent calls.
    """

    def __init__(
        self,
        server_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            server_url: Base URL every endpoint is relative to
            timeout: Request timeout in seconds
            max_retries: Attempts made by ``_request_with_retry``
            verify: Verify TLS certificates
            transport: Replacement transport, used by tests
        """
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify = verify
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.server_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                verify=self.verify,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request, mapping failures to PlatformError."""
        client = await self._get_client()

        try:
            response = await client.request(
                method=method,
                url=endpoint,
                json=data,
                params=params,
            )
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            logger.error(
                "Platform request failed",
                service=self.service_name,
                endpoint=endpoint,
                status_code=e.response.status_code,
            )
            raise PlatformError(
                service_name=self.service_name,
                message=f"HTTP {e.response.status_code}: {e.response.text}",
                details={"endpoint": endpoint, "status_code": e.response.status_code},
            ) from e

        except httpx.RequestError as e:
            logger.error(
                "Platform request error",
                service=self.service_name,
                endpoint=endpoint,
                error=str(e),
            )
            raise PlatformError(
                service_name=self.service_name,
                message=f"Request failed: {e!s}",
                details={"endpoint": endpoint},
            ) from e

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Make a single request and decode the JSON body."""
        response = await self._send(method, endpoint, data=data, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise PlatformError(
                service_name=self.service_name,
                message="Response body is not JSON",
                details={"endpoint": endpoint},
            ) from e

    async def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Like ``_request`` but retried with exponential back-off."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_retries)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                return await self._request(method, endpoint, data=data, params=params)

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Name used in errors and logs."""
        ...

    async def __aenter__(self) -> "BasePlatformClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
