"""
Pass-through routes to the metadata platform.
"""

from fastapi import APIRouter, Depends, Request, Response

from rex_explorer.api.deps import get_platform_proxy
from rex_explorer.clients.platform_proxy import PlatformProxy

router = APIRouter()

_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]


async def _relay(request: Request, path: str, proxy: PlatformProxy) -> Response:
    forwarded = await proxy.forward(
        method=request.method,
        path=path,
        query=list(request.query_params.multi_items()),
        body=await request.body(),
        headers=request.headers,
    )
    return Response(
        content=forwarded.content,
        status_code=forwarded.status_code,
        headers=forwarded.headers,
    )


@router.api_route("/servers/{path:path}", methods=_METHODS, include_in_schema=False)
async def proxy_servers(
    path: str,
    request: Request,
    proxy: PlatformProxy = Depends(get_platform_proxy),
) -> Response:
    return await _relay(request, f"servers/{path}", proxy)


@router.api_route(
    "/open-metadata/admin-services/{path:path}",
    methods=_METHODS,
    include_in_schema=False,
)
async def proxy_admin_services(
    path: str,
    request: Request,
    proxy: PlatformProxy = Depends(get_platform_proxy),
) -> Response:
    return await _relay(request, f"open-metadata/admin-services/{path}", proxy)
