"""
Health check endpoints.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends

from rex_explorer.api.deps import get_platform_proxy
from rex_explorer.clients.platform_proxy import PlatformProxy
from rex_explorer.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(
    proxy: PlatformProxy = Depends(get_platform_proxy),
) -> dict[str, Any]:
    """
    Readiness check endpoint.

    Ready once the metadata platform answers through the pass-through. The
    view-service is only reported as configured; sessions can be opened
    without it.
    """
    checks = {
        "app": True,
        "platform": await proxy.is_reachable(),
    }

    return {
        "status": "ready" if all(checks.values()) else "not_ready",
        "checks": checks,
        "platform_url": proxy.server_url,
        "view_service_configured": bool(settings.view.url),
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness check endpoint."""
    return {"status": "alive"}
