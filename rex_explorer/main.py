"""
FastAPI application entry point.

Besides the versioned explorer API, the app serves the view-service paths
and the platform pass-through at the fixed locations explorer clients call.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rex_explorer import __version__
from rex_explorer.api.deps import container
from rex_explorer.api.v1 import explorer, health, proxy, view_service
from rex_explorer.core.config import settings
from rex_explorer.core.constants import (
    API_PREFIX,
    PRE_TRAVERSAL_PATH,
    PROXIED_PREFIXES,
    TRAVERSAL_PATH,
)
from rex_explorer.core.exceptions import RexError
from rex_explorer.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the service container on startup and release its clients on shutdown."""
    logger.info(
        "Starting Rex explorer",
        env=settings.app_env,
        platform=settings.platform.url_root,
        view_service=settings.view.url,
    )
    container.initialize()

    yield

    logger.info("Shutting down Rex explorer")
    await container.shutdown()


async def rex_error_handler(request: Request, exc: RexError) -> JSONResponse:
    logger.error(
        "Application error",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


def create_app() -> FastAPI:
    """Assemble the application."""
    application = FastAPI(
        title="Rex Explorer API",
        description="Type-filtered exploration of open metadata repository graphs",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(RexError, rex_error_handler)
    application.add_exception_handler(Exception, unexpected_error_handler)

    application.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    application.include_router(explorer.router, prefix=API_PREFIX, tags=["Explorer"])
    # Unversioned: these paths are fixed by existing explorer clients
    application.include_router(view_service.router, tags=["View Service"])
    application.include_router(proxy.router, tags=["Platform Proxy"])

    @application.get("/")
    async def root() -> dict[str, str]:
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else "Disabled in production",
        }

    @application.get("/api")
    async def api_info() -> dict[str, Any]:
        """List the entry points."""
        return {
            "name": "Rex Explorer API",
            "version": __version__,
            "prefix": API_PREFIX,
            "endpoints": {
                "health": f"{API_PREFIX}/health",
                "explorer": f"{API_PREFIX}/explorer/sessions",
                "pre_traversal": PRE_TRAVERSAL_PATH,
                "traversal": TRAVERSAL_PATH,
            },
            "proxied": [f"/{prefix}" for prefix in PROXIED_PREFIXES],
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rex_explorer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
