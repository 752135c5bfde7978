"""
API dependencies for dependency injection.
"""

from typing import Optional

from rex_explorer.clients.platform_proxy import PlatformProxy
from rex_explorer.clients.repository_client import RepositoryServicesClient
from rex_explorer.clients.view_client import RexViewClient
from rex_explorer.services.session_manager import ExplorerSessionManager
from rex_explorer.services.view_service import ViewService


class ServiceContainer:
    """
    Container for all application services.
    Provides singleton instances of services.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def initialize(self) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        self._repository_client = RepositoryServicesClient()
        self._view_client = RexViewClient()
        self._platform_proxy = PlatformProxy()

        self._view_service = ViewService(self._repository_client)
        self._session_manager = ExplorerSessionManager(self._view_client)

        self._initialized = True

    async def shutdown(self) -> None:
        """Release HTTP clients and background requests."""
        if not self._initialized:
            return
        await self._session_manager.close()
        await self._repository_client.close()
        await self._platform_proxy.close()
        self._initialized = False

    @property
    def session_manager(self) -> ExplorerSessionManager:
        """Get the session manager."""
        self.initialize()
        return self._session_manager

    @property
    def view_service(self) -> ViewService:
        """Get the view-service."""
        self.initialize()
        return self._view_service

    @property
    def platform_proxy(self) -> PlatformProxy:
        """Get the platform proxy."""
        self.initialize()
        return self._platform_proxy


# Singleton container instance
container = ServiceContainer.get_instance()


# Dependency functions for FastAPI
def get_session_manager() -> ExplorerSessionManager:
    """Get the session manager instance."""
    return container.session_manager


def get_view_service() -> ViewService:
    """Get the view-service instance."""
    return container.view_service


def get_platform_proxy() -> PlatformProxy:
    """Get the platform proxy instance."""
    return container.platform_proxy
