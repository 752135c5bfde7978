"""
API v1 routers.
"""

from rex_explorer.api.v1 import explorer, health, proxy, view_service

__all__ = ["explorer", "health", "proxy", "view_service"]
