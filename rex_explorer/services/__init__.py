"""
Service layer implementations.
"""

from rex_explorer.services.instance_expander import InstanceExpander
from rex_explorer.services.session_manager import ExplorerSessionManager
from rex_explorer.services.traversal_history import TraversalHistory
from rex_explorer.services.view_service import ViewService

__all__ = [
    "ExplorerSessionManager",
    "InstanceExpander",
    "TraversalHistory",
    "ViewService",
]
