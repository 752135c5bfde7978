"""
Repository implementations for data access.
"""

from rex_explorer.repositories.base import BaseRepository, InMemoryRepository
from rex_explorer.repositories.session_repo import InMemoryExplorerSessionRepository

__all__ = [
    "BaseRepository",
    "InMemoryRepository",
    "InMemoryExplorerSessionRepository",
]
