"""
Explorer session repository.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from rex_explorer.core.logging import get_logger
from rex_explorer.domain.session import ExplorerSession
from rex_explorer.repositories.base import InMemoryRepository

logger = get_logger(__name__)


class InMemoryExplorerSessionRepository(InMemoryRepository[ExplorerSession]):
    """
    Process-local session store. Sessions hold live controllers, so they
    are never serialized.
    """

    def __init__(self) -> None:
        super().__init__(key=lambda session: session.session_id)

    async def save(self, entity: ExplorerSession) -> ExplorerSession:
        entity.updated_at = datetime.utcnow()
        logger.debug("Session saved", session_id=entity.session_id)
        return await super().save(entity)

    async def list(self, filters: Optional[dict[str, Any]] = None) -> list[ExplorerSession]:
        """Newest first; ``server_name`` is the useful filter."""
        sessions = await super().list(filters)
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    async def cleanup_expired(self, max_age_hours: int = 24) -> list[ExplorerSession]:
        """Remove sessions idle for longer than ``max_age_hours`` and return them."""
        cutoff = datetime.utcnow() - timedelta(hours=max_age_hours)
        expired = self._evict(lambda s: s.updated_at < cutoff)

        if expired:
            logger.info("Cleaned up expired sessions", count=len(expired))

        return expired
