"""
Session manager for explorer sessions and their traversal workflows.
"""

import asyncio
import uuid
from typing import Optional

from rex_explorer.clients.view_client import RexViewClient
from rex_explorer.core.config import settings
from rex_explorer.core.exceptions import ExplorerSessionNotFoundError
from rex_explorer.core.logging import get_logger
from rex_explorer.domain.session import ExplorerSession
from rex_explorer.orchestration.selection_controller import SelectionController
from rex_explorer.repositories.session_repo import InMemoryExplorerSessionRepository
from rex_explorer.services.instance_expander import InstanceExpander
from rex_explorer.services.traversal_history import TraversalHistory

logger = get_logger(__name__)


class ExplorerSessionManager:
    """
    Creates explorer sessions and runs their pre-traversal requests.
    """

    def __init__(
        self,
        view_client: RexViewClient,
        session_repository: Optional[InMemoryExplorerSessionRepository] = None,
    ) -> None:
        """
        Initialize the session manager.

        Args:
            view_client: Gateway used by every session's controller and expander
            session_repository: Session store
        """
        self.view_client = view_client
        self.session_repository = session_repository or InMemoryExplorerSessionRepository()

    def _generate_session_id(self) -> str:
        """Generate a unique session ID."""
        return f"rex_{uuid.uuid4().hex[:16]}"

    async def create_session(self, server_name: Optional[str] = None) -> ExplorerSession:
        """Create a session with its own controller, expander and history."""
        session = ExplorerSession(
            session_id=self._generate_session_id(),
            server_name=server_name or settings.platform.server_name,
        )
        session.history = TraversalHistory()
        expander = InstanceExpander(self.view_client, session.history, session.post_message)
        session.controller = SelectionController(
            gateway=self.view_client,
            notify=session.post_message,
            expander=expander,
        )

        await self.session_repository.save(session)
        logger.info(
            "Session created",
            session_id=session.session_id,
            server_name=session.server_name,
        )
        return session

    async def get_session(self, session_id: str) -> ExplorerSession:
        """
        Get a session by ID.

        Raises:
            ExplorerSessionNotFoundError: If session not found
        """
        session = await self.session_repository.get(session_id)
        if session is None:
            raise ExplorerSessionNotFoundError(session_id)
        return session

    async def delete_session(self, session_id: str) -> None:
        session = await self.get_session(session_id)
        self._drop_pending(session)
        await self.session_repository.delete(session_id)
        logger.info("Session deleted", session_id=session_id)

    async def start_pre_traversal(self, session: ExplorerSession) -> bool:
        """
        Launch the session's pre-traversal in the background.

        The request keeps running after this returns, so a cancel from the
        user can overtake it. Returns False if the controller refused it.
        """
        task = asyncio.create_task(
            session.controller.begin_pre_traversal(session.focus, session.server_name)
        )
        task.add_done_callback(self._report_task_failure)
        session.pending_task = task
        # Let the task run up to its gateway call so the status is observable
        await asyncio.sleep(0)
        if task.done():
            return task.result()
        return True

    @staticmethod
    def _report_task_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Pre-traversal task failed", error=str(error), exc_info=error)

    def _drop_pending(self, session: ExplorerSession) -> None:
        task = session.pending_task
        if task is not None and not task.done():
            task.cancel()
        session.pending_task = None

    async def cleanup_inactive_sessions(self, inactive_hours: int = 24) -> int:
        expired = await self.session_repository.cleanup_expired(inactive_hours)
        for session in expired:
            self._drop_pending(session)
        return len(expired)

    async def close(self) -> None:
        for session in await self.session_repository.list():
            self._drop_pending(session)
        await self.view_client.close()
