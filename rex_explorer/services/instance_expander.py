"""
Graph-expansion collaborator handed the confirmed traversal filters.
"""

from typing import Optional, Protocol

from rex_explorer.core.constants import NOTHING_NEW_MESSAGE, MessageLevel
from rex_explorer.core.exceptions import RexError
from rex_explorer.core.logging import get_logger
from rex_explorer.domain.envelopes import RexTraversal, TraversalResponse
from rex_explorer.domain.selection import (
    TraversalSpecification,
    TypeSelection,
    UserMessage,
)
from rex_explorer.orchestration.selection_controller import Notifier
from rex_explorer.services.traversal_history import TraversalHistory

logger = get_logger(__name__)


class TraversalGateway(Protocol):
    async def traversal(
        self,
        entity_guid: str,
        depth: int,
        selection: TypeSelection,
        server_name: Optional[str] = None,
        gen: Optional[int] = None,
    ) -> TraversalResponse:
        ...


class InstanceExpander:
    """
    Runs the filtered traversal and records its result in the history.

    Outcomes are reported on the message channel; nothing is raised.
    """

    def __init__(
        self,
        gateway: TraversalGateway,
        history: TraversalHistory,
        notify: Notifier,
    ) -> None:
        self._gateway = gateway
        self.history = history
        self._notify = notify

    async def expand(
        self,
        spec: TraversalSpecification,
        selection: TypeSelection,
    ) -> Optional[RexTraversal]:
        """Returns the accepted traversal, or None if nothing was added."""
        try:
            response = await self._gateway.traversal(
                spec.entity_guid,
                spec.depth,
                selection,
                server_name=spec.server_name,
                gen=self.history.current_gen + 1,
            )
        except RexError as e:
            logger.warning("Traversal request failed", entity_guid=spec.entity_guid, error=e.message)
            self._notify(UserMessage(level=MessageLevel.ERROR, text=f"Traversal failed: {e.message}"))
            return None

        if not response.is_success:
            code = response.related_http_code
            self._notify(
                UserMessage(
                    level=MessageLevel.ERROR,
                    text=f"Traversal failed ({code if code is not None else 'no code'}): "
                    f"{response.error_text}",
                    code=code,
                    system_action=response.exception_system_action,
                    user_action=response.exception_user_action,
                )
            )
            return None

        traversal = response.rex_traversal
        if not self.history.process_traversal(traversal):
            self._notify(UserMessage(level=MessageLevel.INFO, text=NOTHING_NEW_MESSAGE))
            return None

        self._notify(
            UserMessage(
                level=MessageLevel.INFO,
                text=(
                    f"Traversal from {spec.entity_label or spec.entity_guid} added "
                    f"{len(traversal.entities)} entities and "
                    f"{len(traversal.relationships)} relationships"
                ),
            )
        )
        return traversal
