"""
Explorer session endpoints: focus, pre-traversal filtering and history.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from rex_explorer.api.deps import get_session_manager
from rex_explorer.core.constants import CandidateCategory, InstanceCategory, TraversalStatus
from rex_explorer.core.logging import get_logger, log_context
from rex_explorer.domain.selection import (
    FocusInstance,
    TraversalSelectionState,
    TypeSelection,
    UserMessage,
)
from rex_explorer.services.session_manager import ExplorerSessionManager

logger = get_logger(__name__)

router = APIRouter()


# Request/Response models
class CreateSessionRequest(BaseModel):
    """Request to open an explorer session."""

    server_name: Optional[str] = Field(
        default=None, description="Repository server to explore; configured default if omitted"
    )


class SessionResponse(BaseModel):
    """An explorer session."""

    session_id: str
    server_name: str
    focus: Optional[FocusInstance] = None
    status: TraversalStatus
    created_at: datetime


class FocusRequest(BaseModel):
    """Instance to focus on."""

    guid: str
    label: str = ""
    category: InstanceCategory = InstanceCategory.ENTITY


class PreTraversalStarted(BaseModel):
    accepted: bool
    status: TraversalStatus


class ToggleRequest(BaseModel):
    category: CandidateCategory
    name: str


class ToggleResponse(BaseModel):
    matched: bool
    selection: TraversalSelectionState


class SetAllRequest(BaseModel):
    included: bool


class ConfirmResponse(BaseModel):
    selection: Optional[TypeSelection] = None
    status: TraversalStatus


class CancelResponse(BaseModel):
    status: TraversalStatus


class MessagesResponse(BaseModel):
    messages: list[UserMessage]
    total: int


class HistoryResponse(BaseModel):
    current_gen: int
    gens: list[dict[str, Any]]


def _session_response(session: Any) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        server_name=session.server_name,
        focus=session.focus,
        status=session.controller.status,
        created_at=session.created_at,
    )


@router.post(
    "/explorer/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    request: CreateSessionRequest,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Open an explorer session against a repository server."""
    session = await manager.create_session(server_name=request.server_name)
    return _session_response(session)


@router.get("/explorer/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session = await manager.get_session(session_id)
    return _session_response(session)


@router.delete("/explorer/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> None:
    await manager.delete_session(session_id)


@router.put("/explorer/sessions/{session_id}/focus", response_model=SessionResponse)
async def set_focus(
    session_id: str,
    request: FocusRequest,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Make an entity or relationship the focus of the session."""
    session = await manager.get_session(session_id)
    with log_context(session_id=session_id):
        session.set_focus(
            FocusInstance(guid=request.guid, label=request.label, category=request.category)
        )
        logger.info("Focus changed", guid=request.guid, category=request.category.value)
    return _session_response(session)


@router.delete("/explorer/sessions/{session_id}/focus", response_model=SessionResponse)
async def clear_focus(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session = await manager.get_session(session_id)
    session.set_focus(None)
    return _session_response(session)


@router.post(
    "/explorer/sessions/{session_id}/pre-traversal",
    response_model=PreTraversalStarted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_pre_traversal(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> PreTraversalStarted:
    """
    Start a pre-traversal from the session focus.

    The request runs in the background; poll the selection for its status.
    A refused request is explained on the message channel.
    """
    session = await manager.get_session(session_id)
    with log_context(session_id=session_id):
        accepted = await manager.start_pre_traversal(session)
    return PreTraversalStarted(accepted=accepted, status=session.controller.status)


@router.get(
    "/explorer/sessions/{session_id}/selection",
    response_model=TraversalSelectionState,
)
async def get_selection(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> TraversalSelectionState:
    session = await manager.get_session(session_id)
    return session.controller.state


@router.post(
    "/explorer/sessions/{session_id}/selection/toggle",
    response_model=ToggleResponse,
)
async def toggle_candidate(
    session_id: str,
    request: ToggleRequest,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> ToggleResponse:
    session = await manager.get_session(session_id)
    matched = session.controller.toggle(request.category, request.name)
    return ToggleResponse(matched=matched, selection=session.controller.state)


@router.post(
    "/explorer/sessions/{session_id}/selection/all",
    response_model=TraversalSelectionState,
)
async def set_all_candidates(
    session_id: str,
    request: SetAllRequest,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> TraversalSelectionState:
    session = await manager.get_session(session_id)
    session.controller.set_all(request.included)
    return session.controller.state


@router.post(
    "/explorer/sessions/{session_id}/selection/confirm",
    response_model=ConfirmResponse,
)
async def confirm_selection(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> ConfirmResponse:
    """Run the traversal with the checked types and add the result to the graph."""
    session = await manager.get_session(session_id)
    with log_context(session_id=session_id):
        selection = await session.controller.confirm()
    return ConfirmResponse(selection=selection, status=session.controller.status)


@router.post(
    "/explorer/sessions/{session_id}/selection/cancel",
    response_model=CancelResponse,
)
async def cancel_selection(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> CancelResponse:
    session = await manager.get_session(session_id)
    with log_context(session_id=session_id):
        new_status = session.controller.cancel()
    return CancelResponse(status=new_status)


@router.get(
    "/explorer/sessions/{session_id}/messages",
    response_model=MessagesResponse,
)
async def drain_messages(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> MessagesResponse:
    """Return and clear the messages waiting for the user."""
    session = await manager.get_session(session_id)
    messages = session.drain_messages()
    return MessagesResponse(messages=messages, total=len(messages))


@router.get(
    "/explorer/sessions/{session_id}/history",
    response_model=HistoryResponse,
)
async def get_history(
    session_id: str,
    manager: ExplorerSessionManager = Depends(get_session_manager),
) -> HistoryResponse:
    session = await manager.get_session(session_id)
    history = session.history
    return HistoryResponse(
        current_gen=history.current_gen,
        gens=[gen.to_wire() for gen in history.gens],
    )
