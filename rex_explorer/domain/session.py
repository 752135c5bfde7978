"""
Explorer session domain model.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rex_explorer.domain.selection import FocusInstance, UserMessage


class ExplorerSession(BaseModel):
    """
    One user's exploration of a repository server.

    The session owns its selection controller and graph history; neither is
    shared with any other session.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str = Field(..., description="Unique session identifier")
    server_name: str = Field(..., description="Repository server being explored")
    focus: Optional[FocusInstance] = Field(default=None, description="Current focus instance")
    messages: list[UserMessage] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    controller: Any = Field(default=None, exclude=True)
    history: Any = Field(default=None, exclude=True)
    pending_task: Optional[asyncio.Task] = Field(default=None, exclude=True)

    def post_message(self, message: UserMessage) -> None:
        """Message channel handed to the controller and expander."""
        self.messages.append(message)
        self.updated_at = datetime.utcnow()

    def drain_messages(self) -> list[UserMessage]:
        drained, self.messages = self.messages, []
        return drained

    def set_focus(self, focus: Optional[FocusInstance]) -> None:
        self.focus = focus
        self.updated_at = datetime.utcnow()
