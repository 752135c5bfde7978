"""
Orchestration of the pre-traversal selection workflow.
"""

from rex_explorer.orchestration.selection_controller import SelectionController
from rex_explorer.orchestration.state_machine import (
    StateMachine,
    create_traversal_state_machine,
)

__all__ = [
    "SelectionController",
    "StateMachine",
    "create_traversal_state_machine",
]
