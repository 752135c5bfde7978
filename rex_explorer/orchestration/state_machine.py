"""
State machine for the traversal selection workflow.
"""

from rex_explorer.core.constants import TraversalStatus
from rex_explorer.core.exceptions import StateTransitionError
from rex_explorer.core.logging import get_logger

logger = get_logger(__name__)


class StateMachine:
    """
    Generic state machine guarding status changes.
    """

    def __init__(
        self,
        states: list[str],
        initial_state: str,
        final_states: list[str],
        transitions: dict[str, list[str]],
    ) -> None:
        """
        Initialize the state machine.

        Args:
            states: List of valid states
            initial_state: Starting state
            final_states: States that end a cycle
            transitions: Valid transitions {from_state: [to_states]}
        """
        self.states = set(states)
        self.initial_state = initial_state
        self.final_states = set(final_states)
        self.transitions = transitions

        if initial_state not in self.states:
            raise ValueError(f"Initial state '{initial_state}' not in states")
        for final in final_states:
            if final not in self.states:
                raise ValueError(f"Final state '{final}' not in states")

    def can_transition(self, from_state: str, to_state: str) -> bool:
        """Check if transition is valid."""
        if from_state not in self.transitions:
            return False
        return to_state in self.transitions[from_state]

    def validate_transition(self, from_state: str, to_state: str) -> None:
        """Raise StateTransitionError unless the transition is allowed."""
        if not self.can_transition(from_state, to_state):
            logger.warning("Rejected transition", from_state=from_state, to_state=to_state)
            raise StateTransitionError(from_state, to_state)

    def get_next_states(self, current_state: str) -> list[str]:
        """Get valid next states from current state."""
        return self.transitions.get(current_state, [])

    def is_final(self, state: str) -> bool:
        """Check if state is a final state."""
        return state in self.final_states


TRAVERSAL_STATES = [status.value for status in TraversalStatus]

# Idle is both where a cycle starts and where it ends
TRAVERSAL_TRANSITIONS = {
    TraversalStatus.IDLE.value: [TraversalStatus.PENDING.value],
    TraversalStatus.PENDING.value: [
        TraversalStatus.COMPLETE.value,
        TraversalStatus.CANCELLED.value,
    ],
    TraversalStatus.COMPLETE.value: [TraversalStatus.IDLE.value],
    TraversalStatus.CANCELLED.value: [TraversalStatus.IDLE.value],
}


def create_traversal_state_machine() -> StateMachine:
    """Create state machine for the pre-traversal / confirm cycle."""
    return StateMachine(
        states=TRAVERSAL_STATES,
        initial_state=TraversalStatus.IDLE.value,
        final_states=[TraversalStatus.IDLE.value],
        transitions=TRAVERSAL_TRANSITIONS,
    )
