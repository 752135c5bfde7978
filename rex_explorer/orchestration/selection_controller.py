"""
Selection controller for pre-traversal type filtering.

Drives one explorer's cycle of: ask the gateway which types sit next to the
focus entity, let the user check the ones to follow, then hand the checked
types to the expansion collaborator.

Cancellation is by flag. An in-flight gateway call is never aborted; when
its response arrives the handler reads ``self.state.status`` as it is at
that moment and drops the response if the user has moved on.
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from rex_explorer.core.constants import (
    HTTP_OK,
    PRE_TRAVERSAL_DEPTH,
    CandidateCategory,
    InstanceCategory,
    MessageLevel,
    TraversalStatus,
)
from rex_explorer.core.exceptions import RexError
from rex_explorer.core.logging import get_logger
from rex_explorer.domain.envelopes import PreTraversalResponse
from rex_explorer.domain.selection import (
    FocusInstance,
    TraversalSelectionState,
    TraversalSpecification,
    TypeSelection,
    UserMessage,
    candidates_from_counts,
)
from rex_explorer.orchestration.state_machine import (
    StateMachine,
    create_traversal_state_machine,
)

logger = get_logger(__name__)

Notifier = Callable[[UserMessage], None]


class PreTraversalGateway(Protocol):
    """Anything that can answer a pre-traversal query."""

    async def pre_traversal(
        self,
        entity_guid: str,
        depth: int,
        server_name: Optional[str] = None,
    ) -> Union[PreTraversalResponse, Mapping[str, Any]]:
        ...


class TraversalExpansion(Protocol):
    """Collaborator that performs the filtered traversal."""

    async def expand(self, spec: TraversalSpecification, selection: TypeSelection) -> Any:
        ...


def _code_of(response: Any) -> Optional[int]:
    if not isinstance(response, Mapping):
        return None
    raw = response.get("relatedHTTPCode", response.get("httpStatusCode"))
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


class SelectionController:
    """
    Owns a TraversalSelectionState and runs the filter dialog workflow.

    One controller serves one explorer; it supports a single outstanding
    pre-traversal request at a time.
    """

    def __init__(
        self,
        gateway: PreTraversalGateway,
        notify: Notifier,
        expander: Optional[TraversalExpansion] = None,
        state_machine: Optional[StateMachine] = None,
        state: Optional[TraversalSelectionState] = None,
    ) -> None:
        """
        Args:
            gateway: Source of pre-traversal statistics
            notify: User-facing message channel
            expander: Receives the reduced selection on confirm
            state_machine: Transition rules, the traversal machine by default
            state: Initial state, empty and idle by default
        """
        self._gateway = gateway
        self._notify = notify
        self._expander = expander
        self._machine = state_machine or create_traversal_state_machine()
        self.state = state or TraversalSelectionState()
        self._request_seq = 0

    @property
    def status(self) -> TraversalStatus:
        return self.state.status

    @property
    def spec(self) -> Optional[TraversalSpecification]:
        return self.state.spec

    def _move(self, to_state: TraversalStatus) -> None:
        from_state = self.state.status
        self._machine.validate_transition(from_state.value, to_state.value)
        self.state.status = to_state
        logger.debug("Traversal status changed", from_state=from_state.value, to_state=to_state.value)

    def _validation_failed(self, text: str) -> None:
        logger.info("Pre-traversal rejected", reason=text)
        self._notify(UserMessage(level=MessageLevel.WARNING, text=text))

    def _gateway_failed(
        self,
        code: Optional[int],
        text: str,
        system_action: Optional[str] = None,
        user_action: Optional[str] = None,
    ) -> None:
        logger.warning("Pre-traversal failed", related_http_code=code, error=text)
        self._notify(
            UserMessage(
                level=MessageLevel.ERROR,
                text=f"Pre-traversal failed ({code if code is not None else 'no code'}): {text}",
                code=code,
                system_action=system_action,
                user_action=user_action,
            )
        )
        self._move(TraversalStatus.COMPLETE)

    # ------------------------------------------------------------------
    # Pre-traversal
    # ------------------------------------------------------------------

    async def begin_pre_traversal(
        self,
        focus: Optional[FocusInstance],
        server_name: Optional[str] = None,
    ) -> bool:
        """
        Ask the gateway for the types adjacent to the focus entity.

        Returns False when the request was refused before being sent.
        """
        if focus is None:
            self._validation_failed("Please select an entity as the focus before exploring")
            return False
        if focus.category != InstanceCategory.ENTITY:
            self._validation_failed(
                "Traversal starts from an entity; the current focus is a "
                f"{InstanceCategory(focus.category).value}"
            )
            return False
        if self.state.status == TraversalStatus.PENDING:
            self._validation_failed("A pre-traversal is already in progress")
            return False

        # Starting again dismisses whatever the previous cycle left behind
        if self.state.status != TraversalStatus.IDLE:
            self._move(TraversalStatus.IDLE)

        self._request_seq += 1
        request_id = self._request_seq
        self.state.spec = TraversalSpecification(
            entity_guid=focus.guid,
            entity_label=focus.label,
            depth=PRE_TRAVERSAL_DEPTH,
            server_name=server_name,
        )
        self._move(TraversalStatus.PENDING)
        logger.info(
            "Pre-traversal requested",
            entity_guid=focus.guid,
            depth=PRE_TRAVERSAL_DEPTH,
            request_id=request_id,
        )

        try:
            response = await self._gateway.pre_traversal(
                focus.guid, PRE_TRAVERSAL_DEPTH, server_name
            )
        except RexError as e:
            if self._accept_response(request_id):
                self._gateway_failed(
                    getattr(e, "related_http_code", None) or e.status_code,
                    e.message,
                )
            return True
        except Exception as e:
            logger.exception("Pre-traversal gateway raised", request_id=request_id)
            if self._accept_response(request_id):
                self._gateway_failed(None, f"Unexpected gateway error: {e}")
            return True

        self.ingest_pre_traversal_result(response, request_id=request_id)
        return True

    def _accept_response(self, request_id: Optional[int]) -> bool:
        if request_id is not None and request_id != self._request_seq:
            logger.info(
                "Discarding superseded pre-traversal response",
                request_id=request_id,
                latest_request_id=self._request_seq,
            )
            return False

        status = self.state.status
        if status == TraversalStatus.PENDING:
            return True

        logger.info("Discarding stale pre-traversal response", status=status.value)
        if status != TraversalStatus.IDLE:
            self._move(TraversalStatus.IDLE)
        return False

    def ingest_pre_traversal_result(
        self,
        response: Union[PreTraversalResponse, Mapping[str, Any]],
        request_id: Optional[int] = None,
    ) -> bool:
        """
        Handle a gateway response.

        Returns True only when candidates were replaced.
        """
        if not self._accept_response(request_id):
            return False

        if isinstance(response, PreTraversalResponse):
            envelope = response
        else:
            try:
                envelope = PreTraversalResponse.model_validate(response)
            except PydanticValidationError as e:
                self._gateway_failed(
                    _code_of(response),
                    f"Malformed pre-traversal response ({e.error_count()} problems)",
                )
                return False

        if not envelope.is_success:
            if envelope.related_http_code is None:
                text = "Malformed pre-traversal response (no status code)"
            elif envelope.related_http_code == HTTP_OK:
                text = "The pre-traversal response did not contain any results"
            else:
                text = envelope.error_text
            self._gateway_failed(
                envelope.related_http_code,
                text,
                envelope.exception_system_action,
                envelope.exception_user_action,
            )
            return False

        stats = envelope.rex_pre_traversal
        self.state.entity_candidates = candidates_from_counts(stats.entity_instance_counts)
        self.state.relationship_candidates = candidates_from_counts(
            stats.relationship_instance_counts
        )
        self.state.classification_candidates = candidates_from_counts(
            stats.classification_instance_counts, with_ids=False
        )
        self._move(TraversalStatus.COMPLETE)

        logger.info(
            "Pre-traversal complete",
            entity_types=len(self.state.entity_candidates),
            relationship_types=len(self.state.relationship_candidates),
            classifications=len(self.state.classification_candidates),
        )
        return True

    # ------------------------------------------------------------------
    # User choices
    # ------------------------------------------------------------------

    def toggle(self, category: Union[CandidateCategory, str], name: str) -> bool:
        """Flip the included flag of one candidate. Returns False if no match."""
        for candidate in self.state.candidates(CandidateCategory(category)):
            if candidate.name == name:
                candidate.included = not candidate.included
                return True
        return False

    def set_all(self, included: bool) -> None:
        for candidate in self.state.all_candidates():
            candidate.included = included

    async def confirm(self) -> Optional[TypeSelection]:
        """
        Reduce the checked candidates and hand them to the expander.

        Candidates are cleared and the cycle returns to idle even if the
        expansion fails. Returns None while a request is still pending.
        """
        if self.state.status == TraversalStatus.PENDING:
            self._validation_failed("Wait for the pre-traversal to finish before confirming")
            return None

        selection = TypeSelection(
            entity_type_guids=[
                c.id for c in self.state.entity_candidates if c.included and c.id
            ],
            relationship_type_guids=[
                c.id for c in self.state.relationship_candidates if c.included and c.id
            ],
            classification_names=[
                c.name for c in self.state.classification_candidates if c.included
            ],
        )
        spec = self.state.spec
        logger.info(
            "Traversal filters confirmed",
            entity_types=len(selection.entity_type_guids),
            relationship_types=len(selection.relationship_type_guids),
            classifications=len(selection.classification_names),
        )

        try:
            if self._expander is not None and spec is not None:
                await self._expander.expand(spec, selection)
        except RexError as e:
            logger.warning("Traversal expansion failed", error=e.message)
            self._notify(UserMessage(level=MessageLevel.ERROR, text=e.message))
        finally:
            self.state.clear_candidates()
            if self.state.status != TraversalStatus.IDLE:
                self._move(TraversalStatus.IDLE)

        return selection

    def cancel(self) -> TraversalStatus:
        """
        Cancel an in-flight request, or dismiss a settled dialog.

        Candidates are kept so the dialog can be reopened without a new query.
        """
        status = self.state.status
        if status == TraversalStatus.PENDING:
            self._move(TraversalStatus.CANCELLED)
            logger.info("Pre-traversal cancelled while in flight")
        elif status in (TraversalStatus.CANCELLED, TraversalStatus.COMPLETE):
            self._move(TraversalStatus.IDLE)
        return self.state.status
