"""
Unit tests for the wire envelopes and selection models.
"""

from rex_explorer.core.constants import MessageLevel
from rex_explorer.domain.envelopes import (
    ErrorEnvelope,
    PreTraversalResponse,
    RexTypeStats,
    TraversalRequestBody,
    TraversalResponse,
)
from rex_explorer.domain.selection import TypedCandidate, UserMessage, candidates_from_counts


def test_pre_traversal_response_reads_camel_case(pre_traversal_envelope) -> None:
    response = PreTraversalResponse.model_validate(pre_traversal_envelope)

    assert response.is_success
    stats = response.rex_pre_traversal
    assert stats.entity_guid == "guid-focus"
    assert stats.entity_instance_counts["GlossaryTerm"] == RexTypeStats(
        count=3, type_guid="type-term"
    )
    assert stats.classification_instance_counts["Confidentiality"].type_guid is None


def test_legacy_status_fields_are_accepted() -> None:
    envelope = ErrorEnvelope.model_validate(
        {"httpStatusCode": 500, "exceptionText": "Repository offline"}
    )

    assert envelope.related_http_code == 500
    assert envelope.error_text == "Repository offline"


def test_missing_code_is_not_success() -> None:
    response = PreTraversalResponse.model_validate(
        {"rexPreTraversal": {"entityInstanceCounts": {"Asset": {"count": 1}}}}
    )

    assert response.related_http_code is None
    assert response.rex_pre_traversal is not None
    assert not response.is_success


def test_ok_code_still_needs_a_payload() -> None:
    assert not PreTraversalResponse.model_validate({"relatedHTTPCode": 200}).is_success
    assert not TraversalResponse.model_validate({"relatedHTTPCode": 200}).is_success


def test_error_text_without_message() -> None:
    assert ErrorEnvelope(related_http_code=400).error_text == "no exception message given"


def test_null_traversal_collections_become_empty() -> None:
    response = TraversalResponse.model_validate(
        {"relatedHTTPCode": 200, "rexTraversal": {"entities": None, "relationships": None,
                                                   "classificationNames": None}}
    )

    assert response.is_success
    assert response.rex_traversal.entities == {}
    assert response.rex_traversal.relationships == {}
    assert response.rex_traversal.classification_names == []


def test_request_body_omits_unset_filters() -> None:
    body = TraversalRequestBody(server_name="cocoMDS1", entity_guid="guid-focus", depth=1)

    assert body.to_wire() == {"serverName": "cocoMDS1", "entityGUID": "guid-focus", "depth": 1}


def test_request_body_keeps_filters_on_the_wire() -> None:
    body = TraversalRequestBody.model_validate(
        {"entityGUID": "guid-focus", "depth": 2, "entityTypeGUIDs": ["type-term"]}
    )

    wire = body.to_wire()
    assert wire["entityTypeGUIDs"] == ["type-term"]
    assert "relationshipTypeGUIDs" not in wire


def test_candidates_from_counts_sorts_and_unchecks() -> None:
    candidates = candidates_from_counts(
        {
            "Zone": {"count": 1, "typeGUID": "z"},
            "Asset": RexTypeStats(count=4, type_guid="a"),
        }
    )

    assert candidates == [
        TypedCandidate(name="Asset", id="a", count=4, included=False),
        TypedCandidate(name="Zone", id="z", count=1, included=False),
    ]


def test_candidates_without_ids() -> None:
    candidates = candidates_from_counts({"Confidentiality": {"count": 2}}, with_ids=False)

    assert candidates[0].id is None
    assert candidates[0].count == 2


def test_user_message_stores_plain_level() -> None:
    message = UserMessage(level=MessageLevel.ERROR, text="Pre-traversal failed")

    assert type(message.level) is str
    assert message.level == "error"
    assert UserMessage.model_config["use_enum_values"] is True
