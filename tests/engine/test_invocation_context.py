from typing import Any, Dict

import pytest

from inline_suggest.data.schemas import SessionState, TriggerTypeInfo
from inline_suggest.engine.context import assemble
from inline_suggest.engine.editor import DocumentEditorHandle
from inline_suggest.engine.normalizer import ResponseNormalizer
from inline_suggest.engine.snapshot import RequestSnapshotBuilder
from inline_suggest.errors import IncompleteContext


@pytest.fixture
def parts(python_editor: DocumentEditorHandle, python_response: Dict[str, Any]):
    snapshot = RequestSnapshotBuilder().build(python_editor, TriggerTypeInfo.on_demand())
    recommendation_context, response_context = ResponseNormalizer().normalize(
        python_response
    )
    return {
        "request_snapshot": snapshot,
        "response_context": response_context,
        "recommendation_context": recommendation_context,
        "session_state": SessionState(),
    }


def test_assemble_binds_all_parts(parts):
    context = assemble(**parts)

    assert context.request_snapshot == parts["request_snapshot"]
    assert context.response_context.session_id == "sess-9"
    assert len(context.recommendation_context.suggestions) == 3
    assert context.session_state.selected_index == 0


@pytest.mark.parametrize(
    "missing",
    ["request_snapshot", "response_context", "recommendation_context", "session_state"],
)
def test_assemble_rejects_missing_parts(parts, missing: str):
    parts[missing] = None

    with pytest.raises(IncompleteContext, match=missing):
        assemble(**parts)


def test_assemble_rejects_wrong_types(parts):
    parts["session_state"] = {"selected_index": 0}

    with pytest.raises(IncompleteContext):
        assemble(**parts)


def test_context_is_read_only_and_reassembled(parts):
    context = assemble(**parts)

    with pytest.raises(Exception):
        context.session_state = SessionState(selected_index=1)

    updated = context.with_session_state(SessionState(selected_index=2))
    assert updated.session_state.selected_index == 2
    assert context.session_state.selected_index == 0
    assert updated.request_snapshot == context.request_snapshot
