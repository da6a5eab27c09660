from ..data.schemas import (
    InvocationContext,
    RecommendationContext,
    RequestSnapshot,
    ResponseContext,
    SessionState,
)
from ..errors import IncompleteContext

_EXPECTED_PARTS = (
    ("request_snapshot", RequestSnapshot),
    ("response_context", ResponseContext),
    ("recommendation_context", RecommendationContext),
    ("session_state", SessionState),
)


def assemble(
    request_snapshot: RequestSnapshot,
    response_context: ResponseContext,
    recommendation_context: RecommendationContext,
    session_state: SessionState,
) -> InvocationContext:
    """Binds the parts of one invocation into a read-only context."""
    parts = {
        "request_snapshot": request_snapshot,
        "response_context": response_context,
        "recommendation_context": recommendation_context,
        "session_state": session_state,
    }
    for name, expected_type in _EXPECTED_PARTS:
        value = parts[name]
        if value is None:
            raise IncompleteContext(f"Cannot assemble a context without '{name}'.")
        if not isinstance(value, expected_type):
            raise IncompleteContext(
                f"'{name}' must be a {expected_type.__name__}, got {type(value).__name__}."
            )

    return InvocationContext(**parts)
