from typing import List, Optional

import structlog

from ..data.schemas import RecommendationContext, SessionState, SuggestionDetail
from ..errors import InvalidSessionState, SessionAlreadyActive

logger = structlog.get_logger(__name__)


class SessionStateTracker:
    """
    Owns the interactive state of completion sessions for one editor.

    A tracker is Idle until `start()` and Active until `end()`. Only the
    component driving the current invocation may call the mutating methods;
    there is no locking, so a second `start()` while Active is rejected
    instead of overwriting the running session.

    Every provider call is tagged with a generation from `begin_invocation()`.
    A response whose generation is no longer current belongs to a superseded
    trigger and must not be assembled.
    """

    def __init__(self):
        self._state: Optional[SessionState] = None
        self._recommendations: Optional[RecommendationContext] = None
        self._generation = 0
        self._typeahead_captured = False

    # --- Generations ---

    @property
    def generation(self) -> int:
        return self._generation

    def begin_invocation(self) -> int:
        """Allocates the generation for a new invocation, ending any active session."""
        if self.is_active:
            logger.debug("session.superseded", generation=self._state.generation)
            self.end()
        self._generation += 1
        logger.debug("session.invocation_begun", generation=self._generation)
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    # --- Lifecycle ---

    @property
    def is_active(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> SessionState:
        self._require_active("state")
        return self._state

    @property
    def recommendation_context(self) -> RecommendationContext:
        self._require_active("recommendation_context")
        return self._recommendations

    def _require_active(self, operation: str):
        if self._state is None:
            raise InvalidSessionState(
                f"'{operation}' requires an active session, but the tracker is idle."
            )

    def start(self, recommendation_context: RecommendationContext) -> SessionState:
        """Opens a session over the given suggestions and returns its fresh state."""
        if self.is_active:
            raise SessionAlreadyActive(
                f"A session for generation {self._state.generation} is still active."
            )

        self._recommendations = recommendation_context
        self._typeahead_captured = False
        self._state = SessionState(
            selected_index=self._next_selectable(-1),
            typeahead="",
            typeahead_original="",
            generation=self._generation,
        )
        logger.info(
            "session.started",
            generation=self._generation,
            suggestions=len(recommendation_context.suggestions),
        )
        return self._state

    def end(self) -> SessionState:
        """Closes the session and returns a copy of its final state."""
        self._require_active("end")
        final_state = self._state.model_copy()
        self._state = None
        self._recommendations = None
        logger.info(
            "session.ended",
            generation=final_state.generation,
            selected_index=final_state.selected_index,
        )
        return final_state

    # --- Typeahead ---

    def on_typeahead_changed(self, new_text: str) -> SessionState:
        self._require_active("on_typeahead_changed")
        self._state.typeahead = new_text
        if not self._typeahead_captured:
            self._state.typeahead_original = new_text
            self._typeahead_captured = True
        return self._state

    def filter_by_typeahead(self) -> List[int]:
        """
        Discards every remaining suggestion that no longer matches what the
        user has typed since the invocation. Returns the discarded indices.
        """
        self._require_active("filter_by_typeahead")
        typed = self._recommendations.user_input_at_invocation + self._state.typeahead
        discarded = []
        for index, suggestion in enumerate(self._recommendations.suggestions):
            if not suggestion.is_discarded and not suggestion.content.startswith(typed):
                self.discard(index)
                discarded.append(index)
        if discarded:
            logger.debug("session.typeahead_filtered", discarded=discarded)
        return discarded

    # --- Navigation ---

    def _suggestions(self) -> List[SuggestionDetail]:
        return self._recommendations.suggestions

    def _next_selectable(self, index: int, step: int = 1) -> int:
        """First non-discarded index after `index` in direction `step`, wrapping; -1 if none."""
        suggestions = self._suggestions()
        count = len(suggestions)
        for distance in range(1, count + 1):
            candidate = (index + step * distance) % count
            if not suggestions[candidate].is_discarded:
                return candidate
        return -1

    def _move_selection(self, step: int) -> int:
        current = self._state.selected_index
        if not self._suggestions():
            return current
        if current == -1:
            # Starting points that land on the first (or last) entry when stepped.
            current = -1 if step > 0 else 0
        target = self._next_selectable(current, step)
        if target != -1:
            self._state.selected_index = target
        return self._state.selected_index

    def select_next(self) -> int:
        self._require_active("select_next")
        return self._move_selection(1)

    def select_previous(self) -> int:
        self._require_active("select_previous")
        return self._move_selection(-1)

    def discard(self, index: int) -> SessionState:
        """Marks one suggestion discarded, moving the selection off it if needed."""
        self._require_active("discard")
        suggestions = self._suggestions()
        if not 0 <= index < len(suggestions):
            raise IndexError(
                f"Suggestion index {index} is out of range (0..{len(suggestions) - 1})."
            )
        if suggestions[index].is_discarded:
            return self._state

        suggestions[index].is_discarded = True
        if self._state.selected_index == index:
            self._state.selected_index = self._next_selectable(index)
        logger.debug(
            "session.suggestion_discarded",
            index=index,
            selected_index=self._state.selected_index,
        )
        return self._state

    def selected_suggestion(self) -> Optional[SuggestionDetail]:
        self._require_active("selected_suggestion")
        if self._state.selected_index == -1:
            return None
        return self._suggestions()[self._state.selected_index]
