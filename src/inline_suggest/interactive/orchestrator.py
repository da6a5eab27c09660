from typing import Optional

import structlog

from ..data.schemas import InvocationContext, SuggestionDetail, TriggerTypeInfo
from ..engine.context import assemble
from ..engine.editor import EditorHandle
from ..engine.normalizer import ResponseNormalizer
from ..engine.snapshot import RequestSnapshotBuilder
from ..errors import (
    EditorUnavailable,
    MalformedResponse,
    ProviderError,
    SessionError,
)
from ..providers.base import BaseCompletionProvider
from .renderer import BaseRenderer
from .session import SessionStateTracker

logger = structlog.get_logger(__name__)


class InvocationOrchestrator:
    """
    Drives one editor's invocations end to end: snapshot, provider call,
    normalization, session start, assembly and rendering.

    Either a complete InvocationContext reaches the renderer or nothing does.
    Provider calls are never retried here.
    """

    def __init__(
        self,
        tracker: SessionStateTracker,
        provider: BaseCompletionProvider,
        renderer: BaseRenderer,
        builder: Optional[RequestSnapshotBuilder] = None,
        normalizer: Optional[ResponseNormalizer] = None,
    ):
        self.tracker = tracker
        self.provider = provider
        self.renderer = renderer
        self.builder = builder or RequestSnapshotBuilder()
        self.normalizer = normalizer or ResponseNormalizer()
        self.context: Optional[InvocationContext] = None

    async def invoke(
        self, editor: EditorHandle, trigger: TriggerTypeInfo, user_input: str = ""
    ) -> Optional[InvocationContext]:
        """
        Runs one invocation. Returns the rendered context, or None when the
        invocation was abandoned (editor gone, response superseded, or a
        session state conflict).

        Raises:
            ProviderError: The provider call failed and the invocation is
                still the current one.
            MalformedResponse: The provider payload could not be normalized.
        """
        generation = self.tracker.begin_invocation()
        self.context = None
        log = logger.bind(
            generation=generation,
            editor=editor.identity,
            trigger=trigger.trigger_type.value,
        )

        try:
            snapshot = self.builder.build(editor, trigger)
        except EditorUnavailable as e:
            log.info("invocation.editor_unavailable", reason=str(e))
            return None

        log.debug("invocation.provider_call.begin", provider=self.provider.provider_key)
        try:
            raw_response = await self.provider.invoke(snapshot)
        except ProviderError as e:
            if not self.tracker.is_current(generation):
                log.info(
                    "invocation.stale_response",
                    current_generation=self.tracker.generation,
                    error=str(e),
                )
                return None
            log.error(
                "invocation.provider_call.failed", kind=e.kind, error=str(e)
            )
            raise

        if not self.tracker.is_current(generation):
            log.info(
                "invocation.stale_response", current_generation=self.tracker.generation
            )
            return None

        try:
            recommendation_context, response_context = self.normalizer.normalize(
                raw_response, user_input
            )
        except MalformedResponse as e:
            log.error("invocation.malformed_response", error=str(e))
            raise

        try:
            session_state = self.tracker.start(recommendation_context)
        except SessionError as e:
            log.error("invocation.session_conflict", error=str(e))
            return None

        context = assemble(
            snapshot, response_context, recommendation_context, session_state
        )
        self.context = context
        log.info(
            "invocation.completed",
            session_id=response_context.session_id,
            suggestions=len(recommendation_context.suggestions),
        )
        self.renderer.render(context, self.on_select, self.on_discard)
        return context

    # --- Renderer Callbacks ---

    def on_select(self, step: int) -> int:
        if step >= 0:
            return self.tracker.select_next()
        return self.tracker.select_previous()

    def on_discard(self, index: int):
        self.tracker.discard(index)

    # --- Session Completion ---

    def accept(self) -> Optional[SuggestionDetail]:
        """Ends the session and returns the suggestion that was selected, if any."""
        suggestion = self.tracker.selected_suggestion()
        final_state = self.tracker.end()
        self.context = None
        logger.info(
            "invocation.accepted",
            generation=final_state.generation,
            selected_index=final_state.selected_index,
        )
        return suggestion

    def dismiss(self):
        final_state = self.tracker.end()
        self.context = None
        logger.info("invocation.dismissed", generation=final_state.generation)
