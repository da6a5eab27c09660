from typing import Any, List, Mapping, Optional, Tuple, Union

import structlog
from pydantic import ValidationError

from ..config import SuggestConfig
from ..data.schemas import (
    CompletionType,
    RawCompletionResponse,
    RecommendationContext,
    ResponseContext,
    SuggestionDetail,
)
from ..errors import MalformedResponse

logger = structlog.get_logger(__name__)


def get_header(
    headers: Mapping[str, Union[str, List[str]]], name: str
) -> Optional[str]:
    """
    Looks up an HTTP-style header without regard to case. Multi-valued
    headers yield their first non-empty value.
    """
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, list):
            return next((item for item in value if item), None)
        return value
    return None


class ResponseNormalizer:
    """
    Turns a raw provider payload into the recommendation and response
    contexts of an invocation. Pure; performs no I/O.
    """

    def __init__(self, config: Optional[SuggestConfig] = None):
        self.config = config or SuggestConfig()

    def _parse(
        self, raw: Union[RawCompletionResponse, Mapping[str, Any]]
    ) -> RawCompletionResponse:
        if isinstance(raw, RawCompletionResponse):
            return raw
        try:
            return RawCompletionResponse.model_validate(raw)
        except ValidationError as e:
            raise MalformedResponse(f"Provider response failed validation: {e}") from e

    def _completion_type(self, value: Optional[str]) -> CompletionType:
        if value is None:
            return self.config.default_completion_type
        for member in CompletionType:
            if member.value.lower() == value.strip().lower():
                return member
        raise MalformedResponse(f"Unknown completion type '{value}'.")

    def normalize(
        self,
        raw: Union[RawCompletionResponse, Mapping[str, Any]],
        user_input: str = "",
    ) -> Tuple[RecommendationContext, ResponseContext]:
        """
        Builds one suggestion per recommendation, in provider order, sharing
        the response's request id.

        Raises:
            MalformedResponse: The recommendations list or the session header
                is missing, or the payload does not validate.
        """
        response = self._parse(raw)

        if response.recommendations is None:
            raise MalformedResponse("Provider response has no recommendations list.")

        session_id = get_header(response.headers, self.config.session_id_header)
        if not session_id:
            raise MalformedResponse(
                f"Provider response is missing the '{self.config.session_id_header}' header."
            )

        request_id = response.response_metadata.request_id
        suggestions = [
            SuggestionDetail(request_id=request_id, content=recommendation.content)
            for recommendation in response.recommendations
        ]

        recommendation_context = RecommendationContext(
            suggestions=suggestions, user_input_at_invocation=user_input
        )
        response_context = ResponseContext(
            session_id=session_id,
            completion_type=self._completion_type(response.completion_type),
        )
        logger.debug(
            "response.normalized",
            request_id=request_id,
            session_id=session_id,
            count=len(suggestions),
            completion_type=response_context.completion_type.value,
        )
        return recommendation_context, response_context
