from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Trigger Classification ---


class TriggerType(str, Enum):
    ON_DEMAND = "OnDemand"
    AUTOMATED = "Automated"


class AutomatedTriggerType(str, Enum):
    ENTER = "Enter"
    SPECIAL_CHARACTERS = "SpecialCharacters"
    IDLE_TIME = "IdleTime"
    KEY_STROKE_COUNT = "KeyStrokeCount"
    INTELLISENSE_ACCEPTANCE = "IntelliSenseAcceptance"
    CLASSIFIER = "Classifier"
    UNKNOWN = "Unknown"


class TriggerTypeInfo(BaseModel):
    """
    What caused an invocation. Either an explicit on-demand command, which
    carries no subtype, or an automated heuristic with exactly one subtype.
    """

    model_config = ConfigDict(frozen=True)

    trigger_type: TriggerType
    automated_trigger_type: AutomatedTriggerType = AutomatedTriggerType.UNKNOWN

    @model_validator(mode="after")
    def _check_variant(self) -> "TriggerTypeInfo":
        if (
            self.trigger_type == TriggerType.ON_DEMAND
            and self.automated_trigger_type != AutomatedTriggerType.UNKNOWN
        ):
            raise ValueError("On-demand triggers cannot carry an automated subtype.")
        return self

    @classmethod
    def on_demand(cls) -> "TriggerTypeInfo":
        return cls(trigger_type=TriggerType.ON_DEMAND)

    @classmethod
    def automated(cls, subtype: AutomatedTriggerType) -> "TriggerTypeInfo":
        return cls(
            trigger_type=TriggerType.AUTOMATED,
            automated_trigger_type=AutomatedTriggerType(subtype),
        )

    @property
    def is_on_demand(self) -> bool:
        return self.trigger_type == TriggerType.ON_DEMAND


# --- Request Snapshot Schemas ---


class CaretPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0, description="Zero-based character offset.")
    line: int = Field(..., ge=0, description="Zero-based line of the offset.")


class FileIdentity(BaseModel):
    """Name and language of the file an editor handle is showing."""

    model_config = ConfigDict(frozen=True)

    name: str
    language_id: str


class FileContextInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    left_text: str = Field(..., description="Document text before the caret.")
    right_text: str = Field(..., description="Document text from the caret on.")
    filename: str
    language_id: str


class RequestSnapshot(BaseModel):
    """Editor state captured exactly once, at invocation time."""

    model_config = ConfigDict(frozen=True)

    editor_identity: str
    trigger_type_info: TriggerTypeInfo
    caret_position: CaretPosition
    file_context: FileContextInfo


# --- Provider Payload Schemas ---


class RawRecommendation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str


class RawResponseMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_id: str = Field(..., alias="requestId")


class RawCompletionResponse(BaseModel):
    """
    A validated view of the provider's opaque payload. Accepts both the
    snake_case field names and the camelCase keys used on the wire.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    recommendations: Optional[List[RawRecommendation]] = None
    response_metadata: RawResponseMetadata = Field(..., alias="responseMetadata")
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    completion_type: Optional[str] = Field(None, alias="completionType")


# --- Normalized Response Schemas ---


class CompletionType(str, Enum):
    BLOCK = "Block"
    LINE = "Line"


class SuggestionDetail(BaseModel):
    """
    One suggestion from a provider response. `is_discarded` is flipped only by
    the session tracker.
    """

    model_config = ConfigDict(validate_assignment=True)

    request_id: str
    content: str
    is_discarded: bool = False


class RecommendationContext(BaseModel):
    """
    The suggestions of one response. Frozen after normalization, except for
    each suggestion's `is_discarded` flag, which the session tracker flips in
    place. Contexts already handed to a renderer see those flips.
    """

    model_config = ConfigDict(frozen=True)

    suggestions: List[SuggestionDetail] = Field(
        default_factory=list, description="Suggestions in provider response order."
    )
    user_input_at_invocation: str = ""


class ResponseContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., min_length=1)
    completion_type: CompletionType


# --- Interactive Session Schemas ---


class SessionState(BaseModel):
    """Mutable interactive state of one completion session."""

    model_config = ConfigDict(validate_assignment=True)

    selected_index: int = Field(0, ge=-1)
    typeahead: str = ""
    typeahead_original: str = ""
    generation: int = Field(
        0, ge=0, description="The invocation generation this session belongs to."
    )


class InvocationContext(BaseModel):
    """
    Everything a renderer needs about one invocation. Read-only; callers that
    change session state go through the tracker and re-assemble.
    """

    model_config = ConfigDict(frozen=True)

    request_snapshot: RequestSnapshot
    response_context: ResponseContext
    recommendation_context: RecommendationContext
    session_state: SessionState

    def with_session_state(self, session_state: SessionState) -> "InvocationContext":
        return self.model_copy(update={"session_state": session_state})
