from typing import Literal


class InlineSuggestError(Exception):
    """Base class for every error raised by the inline-suggest core."""


class EditorUnavailable(InlineSuggestError):
    """
    The editor's underlying document could not be read (e.g. it was closed).

    Raised before any provider call is attempted, so the invocation can be
    abandoned without side effects.
    """


class ProviderError(InlineSuggestError):
    """
    A failure reported by the completion provider collaborator.

    `kind` is "transient" when the caller may retry with backoff and "fatal"
    when the failure should be surfaced to the user. The core never retries.
    """

    def __init__(self, message: str, kind: Literal["transient", "fatal"] = "fatal"):
        if kind not in ("transient", "fatal"):
            raise ValueError(f"Unknown provider error kind '{kind}'.")
        super().__init__(message)
        self.kind = kind

    @property
    def is_transient(self) -> bool:
        return self.kind == "transient"


class MalformedResponse(InlineSuggestError):
    """The provider payload is missing required data and cannot be rendered."""


class SessionError(InlineSuggestError):
    """Base class for session state machine violations."""


class InvalidSessionState(SessionError):
    """An operation was attempted in a state that does not allow it."""


class SessionAlreadyActive(SessionError):
    """`start()` was called while another session is still active."""


class IncompleteContext(InlineSuggestError):
    """An invocation context was assembled from missing or ill-typed parts."""
