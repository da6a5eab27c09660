import structlog

from ..data.schemas import (
    CaretPosition,
    FileContextInfo,
    RequestSnapshot,
    TriggerTypeInfo,
)
from ..errors import EditorUnavailable
from .editor import EditorHandle

logger = structlog.get_logger(__name__)


class RequestSnapshotBuilder:
    """Captures the editor state a completion request is built from."""

    def build(self, editor: EditorHandle, trigger: TriggerTypeInfo) -> RequestSnapshot:
        """
        Reads the caret and document once and splits the text at the caret.

        Args:
            editor: The handle to read from.
            trigger: What caused this invocation.

        Raises:
            EditorUnavailable: The handle's document is not accessible. No
                request has been attempted at that point.
        """
        if not editor.is_available():
            raise EditorUnavailable(
                f"Editor '{editor.identity}' has no accessible document."
            )

        # The offset and length are each read once; every other read is
        # derived from them so the snapshot stays internally consistent.
        offset = editor.caret_offset()
        length = editor.document_length()
        if not 0 <= offset <= length:
            raise EditorUnavailable(
                f"Caret offset {offset} is outside the document (0..{length})."
            )

        line = editor.line_number(offset)
        left_text = editor.text_in_range(0, offset)
        right_text = editor.text_in_range(offset, length)
        file_identity = editor.file_identity()

        snapshot = RequestSnapshot(
            editor_identity=editor.identity,
            trigger_type_info=trigger,
            caret_position=CaretPosition(offset=offset, line=line),
            file_context=FileContextInfo(
                left_text=left_text,
                right_text=right_text,
                filename=file_identity.name,
                language_id=file_identity.language_id,
            ),
        )
        logger.debug(
            "snapshot.built",
            editor=editor.identity,
            trigger=trigger.trigger_type.value,
            offset=offset,
            line=line,
        )
        return snapshot
