from abc import ABC, abstractmethod
from typing import Optional

import structlog
from prompt_toolkit.document import Document

from ..data.schemas import FileIdentity
from ..errors import EditorUnavailable
from .languages import language_for_filename

logger = structlog.get_logger(__name__)


class EditorHandle(ABC):
    """
    The capabilities the core needs from an editor. Front ends wrap their own
    document model in a subclass; nothing else about the host is assumed.
    """

    @property
    def identity(self) -> str:
        return f"{type(self).__name__}@{id(self):x}"

    def is_available(self) -> bool:
        return True

    @abstractmethod
    def caret_offset(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def line_number(self, offset: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def text_in_range(self, start: int, end: int) -> str:
        raise NotImplementedError

    @abstractmethod
    def document_length(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def file_identity(self) -> FileIdentity:
        raise NotImplementedError


class DocumentEditorHandle(EditorHandle):
    """
    An editor handle backed by a prompt_toolkit `Document`. Used by the CLI and
    by terminal front ends that already keep their buffer in a Document.
    """

    def __init__(
        self,
        document: Document,
        filename: str,
        language_id: Optional[str] = None,
        identity: Optional[str] = None,
    ):
        self._document = document
        self._filename = filename
        self._language_id = language_id or language_for_filename(filename)
        self._identity = identity
        self._closed = False

    @classmethod
    def from_text(
        cls, text: str, filename: str, caret_offset: Optional[int] = None, **kwargs
    ) -> "DocumentEditorHandle":
        """Builds a handle over `text`; the caret defaults to the end of it."""
        if caret_offset is None:
            caret_offset = len(text)
        if not 0 <= caret_offset <= len(text):
            raise ValueError(
                f"Caret offset {caret_offset} is outside the document (0..{len(text)})."
            )
        return cls(Document(text, cursor_position=caret_offset), filename, **kwargs)

    @property
    def identity(self) -> str:
        return self._identity or super().identity

    @property
    def document(self) -> Document:
        self._ensure_open()
        return self._document

    def set_document(self, document: Document):
        self._ensure_open()
        self._document = document

    def close(self):
        self._closed = True
        logger.debug("editor.closed", identity=self.identity)

    def is_available(self) -> bool:
        return not self._closed

    def _ensure_open(self):
        if self._closed:
            raise EditorUnavailable(f"Document '{self._filename}' has been closed.")

    def caret_offset(self) -> int:
        return self.document.cursor_position

    def line_number(self, offset: int) -> int:
        row, _ = self.document.translate_index_to_position(offset)
        return row

    def text_in_range(self, start: int, end: int) -> str:
        return self.document.text[start:end]

    def document_length(self) -> int:
        return len(self.document.text)

    def file_identity(self) -> FileIdentity:
        self._ensure_open()
        return FileIdentity(name=self._filename, language_id=self._language_id)
