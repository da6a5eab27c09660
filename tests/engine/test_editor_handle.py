import pytest
from prompt_toolkit.document import Document

from inline_suggest.data.schemas import FileIdentity
from inline_suggest.engine.editor import DocumentEditorHandle
from inline_suggest.engine.languages import language_for_filename
from inline_suggest.errors import EditorUnavailable


@pytest.mark.parametrize(
    "filename, language",
    [
        ("main.py", "python"),
        ("App.java", "java"),
        ("index.TS", "typescript"),
        ("Program.cs", "csharp"),
        ("README", "plaintext"),
        ("notes.md", "plaintext"),
    ],
)
def test_language_for_filename(filename: str, language: str):
    assert language_for_filename(filename) == language


def test_document_handle_reads_document():
    editor = DocumentEditorHandle(Document("ab\ncd", cursor_position=4), "x.py")

    assert editor.caret_offset() == 4
    assert editor.line_number(4) == 1
    assert editor.text_in_range(1, 4) == "b\nc"
    assert editor.document_length() == 5
    assert editor.file_identity() == FileIdentity(name="x.py", language_id="python")


def test_explicit_language_wins_over_extension():
    editor = DocumentEditorHandle(Document(""), "build.gradle", language_id="groovy")

    assert editor.file_identity().language_id == "groovy"


def test_from_text_defaults_caret_to_end():
    editor = DocumentEditorHandle.from_text("hello", "a.txt")

    assert editor.caret_offset() == 5


def test_from_text_rejects_out_of_range_caret():
    with pytest.raises(ValueError):
        DocumentEditorHandle.from_text("hello", "a.txt", caret_offset=6)


def test_identity_defaults_to_unique_value():
    first = DocumentEditorHandle(Document(""), "a.py")
    second = DocumentEditorHandle(Document(""), "a.py")

    assert first.identity != second.identity
    assert first.identity.startswith("DocumentEditorHandle@")


def test_closed_handle_is_unavailable():
    editor = DocumentEditorHandle(Document("text"), "a.py")
    editor.close()

    assert editor.is_available() is False
    with pytest.raises(EditorUnavailable):
        editor.caret_offset()
    with pytest.raises(EditorUnavailable):
        editor.file_identity()
