from pathlib import Path
from typing import Any, Dict

import pytest

from inline_suggest import config as suggest_config
from inline_suggest import utils
from inline_suggest.engine.editor import DocumentEditorHandle

PYTHON_FILE_NAME = "test.py"
PYTHON_TEST_CODE = """def addTwoNumbers(x, y):
    # add two numbers
    return x + y

def fib(n):
    \"\"\"Return the nth fibonacci number.\"\"\"
"""


@pytest.fixture
def clean_home(tmp_path: Path, monkeypatch):
    """
    Creates a pristine, isolated inline-suggest home for each test and
    redirects every part of the library to use it.
    """
    temp_home = tmp_path / ".inline_suggest"
    temp_home.mkdir()

    monkeypatch.setattr(utils, "INLINE_SUGGEST_HOME", temp_home)
    monkeypatch.setattr(suggest_config, "INLINE_SUGGEST_HOME", temp_home)
    for env_key in suggest_config.ENV_OVERRIDES:
        monkeypatch.delenv(env_key, raising=False)

    yield temp_home


@pytest.fixture
def python_editor() -> DocumentEditorHandle:
    """An editor showing a small Python file with the caret mid-document."""
    caret = PYTHON_TEST_CODE.index("return x + y")
    return DocumentEditorHandle.from_text(
        PYTHON_TEST_CODE, PYTHON_FILE_NAME, caret_offset=caret, identity="editor-1"
    )


@pytest.fixture
def python_response() -> Dict[str, Any]:
    """A provider payload with three recommendations, shaped as on the wire."""
    return {
        "recommendations": [
            {"content": "return x + y"},
            {"content": "return sum([x, y])"},
            {"content": "result = x + y\n    return result"},
        ],
        "responseMetadata": {"requestId": "req-1"},
        "headers": {"session-id": "sess-9", "content-type": "application/json"},
        "completionType": "Block",
    }
