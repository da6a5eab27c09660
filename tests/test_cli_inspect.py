import json
from pathlib import Path
from typing import Any, Dict

import pytest
import typer
import yaml
from typer.testing import CliRunner

from inline_suggest.cli import app, handle_exceptions, parse_trigger
from inline_suggest.data.schemas import AutomatedTriggerType, TriggerType
from inline_suggest.errors import MalformedResponse, ProviderError
from inline_suggest.utils import resolve_path

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, clean_home: Path, python_response: Dict[str, Any]):
    """Writes a source file and a recorded JSON response into a temp directory."""
    source_file = tmp_path / "example.py"
    source_file.write_text("def add(x, y):\n    \n")
    response_file = tmp_path / "response.json"
    response_file.write_text(json.dumps(python_response))
    return source_file, response_file


def test_inspect_renders_session(workspace):
    source_file, response_file = workspace

    result = runner.invoke(
        app, ["inspect", str(source_file), "--response", str(response_file), "-o", "19"]
    )

    assert result.exit_code == 0, result.output
    assert "sess-9" in result.output
    assert "example.py" in result.output
    assert "return x + y" in result.output
    assert "selected" in result.output


def test_inspect_with_automated_trigger(workspace):
    source_file, response_file = workspace

    result = runner.invoke(
        app,
        ["inspect", str(source_file), "-r", str(response_file), "-t", "idle-time"],
    )

    assert result.exit_code == 0, result.output
    assert "IdleTime" in result.output


def test_inspect_applies_typeahead(workspace):
    source_file, response_file = workspace

    result = runner.invoke(
        app,
        ["inspect", str(source_file), "-r", str(response_file), "--typeahead", "ret"],
    )

    assert result.exit_code == 0, result.output
    assert "discarded 1 suggestion(s)" in result.output


def test_inspect_accepts_yaml_response(tmp_path: Path, workspace, python_response):
    source_file, _ = workspace
    yaml_file = tmp_path / "response.yaml"
    yaml_file.write_text(yaml.dump(python_response))

    result = runner.invoke(app, ["inspect", str(source_file), "-r", str(yaml_file)])

    assert result.exit_code == 0, result.output
    assert "sess-9" in result.output


def test_inspect_fails_on_malformed_response(tmp_path: Path, workspace, python_response):
    source_file, _ = workspace
    python_response["headers"] = {}
    bad_file = tmp_path / "bad.json"
    bad_file.write_text(json.dumps(python_response))

    result = runner.invoke(app, ["inspect", str(source_file), "-r", str(bad_file)])

    assert result.exit_code == 1


def test_inspect_fails_on_unknown_trigger(workspace):
    source_file, response_file = workspace

    result = runner.invoke(
        app, ["inspect", str(source_file), "-r", str(response_file), "-t", "telepathy"]
    )

    assert result.exit_code == 1


def test_inspect_fails_on_missing_response_file(tmp_path: Path, workspace):
    source_file, _ = workspace

    result = runner.invoke(
        app, ["inspect", str(source_file), "-r", str(tmp_path / "missing.json")]
    )

    assert result.exit_code == 1


@pytest.mark.parametrize(
    "value, subtype",
    [
        ("enter", AutomatedTriggerType.ENTER),
        ("IdleTime", AutomatedTriggerType.IDLE_TIME),
        ("special_characters", AutomatedTriggerType.SPECIAL_CHARACTERS),
    ],
)
def test_parse_automated_trigger(value: str, subtype: AutomatedTriggerType):
    trigger = parse_trigger(value)

    assert trigger.trigger_type == TriggerType.AUTOMATED
    assert trigger.automated_trigger_type == subtype


def test_parse_on_demand_trigger():
    assert parse_trigger("on-demand").is_on_demand


def test_inspect_resolves_response_from_home(
    workspace, clean_home: Path, python_response: Dict[str, Any]
):
    source_file, _ = workspace
    responses_dir = clean_home / "responses"
    responses_dir.mkdir()
    (responses_dir / "recorded.json").write_text(json.dumps(python_response))

    result = runner.invoke(
        app, ["inspect", str(source_file), "-r", "home:responses/recorded.json"]
    )

    assert result.exit_code == 0, result.output
    assert "sess-9" in result.output


def test_resolve_path_expands_home_prefix(clean_home: Path):
    assert resolve_path("home:responses/a.json") == (
        clean_home / "responses" / "a.json"
    ).resolve()


@pytest.mark.parametrize(
    "error, label",
    [
        (ProviderError("throttled", kind="transient"), "Provider unavailable"),
        (MalformedResponse("no headers"), "Error:"),
        (RuntimeError("boom"), "Unexpected error"),
    ],
)
def test_handle_exceptions_labels_failures(capsys, error: Exception, label: str):
    @handle_exceptions
    def failing_command():
        raise error

    with pytest.raises(typer.Exit) as exc_info:
        failing_command()

    assert exc_info.value.exit_code == 1
    assert label in capsys.readouterr().err
