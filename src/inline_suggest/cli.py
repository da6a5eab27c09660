import asyncio
import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.traceback import Traceback

from inline_suggest.config import load_config
from inline_suggest.data.schemas import AutomatedTriggerType, TriggerTypeInfo
from inline_suggest.engine.editor import DocumentEditorHandle
from inline_suggest.engine.normalizer import ResponseNormalizer
from inline_suggest.errors import InlineSuggestError, ProviderError
from inline_suggest.interactive.orchestrator import InvocationOrchestrator
from inline_suggest.interactive.renderer import RichConsoleRenderer
from inline_suggest.interactive.session import SessionStateTracker
from inline_suggest.providers.recorded import RecordedResponseProvider
from inline_suggest.state import APP_STATE
from inline_suggest.utils import resolve_path

console = Console()
_log_handler: Optional[logging.Handler] = None


def setup_logging(verbose: bool):
    """
    Configures structlog for the entire application.
    - Default level: INFO
    - Verbose level: DEBUG
    - All logs are routed to stderr to keep stdout clean for piping.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    global _log_handler
    root_logger = logging.getLogger()
    # Replace the handler from an earlier call; sys.stderr may have changed since.
    if _log_handler is not None:
        root_logger.removeHandler(_log_handler)
    _log_handler = logging.StreamHandler(sys.stderr)
    root_logger.addHandler(_log_handler)
    root_logger.setLevel(log_level)


def handle_exceptions(func):
    """
    Turns failures into a one-line message and exit code 1. Library errors are
    expected outcomes; anything else is reported as unexpected. Tracebacks
    are shown only with --verbose.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        err_console = Console(stderr=True)
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            if isinstance(e, ProviderError) and e.is_transient:
                label = "Provider unavailable (retry later)"
            elif isinstance(e, (InlineSuggestError, typer.BadParameter)):
                label = "Error"
            else:
                label = "Unexpected error"
            err_console.print(f"[bold red]{label}:[/bold red] {escape(str(e))}")
            if APP_STATE.verbose_mode:
                err_console.print(
                    Traceback.from_exception(
                        type(e), e, e.__traceback__, show_locals=True
                    )
                )
            raise typer.Exit(code=1)

    return wrapper


def parse_trigger(value: str) -> TriggerTypeInfo:
    """
    Parses a trigger name from the command line: `on-demand`, or the name of
    an automated subtype such as `enter` or `idle-time`.
    """
    wanted = value.replace("-", "").replace("_", "").lower()
    if wanted == "ondemand":
        return TriggerTypeInfo.on_demand()
    for subtype in AutomatedTriggerType:
        if subtype.value.lower() == wanted:
            return TriggerTypeInfo.automated(subtype)
    choices = ", ".join(
        ["on-demand"] + [subtype.value for subtype in AutomatedTriggerType]
    )
    raise typer.BadParameter(f"Unknown trigger '{value}'. Choose one of: {choices}.")


# --- Main Application Definition ---
app = typer.Typer(
    name="inline-suggest",
    help="Inspect inline completion sessions against recorded provider responses.",
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose DEBUG logging for detailed tracebacks.",
    ),
):
    APP_STATE.verbose_mode = verbose
    setup_logging(verbose)


@app.command()
@handle_exceptions
def inspect(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="The source file to complete in."
    ),
    response: str = typer.Option(
        ..., "--response", "-r", help="A recorded provider response (YAML or JSON)."
    ),
    offset: Optional[int] = typer.Option(
        None, "--offset", "-o", help="Caret offset. Defaults to the end of the file."
    ),
    trigger: str = typer.Option(
        "on-demand", "--trigger", "-t", help="on-demand, or an automated subtype."
    ),
    user_input: str = typer.Option(
        "", "--user-input", help="Text typed while the request was in flight."
    ),
    typeahead: Optional[str] = typer.Option(
        None, "--typeahead", help="Text typed after the suggestions were shown."
    ),
):
    """
    Replays a recorded response through a full completion session and shows
    the resulting suggestions.
    """
    trigger_info = parse_trigger(trigger)
    config = load_config()

    editor = DocumentEditorHandle.from_text(
        file.read_text(), file.name, caret_offset=offset
    )
    provider = RecordedResponseProvider.from_file(resolve_path(response))
    tracker = SessionStateTracker()
    renderer = RichConsoleRenderer(console)
    orchestrator = InvocationOrchestrator(
        tracker, provider, renderer, normalizer=ResponseNormalizer(config)
    )

    context = asyncio.run(orchestrator.invoke(editor, trigger_info, user_input))
    if context is None:
        console.print("[yellow]Invocation was abandoned.[/yellow]")
        raise typer.Exit(code=1)

    if typeahead:
        # Replay the typeahead one keystroke at a time, as an editor would.
        for end in range(1, len(typeahead) + 1):
            tracker.on_typeahead_changed(typeahead[:end])
        discarded = tracker.filter_by_typeahead()
        console.print(
            f"[bold]Typeahead[/bold] {typeahead!r} discarded {len(discarded)} suggestion(s)."
        )
        renderer.show(context.with_session_state(tracker.state))


if __name__ == "__main__":
    app()
