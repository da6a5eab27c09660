from abc import ABC, abstractmethod
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..data.schemas import InvocationContext

SelectCallback = Callable[[int], int]
DiscardCallback = Callable[[int], None]


class BaseRenderer(ABC):
    """
    An abstract sink for finished invocation contexts. The core makes no
    assumption about how (or whether) the suggestions are drawn.
    """

    @abstractmethod
    def render(
        self,
        context: InvocationContext,
        on_select: SelectCallback,
        on_discard: DiscardCallback,
    ):
        """
        Presents an invocation.

        Args:
            context: The assembled, read-only invocation context.
            on_select: Moves the selection by a step (+1 next, -1 previous)
                and returns the new selected index.
            on_discard: Discards the suggestion at an index.
        """
        pass


class RichConsoleRenderer(BaseRenderer):
    """Prints an invocation to the terminal with rich. Used by the CLI."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.last_context: Optional[InvocationContext] = None

    def render(
        self,
        context: InvocationContext,
        on_select: SelectCallback,
        on_discard: DiscardCallback,
    ):
        self.last_context = context
        self.show(context)

    def show(self, context: InvocationContext):
        snapshot = context.request_snapshot
        trigger = snapshot.trigger_type_info
        trigger_text = trigger.trigger_type.value
        if not trigger.is_on_demand:
            trigger_text += f" ({trigger.automated_trigger_type.value})"

        summary = (
            f"[bold]File:[/bold] [cyan]{snapshot.file_context.filename}[/cyan] "
            f"({snapshot.file_context.language_id})\n"
            f"[bold]Caret:[/bold] offset {snapshot.caret_position.offset}, "
            f"line {snapshot.caret_position.line}\n"
            f"[bold]Trigger:[/bold] {trigger_text}\n"
            f"[bold]Session:[/bold] {context.response_context.session_id} "
            f"([green]{context.response_context.completion_type.value}[/green])"
        )
        state = context.session_state
        if state.typeahead:
            summary += (
                f"\n[bold]Typeahead:[/bold] {escape(repr(state.typeahead))} "
                f"(first: {escape(repr(state.typeahead_original))})"
            )
        self.console.print(Panel(summary, title="Invocation", border_style="yellow"))

        if not context.recommendation_context.suggestions:
            self.console.print("[dim]No suggestions returned.[/dim]")
            return

        table = Table(title="[bold]Suggestions[/bold]", box=box.ROUNDED, show_lines=True)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Request ID", style="magenta")
        table.add_column("Content", overflow="fold")
        table.add_column("Status")
        for index, suggestion in enumerate(context.recommendation_context.suggestions):
            if suggestion.is_discarded:
                status = "[dim]discarded[/dim]"
            elif index == state.selected_index:
                status = "[bold green]selected[/bold green]"
            else:
                status = ""
            table.add_row(
                str(index), suggestion.request_id, escape(suggestion.content), status
            )
        self.console.print(table)
