import logging
from typing import Any, Dict, List, Optional, Sequence

from rich.box import HEAVY, SIMPLE, ROUNDED
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from freelookup.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None, plain: bool = False):
        """Initializes the rich Console.

        Args:
            console: Console to render to (tests inject a recording console).
            plain: Print raw text without panels, for piping JSON/CSV.
        """
        self._console = console or Console()
        self._error_console = console or Console(stderr=True)
        self.plain = plain

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays output text, rendering Markdown inside a panel.

        Args:
            output: The text to display.
            **kwargs: Additional arguments including:
                - title: Panel title (default: no title)
                - markdown: Render as Markdown (default True)
        """
        if self.plain:
            self.console.print(output, markup=False, highlight=False, emoji=False, soft_wrap=True)
            return
        title = kwargs.get("title")
        renderable = Markdown(str(output)) if kwargs.get("markdown", True) else Text(str(output))
        self.console.print(Panel(
            renderable,
            title=f"[bold white]{title}[/bold white]" if title else None,
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1),
        ))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
            **kwargs: `hint` adds a suggested next action below the message.
        """
        text = Text(error_message, style="white")
        hint = kwargs.get("hint")
        if hint:
            text.append(f"\n\nHint: {hint}", style="italic yellow")
        panel = Panel(
            text,
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self._error_console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message."""
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self._error_console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message."""
        logger.debug(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self._error_console.print(panel)

    def display_table(self, rows: Sequence[Dict[str, Any]], title: str = "", **kwargs: Any) -> None:
        """Renders records as a table; columns follow the first row's keys."""
        if not rows:
            self.display_info("No rows to display.")
            return
        columns: List[str] = list(rows[0].keys())
        for row in rows[1:]:
            columns.extend(k for k in row if k not in columns)

        table = Table(title=title or None, box=ROUNDED, show_lines=False, header_style="bold cyan")
        for column in columns:
            table.add_column(str(column), overflow="fold")
        for row in rows:
            table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in columns])
        self.console.print(table)

    def display_attempts(self, attempts: List[Any], **kwargs: Any) -> None:
        """Renders the per-provider attempt log of a rotation."""
        table = Table(title="Provider attempts", box=SIMPLE, header_style="bold magenta")
        table.add_column("#", justify="right")
        table.add_column("Provider")
        table.add_column("Result")
        table.add_column("Time", justify="right")
        table.add_column("Error", overflow="fold")
        for position, attempt in enumerate(attempts, start=1):
            result = "[green]ok[/green]" if attempt.ok else "[red]failed[/red]"
            error = f"{attempt.error_type}: {attempt.error_message}" if attempt.error_type else ""
            table.add_row(str(position), attempt.provider, result, f"{attempt.elapsed_s * 1000:.0f}ms", error)
        self._error_console.print(table)
