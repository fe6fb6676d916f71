import logging
from datetime import datetime
from typing import Optional, Any, Dict, List

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.box import ROUNDED, HEAVY, SIMPLE
from rich.text import Text
from rich.table import Table
from rich.align import Align

from sagecli.domain.interfaces.user_interface import UserInterface
from sagecli.domain.models.common import PromptText, ProcessedOutput

logger = logging.getLogger(__name__)

# Longest cell rendered in record tables
MAX_CELL_LENGTH = 120

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()
        self.message_count = 0

    @property
    def console(self):
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays output text to the user, rendering Markdown in a panel.

        Args:
            output: The processed output string to display.
            **kwargs: Additional arguments including:
                - title: The title/sender of the message (default: "SAGE")
        """
        title = kwargs.get("title", "SAGE")
        self.message_count += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        header = f"[bold white]{title}[/bold white] [dim]·[/dim] [dim white]{timestamp}[/dim white]"

        output_str = str(output)
        try:
            panel = Panel(
                Markdown(output_str),
                title=header,
                title_align="left",
                border_style="blue",
                box=ROUNDED,
                padding=(0, 1)
            )
            self.console.print(panel)
        except Exception as e:
            # Fallback if Rich formatting fails
            logger.error(f"Error displaying formatted message: {e}")
            self.console.print(f"\n{title} ({timestamp}):\n{output_str}\n")

    def display_records(
        self,
        records: List[Dict[str, Any]],
        columns: List[str],
        title: Optional[str] = None,
    ) -> None:
        """Renders structured records as a rich table."""
        logger.debug(f"Displaying {len(records)} records with columns {columns}")
        table = Table(title=title, show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("#", style="cyan", justify="right")
        for column in columns:
            table.add_column(column.capitalize(), overflow="fold")

        for i, record in enumerate(records, 1):
            cells = []
            for column in columns:
                value = record.get(column, "")
                if isinstance(value, list):
                    value = ", ".join(str(v) for v in value)
                text = str(value)
                if len(text) > MAX_CELL_LENGTH:
                    text = text[:MAX_CELL_LENGTH - 3] + "..."
                cells.append(text)
            table.add_row(str(i), *cells)

        self.console.print(table)

    def get_prompt(self, prompt_message: str = "> ") -> PromptText:
        """Gets input prompt from the user using rich console.

        Args:
            prompt_message: The message to display before the input cursor.

        Returns:
            The text input by the user.
        """
        self.console.print("")
        user_input = self.console.input(f"[bold green on dark_green] {prompt_message} [/bold green on dark_green] ")
        self.message_count += 1
        return PromptText(user_input)

    def _notice(self, message: str, label: str, color: str, box=HEAVY) -> None:
        self.console.print(Panel(
            Text(message, style="white"),
            title=f"[bold {color}]{label}[/bold {color}]",
            border_style=color,
            box=box,
            padding=(0, 1),
        ))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays a gateway or input error in a red panel."""
        self._notice(error_message, "Error", "red")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self._notice(info_message, "Info", "blue", box=SIMPLE)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        self._notice(warning_message, "Warning", "yellow")

    def display_session_header(self, mode: str = "SAGE") -> None:
        """Displays a stylized header for a new chat session."""
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row(f"[bold cyan]{mode} session[/bold cyan]")
        table.add_row(f"Session started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        table.add_row("Type 'exit' or 'quit' to end the session")
        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        """Displays a stylized footer at the end of a chat session."""
        minutes, seconds = divmod(int(session_duration_secs), 60)
        hours, minutes = divmod(minutes, 60)
        duration_str = f"{hours}h {minutes}m {seconds}s" if hours else f"{minutes}m {seconds}s"

        table = Table(show_header=False, box=SIMPLE, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]Chat Session Summary[/bold cyan]")
        table.add_row(f"Messages exchanged: [bold]{message_count}[/bold]")
        table.add_row(f"Session duration: [bold]{duration_str}[/bold]")
        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")
