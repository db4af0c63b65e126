"""Console output formatting for the CLI and the sync engine."""

import json
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .utils import format_size


def printable(text: str) -> str:
    """Make text safe for a strict UTF-8 stream.

    Filenames that are not valid UTF-8 reach Python as lone surrogates
    (surrogateescape). Their raw bytes are shown as backslash escapes.
    """
    raw = text.encode("utf-8", "surrogateescape")
    return raw.decode("utf-8", "backslashreplace")


class OutputFormatter:
    """Writes user-facing messages through rich consoles.

    Regular messages go to stdout, warnings and errors to stderr. In JSON
    mode only ``output_json`` and errors produce output; in quiet mode
    informational messages are suppressed.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        # soft_wrap keeps long paths on a single line
        self.console = Console(soft_wrap=True, highlight=False, emoji=False)
        self.err_console = Console(
            stderr=True, soft_wrap=True, highlight=False, emoji=False
        )

    @property
    def _silent(self) -> bool:
        return self.quiet or self.json_output

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self._silent:
            return
        self.console.print(printable(message), markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self._silent:
            return
        self.console.print(printable(message), markup=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.json_output:
            return
        self.console.print(f"[green]{escape(printable(message))}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        if self.quiet:
            return
        self.err_console.print(f"[yellow]{escape(printable(message))}[/yellow]")

    def error(self, message: str) -> None:
        """Print an error to stderr. Never suppressed."""
        self.err_console.print(f"[red]{escape(printable(message))}[/red]")

    def output_json(self, data: Any) -> None:
        """Print data as JSON to stdout."""
        self.console.print(
            json.dumps(data, indent=2, default=str), markup=False, highlight=False
        )

    def print_table(
        self,
        title: Optional[str],
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> None:
        """Print rows as a rich table.

        Args:
            title: Optional table title
            columns: Column headers
            rows: Row values, converted with str()
        """
        if self._silent:
            return
        table = Table(title=escape(printable(title)) if title else None)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(escape(printable(str(value))) for value in row))
        self.console.print(table)

    def format_size(self, size_bytes: int) -> str:
        """Format bytes to a human-readable size."""
        return format_size(size_bytes)
