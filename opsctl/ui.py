"""
Output sinks shared by every command in the process.

A single Ui instance is created at start-up and handed to every command
factory so that all command output goes through one writer.
"""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape


class Ui:
    """Write-only line sink."""

    def output(self, line: str) -> None:
        raise NotImplementedError

    def error(self, line: str) -> None:
        raise NotImplementedError

    def info(self, line: str) -> None:
        self.output(line)

    def warn(self, line: str) -> None:
        self.error(line)


class ConsoleUi(Ui):
    """Ui backed by rich consoles on stdout and stderr"""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)

    def output(self, line: str) -> None:
        self.console.print(escape(line), soft_wrap=True)

    def error(self, line: str) -> None:
        self.error_console.print(f"[red]{escape(line)}[/red]", soft_wrap=True)

    def info(self, line: str) -> None:
        self.console.print(f"[cyan]{escape(line)}[/cyan]", soft_wrap=True)

    def warn(self, line: str) -> None:
        self.error_console.print(f"[yellow]{escape(line)}[/yellow]", soft_wrap=True)


class BufferUi(Ui):
    """Ui that records lines in memory, for tests and embedding."""

    def __init__(self):
        self.lines: List[Tuple[str, str]] = []

    def output(self, line: str) -> None:
        self.lines.append(("output", line))

    def error(self, line: str) -> None:
        self.lines.append(("error", line))

    def info(self, line: str) -> None:
        self.lines.append(("info", line))

    def warn(self, line: str) -> None:
        self.lines.append(("warn", line))

    @property
    def output_lines(self) -> List[str]:
        return [line for stream, line in self.lines if stream in ("output", "info")]

    @property
    def error_lines(self) -> List[str]:
        return [line for stream, line in self.lines if stream in ("error", "warn")]

    def clear(self) -> None:
        self.lines.clear()
