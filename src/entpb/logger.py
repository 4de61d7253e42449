"""Logging for entpb, with the console helpers used by the command line."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


class EntpbLogger(logging.Logger):
    """
    Logger writing records through rich, plus console helpers for CLI reports.

    Records go through a ``RichHandler``; the helpers print straight to the same
    console and bypass the log level, so reports stay visible with ``--log-level ERROR``.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(console=self.console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def _styled(self, text: str, style: str = "") -> None:
        self.console.print(f"[{style}]{escape(text)}[/{style}]" if style else escape(text))

    def success(self, message: str) -> None:
        """Print ``message`` after a green check mark."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def hint(self, message: str) -> None:
        """Print a secondary, dimmed message."""
        self._styled(message, "dim")

    def rule(self, title: str, style: str = "bold blue") -> None:
        self.console.rule(f"[{style}]{escape(title)}")

    def key_value(self, key: str, value: Any) -> None:
        """
        Print a ``key: value`` line with a dimmed key.

        Args:
            key: The label
            value: Anything printable
        """
        self.console.print(f"[dim]{escape(key)}:[/dim] {escape(str(value))}")

    def list_item(self, text: str, style: str = "") -> None:
        self._styled(f"- {text}", style)

    def rpc(self, name: str, input_type: str, output_type: str) -> None:
        """Print a method the way it is declared in a .proto service block."""
        self.console.print(
            f"- rpc [bold]{escape(name)}[/bold]({escape(input_type)}) returns ({escape(output_type)})"
        )

    def print_dict(self, data: dict[str, Any]) -> None:
        """Print ``data`` as highlighted JSON."""
        self.console.print_json(data=data)


def get_logger(name: str = "entpb") -> EntpbLogger:
    """
    Return the logger called ``name``, created as an ``EntpbLogger``.

    The logger class is only swapped while the logger is created, loggers of
    other libraries are unaffected.
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(EntpbLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    return logger  # type: ignore[return-value]
