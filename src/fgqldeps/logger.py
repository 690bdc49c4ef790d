"""Package logger: standard levels go through a RichHandler, CLI output through the same console."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class FgqlLogger(logging.Logger):
    """
    Logger used by every fgqldeps module.

    Analyzer modules stick to the standard levels. The console helpers below render command
    output (summaries, tables, lists) and are only called from the CLI.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(console=self.console, rich_tracebacks=True, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, renderable: Any) -> None:
        """Write a string (Rich markup allowed) or a renderable such as a Table."""
        self.console.print(renderable)

    def colored(self, text: str, style: str = "bold cyan") -> None:
        self.print(f"[{style}]{text}[/{style}]")

    def success(self, text: str) -> None:
        self.print(f"[green]✓[/green] {text}")

    def rule(self, title: str, style: str = "bold blue") -> None:
        """Horizontal rule headed by `title`, used above each command's listing."""
        self.console.rule(f"[{style}]{title}")

    def key_value(self, label: str, value: Any, label_style: str = "dim") -> None:
        """
        One `label: value` line of a summary.

        Args:
            label: Left-hand label, may be indented with leading spaces
            value: Anything printable
            label_style: Rich style of the label
        """
        self.print(f"[{label_style}]{label}:[/{label_style}] {value}")

    def list_item(self, text: str, bullet: str = "-") -> None:
        self.print(f"{bullet} {text}")


def get_logger(name: str = "fgqldeps") -> FgqlLogger:
    """
    Return the FgqlLogger registered under `name`, creating it on first use.

    The logger does not propagate, so records are rendered once by its own RichHandler.
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(FgqlLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)
    logger.propagate = False

    return logger  # type: ignore[return-value]
