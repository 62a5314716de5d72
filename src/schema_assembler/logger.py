"""Logging for the schema assembler, with a few console helpers for the CLI."""

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class AssemblerLogger(logging.Logger):
    """
    Logger that renders through Rich and adds semantic console output methods.

    Standard levels (debug, info, warning, error, critical) go through the
    RichHandler; ``success``, ``hint``, ``key_value`` and ``print_dict`` write
    straight to the console and are meant for CLI output.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        """
        Initialize the assembler logger.

        Args:
            name: Logger name
            level: Initial log level
        """
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def success(self, message: str) -> None:
        """
        Print a success message in green with a checkmark.

        Args:
            message: Message to display
        """
        self.console.print(f"[green]✓[/green] {message}")

    def hint(self, message: str) -> None:
        """Print a dimmed secondary message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_dict(self, data: dict[str, Any]) -> None:
        """
        Print dictionary data as highlighted JSON.

        Args:
            data: Dictionary to display
        """
        self.console.print_json(json.dumps(data, indent=2))

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """
        Print a formatted key-value pair, e.g. ``Leaf types: 17``.

        Args:
            key: The key/label to display
            value: The value to display
            key_style: Style for the key (default: "dim")
        """
        self.console.print(f"[{key_style}]{key}:[/{key_style}] {value}")


def get_logger(name: str = "schema_assembler") -> AssemblerLogger:
    """
    Get or create an assembler logger instance.

    Args:
        name: Logger name (default: "schema_assembler")

    Returns:
        AssemblerLogger instance
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(AssemblerLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    return logger  # type: ignore[return-value]
