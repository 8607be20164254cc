"""Logging for gqltypes with rich console output."""

import logging
from typing import cast

from rich.console import Console
from rich.logging import RichHandler


class GqlTypesLogger(logging.Logger):
    """
    Logger that combines Python logging with CLI output helpers.

    Library code only uses the standard levels (debug, info, warning, error).
    `print` and `success` are for the command line.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        """
        Initialize the logger with a rich handler.

        Args:
            name: Logger name
            level: Initial log level
        """
        super().__init__(name, level)
        self.console = Console(stderr=True)

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, message: str, markup: bool = True) -> None:
        """
        Print a plain message.

        Args:
            message: Message to display
            markup: Interpret rich markup in the message. Disable it for text
                that may contain brackets, e.g. rendered errors. Such text
                is printed verbatim, without wrapping.
        """
        self.console.print(message, markup=markup, highlight=markup, soft_wrap=not markup)

    def success(self, message: str) -> None:
        """Print a success message in green with a checkmark."""
        self.print(f"[green]✓[/green] {message}")


def get_logger(name: str = "gqltypes") -> GqlTypesLogger:
    """
    Get or create a gqltypes logger instance.

    Args:
        name: Logger name (default: "gqltypes")

    Returns:
        GqlTypesLogger instance
    """
    logging.setLoggerClass(GqlTypesLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(logging.Logger)

    return cast(GqlTypesLogger, logger)
