import logging
import os
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# Singleton Console instance
def get_console() -> Console:
    if not hasattr(get_console, "_console"):
        get_console._console = Console()
    return get_console._console


def print_panel(content: str, title: str | None = None, style: str = "bold blue", border_style: str | None = None):
    """Print a styled panel with optional title using Rich library.

    Args:
        content (str): The text content to display in the panel.
        title (str | None, optional): Title of the panel. Defaults to None.
        style (str, optional): Rich styling for the panel's content. Defaults to "bold blue".
        border_style (str | None, optional): Styling for the panel's border. Defaults to the content style.
    """
    console = get_console()
    border_style = border_style or style
    console.print(Panel(content, title=title, style=style, border_style=border_style))


def print_table(headers: list[str], rows: list[list[Any]], title: str | None = None):
    """Print a formatted table using Rich library.

    Args:
        headers (list[str]): Column headers for the table.
        rows (list[list[Any]]): Data rows to display in the table.
        title (str | None, optional): Title of the table. Defaults to None.
    """
    console = get_console()
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    console.print(table)


def print_error(message: str, title: str = "Error"):
    print_panel(message, title=title, style="bold red", border_style="red")


class RichConsoleLogger(logging.Logger):
    """Logger that renders through Rich, with an optional debug log file."""

    def __init__(self, name: str):
        super().__init__(name)

        log_level_str = os.getenv("TASKLINK_LOG_LEVEL", "INFO").upper()
        self.log_level = LOG_LEVELS.get(log_level_str, logging.INFO)
        self.setLevel(self.log_level)

        handler = RichHandler(rich_tracebacks=True, level=self.log_level, console=get_console())
        self.addHandler(handler)

        debug_mode = os.getenv("TASKLINK_DEBUG", "").lower() in ["true", "1", "yes"]
        log_file = os.getenv("TASKLINK_LOG_FILE")
        if debug_mode and log_file:
            try:
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
                self.addHandler(file_handler)
            except OSError as error:
                self.error(f"Failed to set up file logging: {error}")

    def success(self, message: str, *args, **kwargs):
        """Log a success message at INFO level with a check mark."""
        if args:
            message = message % args
        super().info(f"✔ {message}", **kwargs)


# Singleton logger instance
_console_logger = None


def get_console_logger() -> RichConsoleLogger:
    """Get a singleton instance of RichConsoleLogger with log level from environment variables.

    Environment variables:
        TASKLINK_LOG_LEVEL: Set the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        TASKLINK_DEBUG: Enable debug mode with file logging (true, 1, yes)
        TASKLINK_LOG_FILE: Log file path used in debug mode

    Returns:
        RichConsoleLogger: Configured logger instance
    """
    global _console_logger
    if _console_logger is None:
        _console_logger = RichConsoleLogger("tasklink")
    return _console_logger
