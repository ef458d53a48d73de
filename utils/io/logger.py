import logging
import os
from typing import Optional

from rich.console import Console
from rich.markup import escape

# stdout is reserved for the MCP stdio transport
console = Console(stderr=True)

# Configure persistent file logging
LOG_FILE = os.getenv("LOCALSEARCH_LOG_FILE", "localsearch.log")

logger_instance = logging.getLogger("localsearch")
logger_instance.setLevel(logging.INFO)

if LOG_FILE:
    # Ensure log file exists with restrictive permissions (0600)
    if not os.path.exists(LOG_FILE):
        with open(LOG_FILE, "a"):
            os.chmod(LOG_FILE, 0o600)

    file_handler = logging.FileHandler(LOG_FILE)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger_instance.addHandler(file_handler)


class SystemLogger:
    """
    Centralized logger for LocalSearch.
    Respects LOCALSEARCH_QUIET and provides consistent styling and file persistence.
    """

    @staticmethod
    def _is_quiet() -> bool:
        return os.getenv("LOCALSEARCH_QUIET", "false").lower() == "true"

    @staticmethod
    def info(msg: str):
        """Log info - writes to file and console (unless quiet mode)."""
        logger_instance.info(msg)
        if not SystemLogger._is_quiet():
            console.print(f"[dim]INFO:[/dim] {escape(msg)}", highlight=False)

    @staticmethod
    def debug(msg: str):
        """Debug log - shows in console if not quiet, always goes to file."""
        logger_instance.debug(msg)
        if not SystemLogger._is_quiet():
            console.print(f"[dim]{escape(msg)}[/dim]", highlight=False)

    @staticmethod
    def success(msg: str):
        """Success log - shows in console with green checkmark."""
        logger_instance.info(f"SUCCESS: {msg}")
        if not SystemLogger._is_quiet():
            console.print(f"[green]✓ {escape(msg)}[/green]", highlight=False)

    @staticmethod
    def warning(msg: str):
        """Warning log - always shows in console."""
        logger_instance.warning(msg)
        console.print(f"[yellow]⚠ WARNING:[/yellow] {escape(msg)}", highlight=False)

    @staticmethod
    def error(msg: str, detail: Optional[str] = None):
        """Error log - always shows in console."""
        if detail:
            logger_instance.error(f"{msg} - {detail}")
        else:
            logger_instance.error(msg)
        console.print(f"[bold red]✗ ERROR:[/bold red] {escape(msg)}", highlight=False)
        if detail and not SystemLogger._is_quiet():
            console.print(f"[dim red]  {escape(detail)}[/dim red]", highlight=False)


# Global singleton
logger = SystemLogger()
