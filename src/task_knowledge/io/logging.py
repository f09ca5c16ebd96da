"""Define utility functions to simplify logging to the CLI."""

import logging

from rich.console import Console

logger = logging.getLogger("task_knowledge")
console = Console()


def log_info(message: str) -> None:
    """Log the given string at the INFO level."""
    logger.info(message)


def log_debug(message: str) -> None:
    """Log the given string at the DEBUG level."""
    logger.debug(message)


def log_warning(message: str) -> None:
    """Log the given string at the WARNING level."""
    logger.warning(message)
