"""
Logging configuration.

Sets up the 'vaultframe' logger with a rich handler on stderr.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure the 'vaultframe' namespace logger.

    Args:
        level: Logging level (e.g. logging.DEBUG)
    """
    logger = logging.getLogger("vaultframe")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
