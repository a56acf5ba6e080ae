"""Logging setup for the mdjast CLI."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for mdjast.

    Log levels:
    - Normal: only warnings (document diagnostics) and errors
    - Verbose (-v): INFO, one line per compiled document
    - Debug (MDJAST_DEBUG=1): DEBUG, every evaluated fragment and dropped node
    """
    debug = bool(os.environ.get("MDJAST_DEBUG"))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("mdjast")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
