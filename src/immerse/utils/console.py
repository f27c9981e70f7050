"""Shared rich console and logging setup.

User-facing progress goes through ``console``. Diagnostics go through the
``immerse`` logger, rendered by rich so both share one terminal cleanly even
when several pipelines run in worker threads.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()

logger = logging.getLogger("immerse")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the immerse package.

    Args:
        verbose: If True, enable DEBUG level logging; otherwise WARNING level.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=verbose, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
