"""Logging setup."""

import logging

from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """Route all loggers through a rich handler."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(name)s: %(message)s",
        datefmt="[%Y-%m-%d %H:%M]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
