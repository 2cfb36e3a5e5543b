"""Logging setup for the docchat command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s - %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str | int | None, default: int = logging.WARNING) -> int:
    """Turn a level name such as ``"info"`` into a logging level."""
    if isinstance(level, int):
        return level
    if not level:
        return default
    return _LEVELS.get(level.strip().lower(), default)


def configure_logging(level: str | int | None = None, console: Console | None = None) -> None:
    """Send docchat log records to stderr through rich.

    Call once at startup. Only the ``docchat`` logger tree is configured so
    library loggers keep their own defaults.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("docchat")
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(parse_level(level))
    root.propagate = False
