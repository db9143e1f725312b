"""Console logging for the stack advisor CLI."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


_LOG_THEME = Theme({
    "logging.level.debug": "dim cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
    "logging.level.critical": "bold white on red",
})

ROOT_LOGGER_NAMES = ("stack_advisor", "tech_catalog")

_logging_configured = False


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Attach a RichHandler to the package loggers.

    Calling it again only changes the level.
    """
    global _logging_configured

    level_value = getattr(logging, level.upper())

    for name in ROOT_LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level_value)
        if not _logging_configured:
            handler = RichHandler(
                console=console or Console(theme=_LOG_THEME, stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)
            logger.propagate = False

    _logging_configured = True
