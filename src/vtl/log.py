"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once to render those records with rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "vtl"


def configure_logging(level: int | str = logging.INFO, console: Console | None = None) -> None:
    """Attach a rich handler to the ``vtl`` logger.

    Calling it again replaces the previous handler instead of adding another.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
