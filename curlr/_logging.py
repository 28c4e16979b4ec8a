"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from ._config import Verbosity

_LEVELS = {
    Verbosity.VERBOSE: logging.DEBUG,
    Verbosity.NORMAL: logging.WARNING,
}


def configure_logging(verbosity: Verbosity) -> logging.Logger:
    """Route the ``curlr`` loggers to stderr according to ``verbosity``.

    Silent runs get a ``NullHandler`` and emit nothing at all.
    """
    logger = logging.getLogger("curlr")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = False

    if verbosity is Verbosity.SILENT:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(_LEVELS[verbosity])
    return logger


__all__ = ["configure_logging"]
