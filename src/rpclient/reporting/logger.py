"""Logging setup — maps a verbosity selector onto the rpclient logger tree."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "rpclient"

VERBOSITY_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(verbosity: str = "info") -> logging.Logger:
    """Set the rpclient log level and attach a console handler once.

    Args:
        verbosity: One of debug, info, warn/warning, error (case-insensitive).

    Returns:
        The configured package logger.

    Raises:
        ValueError: If the verbosity is unknown.
    """
    level = VERBOSITY_LEVELS.get(verbosity.lower())
    if level is None:
        raise ValueError(f"unknown verbosity: {verbosity}")

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger
