"""
chunkscribe.logging - Centralized logging configuration.

All modules log under the ``chunkscribe`` namespace. Each module takes a
child logger with ``get_logger("<module>")`` (``chunkscribe.pipeline``,
``chunkscribe.client``, ...) so one ``configure_logging`` call controls them
all. User-facing output goes through the CLI's Rich console, not logging.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("chunkscribe")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the chunkscribe package.

    Args:
        verbose: If True, enable DEBUG level logging; otherwise WARNING level
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``chunkscribe.pipeline``."""
    return logger.getChild(name)
