"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single stdout handler to the ``hoaxify`` logger tree."""
    logger = logging.getLogger("hoaxify")
    logger.setLevel(level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(handler)
    return logger
