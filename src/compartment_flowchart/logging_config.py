"""Console and file handlers for the ``compartment_flowchart`` logger."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "compartment_flowchart"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Attach handlers to the package logger and return it.

    Module loggers (``compartment_flowchart.layout`` and so on) propagate here,
    so one call covers layout, topology and routing messages. Calling again
    replaces the handlers from the previous call. ``log_file`` is truncated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("logging to %d handler(s)", len(handlers))
    return logger
