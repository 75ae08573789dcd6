"""Logging configuration for nativesearch.

All modules obtain their logger through get_logger() so that a single call
to setup_logging() from the CLI controls verbosity for the whole package.
"""

import logging
import sys

PACKAGE_LOGGER = "nativesearch"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return a logger scoped under the package logger.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the package logger from CLI verbosity flags.

    Verbose wins over quiet. Calling this repeatedly replaces the handler
    instead of stacking duplicates.

    Args:
        verbose: Enable DEBUG output
        quiet: Only show warnings and errors
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
